"""Request body encoding for create and remix submissions"""
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from ..models.job_schemas import SubmissionRequest
from .attachment import Attachment

REFERENCE_FIELD = "input_reference"

# httpx multipart part: (filename, content, content_type); filename None = plain field
Part = Tuple[Optional[str], Union[str, BinaryIO], Optional[str]]


@dataclass
class EncodedSubmission:
    """Form fields plus the optional reference file for POST /v1/videos."""
    fields: Dict[str, str]
    attachment: Optional[Attachment] = None

    def multipart(self) -> List[Tuple[str, Part]]:
        """
        Parts in httpx ``files=`` form.

        Text fields go in as filename-less parts so the body is always
        multipart/form-data, with or without a reference file.
        """
        parts: List[Tuple[str, Part]] = [
            (name, (None, value, None)) for name, value in self.fields.items()
        ]
        if self.attachment is not None:
            parts.append((
                REFERENCE_FIELD,
                (self.attachment.filename, self.attachment.stream, self.attachment.content_type),
            ))
        return parts


def encode_create(request: SubmissionRequest, attachment: Optional[Attachment] = None) -> EncodedSubmission:
    """
    Build the multipart body for POST /v1/videos.

    Empty optional fields are left out entirely; the service treats an
    absent field differently from an empty one.

    Args:
        request: Validated submission parameters
        attachment: Classified reference file, stream rewound to 0

    Returns:
        EncodedSubmission
    """
    fields = {"prompt": request.prompt}
    if request.model:
        fields["model"] = request.model
    if request.seconds:
        fields["seconds"] = str(request.seconds)
    if request.size:
        fields["size"] = request.size
    return EncodedSubmission(fields=fields, attachment=attachment)


def encode_remix(prompt: str) -> Dict[str, str]:
    """JSON body for POST /v1/videos/{id}/remix."""
    return {"prompt": prompt.strip()}
