"""Reference file classification for video generation uploads"""
import logging
import mimetypes
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Protocol, Union, runtime_checkable

import filetype

from ..exceptions import UnsupportedAttachmentTypeError

logger = logging.getLogger(__name__)

# Bytes inspected for magic-number sniffing
SNIFF_LENGTH = 512

SUPPORTED_CONTENT_TYPES = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "video/mp4",
)

# Detected MIME type -> canonical upload type
CONTENT_TYPE_ALIASES = {
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/png": "image/png",
    "image/x-png": "image/png",
    "image/webp": "image/webp",
    "video/mp4": "video/mp4",
}


@runtime_checkable
class SeekableSource(Protocol):
    """A binary source that can be read from the start twice."""

    def read(self, size: int = -1) -> bytes: ...

    def seek(self, offset: int, whence: int = 0) -> int: ...

    def seekable(self) -> bool: ...


@dataclass(frozen=True)
class Attachment:
    """Reference file ready for upload; the stream is positioned at byte 0."""
    path: Path
    content_type: str
    stream: BinaryIO

    @property
    def filename(self) -> str:
        return self.path.name


def canonicalize_content_type(mime_type: Optional[str]) -> Optional[str]:
    """
    Collapse a detected MIME type onto the canonical upload type.

    Args:
        mime_type: Raw MIME type, may carry parameters ("image/png; q=1")

    Returns:
        Canonical type or None when the type is not supported
    """
    if not mime_type:
        return None
    mime_type = mime_type.strip().lower().split(";", 1)[0].strip()
    return CONTENT_TYPE_ALIASES.get(mime_type)


def classify_attachment(source: SeekableSource, filename: Union[str, os.PathLike, None] = None) -> str:
    """
    Determine the canonical content type of a reference file.

    Reads at most SNIFF_LENGTH bytes from the current position. The caller
    must seek back to 0 before uploading.

    Args:
        source: Seekable binary source positioned at offset 0
        filename: Name used for the extension fallback

    Returns:
        Canonical content type

    Raises:
        UnsupportedAttachmentTypeError: If neither the bytes nor the extension match
    """
    head = source.read(SNIFF_LENGTH) or b""

    if head:
        kind = filetype.guess(head)
        if kind is not None:
            canonical = canonicalize_content_type(kind.mime)
            if canonical:
                logger.debug(f"Sniffed {kind.mime} from {len(head)} header bytes")
                return canonical

    if filename:
        guessed, _ = mimetypes.guess_type(os.fspath(filename))
        canonical = canonicalize_content_type(guessed)
        if canonical:
            logger.debug(f"Using extension type {guessed} for {filename}")
            return canonical

    raise UnsupportedAttachmentTypeError(
        SUPPORTED_CONTENT_TYPES,
        path=os.fspath(filename) if filename else None,
    )


@contextmanager
def open_attachment(path: Union[str, os.PathLike]) -> Iterator[Attachment]:
    """
    Open and classify a reference file, leaving the stream rewound for upload.

    Args:
        path: Reference file on disk

    Yields:
        Attachment whose stream is at offset 0; closed on exit

    Raises:
        OSError: If the file cannot be opened or read
        UnsupportedAttachmentTypeError: If the file type is not supported
    """
    path = Path(path)
    with open(path, "rb") as stream:
        if not stream.seekable():
            raise ValueError(f"reference file must be seekable: {path}")
        content_type = classify_attachment(stream, path.name)
        stream.seek(0)
        logger.info(f"Reference {path} classified as {content_type}")
        yield Attachment(path=path, content_type=content_type, stream=stream)
