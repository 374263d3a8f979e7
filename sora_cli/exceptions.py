"""Error taxonomy for the video job lifecycle"""
from typing import Iterable, List, Optional


class SoraCliError(Exception):
    """Base class for every error raised by the client."""
    pass


class UnsupportedAttachmentTypeError(SoraCliError):
    """Raised when a reference file is not one of the supported media types."""

    def __init__(self, supported: Iterable[str], path: Optional[str] = None):
        self.supported: List[str] = list(supported)
        self.path = path
        super().__init__(
            f"unsupported reference file type; supported types: {', '.join(self.supported)}"
        )


class RemoteAPIError(SoraCliError):
    """Raised for any non-2xx response from the video API."""

    def __init__(self, status_code: int, message: str, operation: str = ""):
        self.status_code = status_code
        self.message = message
        self.operation = operation
        super().__init__(f"API error ({status_code}): {message}")


class MalformedResponseError(SoraCliError):
    """Raised when a 2xx response lacks a required field or is not decodable."""
    pass


class JobFailedError(SoraCliError):
    """Raised when a job reaches a terminal failure state."""

    def __init__(self, status: str, message: str):
        self.status = status
        self.message = message
        generic = f"job {status}"
        super().__init__(generic if message == generic else f"{generic}: {message}")


class JobTimeoutError(SoraCliError):
    """Raised when the overall deadline expires."""
    pass


class JobCancelledError(SoraCliError):
    """Raised when the caller cancels the in-flight job."""
    pass


class TransportError(SoraCliError):
    """Raised when a request never produced an HTTP response."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class ArtifactWriteError(SoraCliError):
    """Raised when the downloaded video cannot be written to disk."""

    def __init__(self, operation: str, path: str, cause: OSError):
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"{operation} {path}: {cause.strerror or cause}")
