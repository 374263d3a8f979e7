"""Schemas for the video generation API"""
import re
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from .catalog import ALLOWED_DURATIONS

SIZE_PATTERN = re.compile(r"^\d+x\d+$")


class JobState(str, Enum):
    """Closed view over the free-form status string reported by the service."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"
    REJECTED = "rejected"
    EXPIRED = "expired"
    UNKNOWN = "unknown"

    @classmethod
    def from_status(cls, status: Optional[str]) -> "JobState":
        """Map a raw status (any case) to a state; unrecognised labels are UNKNOWN."""
        value = (status or "").strip().lower()
        if value == "cancelled":
            return cls.CANCELED
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_success(self) -> bool:
        return self is JobState.COMPLETED

    @property
    def is_failure(self) -> bool:
        return self in _FAILURE_STATES

    @property
    def is_terminal(self) -> bool:
        return self.is_success or self.is_failure


_FAILURE_STATES = frozenset({
    JobState.FAILED,
    JobState.CANCELED,
    JobState.REJECTED,
    JobState.EXPIRED,
})


class JobError(BaseModel):
    """Error embedded in a failed job."""
    message: str = ""
    type: Optional[str] = None
    code: Optional[Union[str, int]] = None

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, value):
        return "" if value is None else value


class VideoJob(BaseModel):
    """Video job as reported by the service."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    object: Optional[str] = None
    status: str = ""
    progress: float = 0.0
    model: Optional[str] = None
    seconds: Optional[int] = None
    size: Optional[str] = None
    quality: Optional[str] = None
    created_at: Optional[int] = None
    completed_at: Optional[int] = None
    expires_at: Optional[int] = None
    remixed_from_video_id: Optional[str] = None
    error: Optional[JobError] = None

    @field_validator("id", "status", mode="before")
    @classmethod
    def _null_string(cls, value):
        return "" if value is None else value

    @field_validator("progress", mode="before")
    @classmethod
    def _progress_default(cls, value):
        return 0.0 if value is None else value

    @field_validator("seconds", mode="before")
    @classmethod
    def _blank_seconds(cls, value):
        # The service sends seconds as a string; "" means unset
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def state(self) -> JobState:
        return JobState.from_status(self.status)


class SubmissionRequest(BaseModel):
    """Validated parameters for a new generation."""

    prompt: str
    model: str = ""
    seconds: Optional[int] = None
    size: str = ""
    attachment_path: Optional[Path] = None

    @field_validator("prompt")
    @classmethod
    def _prompt_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("prompt must not be empty")
        return value

    @field_validator("seconds")
    @classmethod
    def _seconds_allowed(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value not in ALLOWED_DURATIONS:
            allowed = ", ".join(str(s) for s in ALLOWED_DURATIONS)
            raise ValueError(f"seconds must be one of {allowed}")
        return value

    @field_validator("model")
    @classmethod
    def _strip_model(cls, value: str) -> str:
        return value.strip()

    @field_validator("size")
    @classmethod
    def _size_format(cls, value: str) -> str:
        value = value.strip()
        if value and not SIZE_PATTERN.match(value):
            raise ValueError("size must look like WIDTHxHEIGHT")
        return value


class ListQuery(BaseModel):
    """Pagination parameters for listing videos. A limit of 0 is not sent."""

    limit: int = 0
    after: str = ""
    order: Optional[Literal["asc", "desc"]] = None

    @field_validator("limit")
    @classmethod
    def _limit_range(cls, value: int) -> int:
        if value < 0 or value > 100:
            raise ValueError("limit must be between 1 and 100 (0 to omit)")
        return value

    @field_validator("order", mode="before")
    @classmethod
    def _blank_order(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    def params(self) -> dict:
        """Query parameters with empty values omitted."""
        params = {}
        if self.limit > 0:
            params["limit"] = str(self.limit)
        if self.after:
            params["after"] = self.after
        if self.order:
            params["order"] = self.order
        return params


class ListPage(BaseModel):
    """One page of the video listing."""

    model_config = ConfigDict(extra="ignore")

    object: Optional[str] = None
    data: List[VideoJob] = []
    has_more: bool = False
    next: Optional[str] = None
    next_cursor: Optional[str] = None

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value):
        return [] if value is None else value

    @property
    def cursor(self) -> str:
        """Continuation cursor, whichever field the service filled."""
        return self.next or self.next_cursor or ""
