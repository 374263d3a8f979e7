"""Data models for video jobs"""
from .catalog import ALLOWED_DURATIONS, DEFAULT_DURATION, MODEL_OPTIONS, ModelOption, ResolutionOption
from .job_schemas import JobError, JobState, ListPage, ListQuery, SubmissionRequest, VideoJob

__all__ = [
    "ALLOWED_DURATIONS",
    "DEFAULT_DURATION",
    "MODEL_OPTIONS",
    "ModelOption",
    "ResolutionOption",
    "JobError",
    "JobState",
    "ListPage",
    "ListQuery",
    "SubmissionRequest",
    "VideoJob",
]
