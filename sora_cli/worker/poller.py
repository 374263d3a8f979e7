"""Polling loop that waits for a video job to finish"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import ProgressBoundary
from ..exceptions import JobFailedError
from ..models.job_schemas import JobState, VideoJob
from .deadline import Deadline

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_MAX_WAIT_SECONDS = 30 * 60


def normalize_progress(value: Optional[float], boundary: ProgressBoundary = ProgressBoundary.FRACTION) -> float:
    """
    Put a raw progress value on a 0-100 scale.

    The service reports either a fraction (0-1) or a percentage (0-100).
    Values in [0, 1) are fractions and values above 1 are percentages.
    Exactly 1.0 is ambiguous: FRACTION reads it as 100%, PERCENT as 1%.

    Args:
        value: Raw progress, None is treated as 0
        boundary: Interpretation of 1.0

    Returns:
        Progress in percent
    """
    if value is None:
        return 0.0
    if 0 <= value < 1:
        return value * 100
    if value == 1 and boundary is ProgressBoundary.FRACTION:
        return 100.0
    return float(value)


@dataclass(frozen=True)
class StatusUpdate:
    """An observable change in job status or progress."""
    status: str
    progress: float
    job: VideoJob

    def __str__(self) -> str:
        return f"Status: {self.status} ({self.progress:.0f}%)"


class JobPoller:
    """
    Poll a job at a fixed interval until it reaches a terminal state.

    Only status/progress changes are reported to the callback. The loop
    is bounded solely by the caller's deadline; there is no backoff.
    """

    def __init__(
        self,
        client,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        progress_boundary: ProgressBoundary = ProgressBoundary.FRACTION,
    ):
        self.client = client
        self.poll_interval_seconds = poll_interval_seconds
        self.progress_boundary = progress_boundary

    def wait_for_completion(
        self,
        job_id: str,
        deadline: Optional[Deadline] = None,
        on_update: Optional[Callable[[StatusUpdate], None]] = None,
    ) -> VideoJob:
        """
        Block until the job completes.

        Args:
            job_id: Job to watch
            deadline: Overall deadline (default: 30 minutes)
            on_update: Called with each observable change

        Returns:
            The completed job

        Raises:
            JobFailedError: If the job ends failed/canceled/rejected/expired
            JobTimeoutError: If the deadline expires first
            JobCancelledError: If the deadline is cancelled
        """
        deadline = deadline or Deadline(DEFAULT_MAX_WAIT_SECONDS)
        last_status: Optional[str] = None
        last_progress: Optional[float] = None
        ticks = 0

        logger.info(f"[{job_id}] Waiting for completion (interval={self.poll_interval_seconds}s)")

        while True:
            deadline.sleep(self.poll_interval_seconds)
            job = self.client.get_video(job_id, deadline)
            ticks += 1

            progress = normalize_progress(job.progress, self.progress_boundary)
            if job.status != last_status or progress != last_progress:
                update = StatusUpdate(status=job.status, progress=progress, job=job)
                logger.info(f"[{job_id}] {update}")
                if on_update is not None:
                    on_update(update)
                last_status = job.status
                last_progress = progress

            state = job.state
            if state.is_success:
                logger.info(f"[{job_id}] Completed after {ticks} polls")
                return job
            if state.is_failure:
                message = job.error.message if job.error and job.error.message else f"job {job.status}"
                logger.error(f"[{job_id}] Job {job.status}: {message}")
                raise JobFailedError(job.status, message)
            if state is JobState.UNKNOWN:
                logger.warning(f"[{job_id}] Unrecognised status {job.status!r}, still polling")
