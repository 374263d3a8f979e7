"""End-to-end job lifecycle: submit, poll, download"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..models.job_schemas import SubmissionRequest, VideoJob
from ..worker.deadline import Deadline
from ..worker.poller import DEFAULT_MAX_WAIT_SECONDS, JobPoller, StatusUpdate
from .artifact_writer import download_artifact, safe_video_filename
from .job_client import VideoJobClient

logger = logging.getLogger(__name__)

JobCallback = Callable[[VideoJob], None]


@dataclass(frozen=True)
class JobOutcome:
    """A finished job and where its video was saved."""
    job: VideoJob
    path: Path


class VideoJobRunner:
    """
    Drive one job at a time from submission to a saved file.

    This service orchestrates:
    1. Create or remix submission
    2. Polling until a terminal state
    3. Atomic download to <destination>/<job id>.mp4

    Every step shares one Deadline, so the whole lifecycle is bounded
    by max_wait_seconds.
    """

    def __init__(
        self,
        client: VideoJobClient,
        poller: JobPoller,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    ):
        self.client = client
        self.poller = poller
        self.max_wait_seconds = max_wait_seconds

    def new_deadline(self) -> Deadline:
        return Deadline(self.max_wait_seconds)

    def run_create(
        self,
        request: SubmissionRequest,
        destination_dir: Path,
        deadline: Optional[Deadline] = None,
        on_queued: Optional[JobCallback] = None,
        on_update: Optional[Callable[[StatusUpdate], None]] = None,
        on_downloading: Optional[JobCallback] = None,
    ) -> JobOutcome:
        """
        Generate a new video and save it.

        Args:
            request: Validated submission
            destination_dir: Existing directory for the video
            deadline: Overall deadline (default: max_wait_seconds from now)
            on_queued: Called once the job ID is known
            on_update: Called on each status/progress change
            on_downloading: Called when the job completed

        Returns:
            JobOutcome with the completed job and saved path
        """
        deadline = deadline or self.new_deadline()
        job = self.client.create_video(request, deadline)
        return self._finish(job, destination_dir, deadline, on_queued, on_update, on_downloading)

    def run_remix(
        self,
        video_id: str,
        prompt: str,
        destination_dir: Path,
        deadline: Optional[Deadline] = None,
        on_queued: Optional[JobCallback] = None,
        on_update: Optional[Callable[[StatusUpdate], None]] = None,
        on_downloading: Optional[JobCallback] = None,
    ) -> JobOutcome:
        """Remix an existing video and save the result; see run_create."""
        deadline = deadline or self.new_deadline()
        job = self.client.remix_video(video_id, prompt, deadline)
        return self._finish(job, destination_dir, deadline, on_queued, on_update, on_downloading)

    def _finish(self, job, destination_dir, deadline, on_queued, on_update, on_downloading) -> JobOutcome:
        if on_queued is not None:
            on_queued(job)
        output_path = Path(destination_dir) / safe_video_filename(job.id)

        job = self.poller.wait_for_completion(job.id, deadline, on_update)
        if on_downloading is not None:
            on_downloading(job)

        saved = download_artifact(self.client, job.id, output_path, deadline)
        logger.info(f"[{job.id}] Video saved to {saved}")
        return JobOutcome(job=job, path=saved)
