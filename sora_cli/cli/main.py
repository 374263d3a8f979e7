"""Interactive entry point for the video CLI"""
import logging
import signal
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from pydantic import ValidationError

from ..config import Settings, load_settings, resolve_env_path
from ..exceptions import JobCancelledError, SoraCliError, UnsupportedAttachmentTypeError
from ..models.job_schemas import ListQuery, SubmissionRequest
from ..services.attachment import open_attachment
from ..services.job_client import VideoJobClient
from ..services.job_runner import JobOutcome, VideoJobRunner
from ..utils.env_file import upsert_env_value
from ..utils.logger import setup_logging
from ..worker.deadline import Deadline
from ..worker.poller import JobPoller, normalize_progress
from .prompts import JobAction, Prompter, expand_path

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 40


class JobAborted(Exception):
    """The current job attempt failed; the process should exit non-zero."""
    pass


@contextmanager
def cancel_on_interrupt(deadline: Deadline) -> Iterator[None]:
    """
    Route Ctrl+C to deadline.cancel() while a job is running.

    The handler also raises JobCancelledError so a blocked socket read or
    upload unwinds at once instead of resuming until its own timeout.
    """
    def _handler(signum, frame):
        logger.info(f"Received signal {signum}, cancelling job...")
        deadline.cancel()
        raise JobCancelledError("operation cancelled")

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not the main thread; leave the default handler alone
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def format_timestamp(value: Optional[int]) -> str:
    if not value or value <= 0:
        return "(unknown)"
    return datetime.fromtimestamp(value, tz=timezone.utc).isoformat(timespec="seconds")


class VideoCli:
    """
    Interactive create/remix/list loop.

    One job runs at a time; each create or remix shares a single deadline
    across submission, polling and download.
    """

    def __init__(self, settings: Settings, prompter: Prompter, client: VideoJobClient, runner: VideoJobRunner):
        self.settings = settings
        self.prompter = prompter
        self.client = client
        self.runner = runner
        self.out = prompter.output

    def run(self):
        """Loop over actions until the user is done."""
        flows = {
            JobAction.CREATE: self.run_create_flow,
            JobAction.REMIX: self.run_remix_flow,
            JobAction.LIST: self.run_list_flow,
        }
        while True:
            action = self.prompter.choose_action()
            if not flows[action]():
                return
            self.out()

    def _ask_reference_path(self) -> Optional[Path]:
        """Optional reference file, re-asked until it exists and has a supported type."""
        while True:
            value = self.prompter.ask("Path to reference image (optional)")
            if not value:
                return None
            path = expand_path(value)
            try:
                with open_attachment(path) as attachment:
                    self.out(f"  Detected type: {attachment.content_type}")
                return path
            except UnsupportedAttachmentTypeError as e:
                self.out(f"ERROR: {e}")
            except OSError as e:
                self.out(f"ERROR: unable to access reference file: {e}")

    def _execute(self, label: str, submit: Callable[..., JobOutcome]) -> JobOutcome:
        """
        Run one job with progress output and Ctrl+C cancellation.

        Raises:
            JobAborted: If any step failed
        """
        deadline = self.runner.new_deadline()
        stage = [f"failed to create {label} job"]

        def on_queued(job):
            self.out(f"{label.capitalize()} job queued with ID: {job.id}")
            stage[0] = f"{label} failed"

        def on_downloading(job):
            self.out(f"{label.capitalize()} completed. Downloading video...")
            stage[0] = f"failed to download {label} video"

        self.out()
        self.out(f"Submitting {label} request...")
        try:
            with cancel_on_interrupt(deadline):
                return submit(
                    deadline=deadline,
                    on_queued=on_queued,
                    on_update=lambda update: self.out(str(update)),
                    on_downloading=on_downloading,
                )
        except (SoraCliError, OSError) as e:
            logger.error(f"{stage[0]}: {e}")
            self.out(f"ERROR: {stage[0]}: {e}")
            raise JobAborted(str(e)) from e

    def run_create_flow(self) -> bool:
        model = self.prompter.choose_model()
        while True:
            prompt = self.prompter.ask_required("Prompt")
            seconds = self.prompter.choose_duration()
            resolution = self.prompter.choose_resolution(model.resolutions)
            reference = self._ask_reference_path()
            try:
                request = SubmissionRequest(
                    prompt=prompt,
                    model=model.name,
                    seconds=seconds,
                    size=resolution.value,
                    attachment_path=reference,
                )
                break
            except ValidationError as e:
                self.out(f"Invalid request: {e.errors()[0]['msg']}")

        destination = self.prompter.ask_destination_directory()

        self.out()
        self.out("Configuration summary:")
        self.out("  Action: Create new video")
        self.out(f"  Model: {model.name}")
        self.out(f"  Duration: {seconds} seconds")
        self.out(f"  Resolution: {resolution.label}")
        if reference is not None:
            self.out(f"  Reference image: {reference}")
        self.out(f"  Destination: {destination} (filename will match job ID)")
        self.out(
            f"  Estimated cost: ${model.estimate_cost(seconds):.2f} "
            f"({seconds}s @ ${model.rate_per_second:.2f}/s)"
        )
        self.out()

        if not self.prompter.confirm("Proceed with generation?"):
            self.out("Aborted by user.")
            return False

        outcome = self._execute(
            "video",
            lambda **kwargs: self.runner.run_create(request, destination, **kwargs),
        )
        self.out(f"Video saved to {outcome.path}")

        if not self.prompter.confirm("Generate another video?"):
            self.out("Done.")
            return False
        return True

    def run_remix_flow(self) -> bool:
        video_id = self.prompter.ask_required("Existing video ID to remix")
        prompt = self.prompter.ask_required("Remix prompt (describe the change)")
        destination = self.prompter.ask_destination_directory()

        self.out()
        self.out("Configuration summary:")
        self.out("  Action: Remix existing video")
        self.out(f"  Source video ID: {video_id}")
        self.out(f"  Remix prompt: {prompt}")
        self.out(f"  Destination: {destination} (filename will match job ID)")
        self.out()

        if not self.prompter.confirm("Proceed with remix generation?"):
            self.out("Aborted by user.")
            return False

        outcome = self._execute(
            "remix",
            lambda **kwargs: self.runner.run_remix(video_id, prompt, destination, **kwargs),
        )
        self.out(f"Remixed video saved to {outcome.path}")

        if not self.prompter.confirm("Perform another action?"):
            self.out("Done.")
            return False
        return True

    def run_list_flow(self) -> bool:
        limit = self.prompter.ask_list_limit()
        order = self.prompter.ask_list_order()

        self.out()
        self.out("Fetching videos...")
        deadline = Deadline(self.settings.list_timeout_seconds)
        try:
            page = self.client.list_videos(ListQuery(limit=limit, order=order), deadline)
        except SoraCliError as e:
            self.out(f"ERROR: failed to list videos: {e}")
            return self.prompter.confirm("Try another action?")

        if not page.data:
            self.out("No videos found.")
        else:
            self.out()
            self.out(f"Showing {len(page.data)} video(s):")
            self.out(SEPARATOR)
            for job in page.data:
                for line in self._describe_job(job):
                    self.out(line)
                self.out(SEPARATOR)
            cursor = page.cursor
            if page.has_more or cursor:
                self.out("More videos available. Use the 'after' cursor to continue pagination.")
                if cursor:
                    self.out(f"Next cursor: {cursor}")

        if not self.prompter.confirm("Perform another action?"):
            self.out("Done.")
            return False
        return True

    def _describe_job(self, job) -> List[str]:
        lines = [f"ID: {job.id}", f"  Status: {job.status}"]
        if job.model:
            lines.append(f"  Model: {job.model}")
        if job.seconds:
            lines.append(f"  Duration: {job.seconds} seconds")
        if job.size:
            lines.append(f"  Size: {job.size}")
        lines.append(f"  Created: {format_timestamp(job.created_at)}")
        progress = normalize_progress(job.progress, self.settings.progress_boundary)
        if 0 < progress <= 100:
            lines.append(f"  Progress: {progress:.0f}%")
        return lines


def ensure_api_key(settings: Settings, prompter: Prompter, env_path: Path) -> str:
    """Configured API key, or one typed by the user (optionally saved to .env)."""
    api_key = settings.openai_api_key.strip()
    if api_key:
        return api_key

    prompter.output("OPENAI_API_KEY not found in environment or .env")
    api_key = prompter.ask_api_key()
    if prompter.confirm("Save API key to .env for future runs?"):
        try:
            upsert_env_value(env_path, "OPENAI_API_KEY", api_key)
            prompter.output(f"Saved API key to {env_path}")
        except OSError as e:
            prompter.output(f"WARNING: unable to write {env_path}: {e}")
    return api_key


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the sora2cli console script."""
    print("Sora-2 Video Generator")
    print("========================")

    env_path = resolve_env_path()
    settings = load_settings(env_path)
    setup_logging(settings.log_level, settings.log_file)
    logger.debug(f"Loaded settings from {env_path}")

    prompter = Prompter()
    try:
        api_key = ensure_api_key(settings, prompter, env_path)
        with VideoJobClient(settings.client_config(api_key)) as client:
            poller = JobPoller(
                client,
                poll_interval_seconds=settings.poll_interval_seconds,
                progress_boundary=settings.progress_boundary,
            )
            runner = VideoJobRunner(client, poller, max_wait_seconds=settings.max_wait_seconds)
            VideoCli(settings, prompter, client, runner).run()
    except JobAborted:
        return 1
    except OSError as e:
        print(f"ERROR: {e}")
        return 1
    except (EOFError, KeyboardInterrupt):
        print()
        print("Input closed, exiting.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
