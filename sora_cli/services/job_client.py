"""Client for the remote video generation API"""
import json
import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import ClientConfig
from ..exceptions import JobTimeoutError, MalformedResponseError, RemoteAPIError, TransportError
from ..models.job_schemas import ListPage, ListQuery, SubmissionRequest, VideoJob
from ..worker.deadline import Deadline
from .attachment import open_attachment
from .submission import encode_create, encode_remix

logger = logging.getLogger(__name__)

VIDEOS_PATH = "/v1/videos"
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def read_api_error(body: bytes) -> str:
    """
    Extract a human readable message from an error response body.

    Args:
        body: Raw response body

    Returns:
        ``error.message`` from a JSON body, else the trimmed body text,
        else "unknown error"
    """
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return "unknown error"
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
    return text


class VideoJobClient:
    """
    HTTP client for the /v1/videos API.

    Handles all communication with the video service:
    - Creating generation jobs (multipart, optional reference file)
    - Creating remix jobs
    - Fetching job status
    - Streaming finished video content
    - Listing videos
    """

    def __init__(self, config: ClientConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.client = httpx.Client(
            base_url=self.base_url,
            headers=self._build_headers(),
            timeout=config.request_timeout_seconds,
            transport=transport,
        )
        logger.info(f"VideoJobClient initialized: server={self.base_url}")

    def _build_headers(self) -> dict:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }
        if self.config.organization:
            headers["OpenAI-Organization"] = self.config.organization
        if self.config.project:
            headers["OpenAI-Project"] = self.config.project
        return headers

    def _send(
        self,
        operation: str,
        method: str,
        url: str,
        deadline: Optional[Deadline] = None,
        stream: bool = False,
        **kwargs,
    ) -> httpx.Response:
        """
        Send one request and turn failures into client errors.

        Args:
            operation: Name used in error messages and logs
            method: HTTP method
            url: Path relative to the base URL
            deadline: Overall job deadline; clamps the request timeout
            stream: Leave the body unread for the caller

        Returns:
            The 2xx response

        Raises:
            JobCancelledError / JobTimeoutError: If the deadline fired
            TransportError: If no response was received
            RemoteAPIError: For status codes >= 300
        """
        deadline = deadline or Deadline()
        deadline.check()
        timeout = deadline.timeout(self.config.request_timeout_seconds)
        request = self.client.build_request(method, url, timeout=timeout, **kwargs)

        try:
            response = self.client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            deadline.check()
            if timeout < self.config.request_timeout_seconds:
                # The deadline was the binding limit
                raise JobTimeoutError(f"{operation}: deadline exceeded") from e
            raise TransportError(operation, f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            deadline.check()
            raise TransportError(operation, str(e) or e.__class__.__name__) from e

        if deadline.cancelled:
            response.close()
            deadline.check()

        if response.status_code >= 300:
            try:
                body = response.read()
                message = read_api_error(body)
            except httpx.HTTPError as e:
                message = str(e)
            finally:
                response.close()
            logger.error(f"{operation} failed: {response.status_code} - {message}")
            raise RemoteAPIError(response.status_code, message, operation)

        return response

    def _decode_job(self, operation: str, response: httpx.Response, require_id: bool = False) -> VideoJob:
        try:
            job = VideoJob.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MalformedResponseError(f"{operation}: unable to decode job: {e}") from e
        if require_id and not job.id:
            raise MalformedResponseError(f"{operation}: response missing job ID")
        return job

    def create_video(self, request: SubmissionRequest, deadline: Optional[Deadline] = None) -> VideoJob:
        """
        Submit a new generation job.

        Args:
            request: Validated submission; its reference file is classified
                and streamed as the ``input_reference`` part
            deadline: Overall job deadline

        Returns:
            The queued job

        Raises:
            UnsupportedAttachmentTypeError: If the reference file type is not supported
            OSError: If the reference file cannot be read
        """
        operation = "create video job"
        if request.attachment_path is not None:
            with open_attachment(request.attachment_path) as attachment:
                encoded = encode_create(request, attachment)
                response = self._send(operation, "POST", VIDEOS_PATH, deadline, files=encoded.multipart())
        else:
            encoded = encode_create(request)
            response = self._send(operation, "POST", VIDEOS_PATH, deadline, files=encoded.multipart())

        job = self._decode_job(operation, response, require_id=True)
        logger.info(f"Job {job.id} created: status={job.status}, model={job.model}")
        return job

    def remix_video(self, video_id: str, prompt: str, deadline: Optional[Deadline] = None) -> VideoJob:
        """
        Submit a remix of an existing video.

        Args:
            video_id: ID of the finished source video
            prompt: Description of the change
            deadline: Overall job deadline

        Returns:
            The queued remix job
        """
        operation = "create remix job"
        response = self._send(
            operation,
            "POST",
            f"{VIDEOS_PATH}/{quote(video_id, safe='')}/remix",
            deadline,
            json=encode_remix(prompt),
        )
        job = self._decode_job(operation, response, require_id=True)
        logger.info(f"Remix job {job.id} created from {video_id}")
        return job

    def get_video(self, video_id: str, deadline: Optional[Deadline] = None) -> VideoJob:
        """Fetch the current state of a job."""
        operation = "get video job"
        response = self._send(operation, "GET", f"{VIDEOS_PATH}/{quote(video_id, safe='')}", deadline)
        job = self._decode_job(operation, response)
        logger.debug(f"Job {video_id}: status={job.status}, progress={job.progress}")
        return job

    @contextmanager
    def stream_content(self, video_id: str, deadline: Optional[Deadline] = None) -> Iterator[Iterator[bytes]]:
        """
        Stream the rendered video of a completed job.

        Args:
            video_id: ID of the completed job
            deadline: Overall job deadline

        Yields:
            Iterator over body chunks; the response is closed on exit
        """
        operation = "download video content"
        deadline = deadline or Deadline()
        response = self._send(
            operation,
            "GET",
            f"{VIDEOS_PATH}/{quote(video_id, safe='')}/content",
            deadline,
            stream=True,
            headers={"Accept": "video/mp4"},
        )
        try:
            yield self._iter_body(operation, response, deadline)
        finally:
            response.close()

    def _iter_body(self, operation: str, response: httpx.Response, deadline: Deadline) -> Iterator[bytes]:
        try:
            for chunk in response.iter_bytes(chunk_size=DOWNLOAD_CHUNK_SIZE):
                deadline.check()
                yield chunk
        except httpx.HTTPError as e:
            deadline.check()
            raise TransportError(operation, str(e) or e.__class__.__name__) from e

    def list_videos(self, query: Optional[ListQuery] = None, deadline: Optional[Deadline] = None) -> ListPage:
        """
        List videos, newest first unless the query says otherwise.

        Args:
            query: Pagination; zero/empty values are not sent
            deadline: Request deadline

        Returns:
            One page of jobs plus the continuation cursor
        """
        operation = "list videos"
        query = query or ListQuery()
        response = self._send(operation, "GET", VIDEOS_PATH, deadline, params=query.params())
        try:
            page = ListPage.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MalformedResponseError(f"{operation}: unable to decode list: {e}") from e
        logger.info(f"Fetched {len(page.data)} videos (has_more={page.has_more})")
        return page

    def close(self):
        """Close the HTTP client."""
        self.client.close()
        logger.info("VideoJobClient closed")

    def __enter__(self) -> "VideoJobClient":
        return self

    def __exit__(self, *exc_info):
        self.close()
