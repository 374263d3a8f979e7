"""Atomic download of finished videos"""
import logging
import os
import re
from pathlib import Path
from typing import Iterable, Optional, Union

from ..exceptions import ArtifactWriteError
from ..worker.deadline import Deadline

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"
VIDEO_EXTENSION = ".mp4"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _remove_quietly(path: str):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove temp file {path}: {e}")


def write_atomic(chunks: Iterable[bytes], target: Union[str, os.PathLike]) -> Path:
    """
    Write a byte stream to ``target`` via ``target + ".tmp"``.

    The final name only appears after the stream is drained, the temp
    file is closed and the rename succeeded. On any failure the temp file
    is removed and the error propagates.

    Args:
        chunks: Body chunks; errors raised while iterating propagate
        target: Final file path

    Returns:
        The target path

    Raises:
        ArtifactWriteError: For open/write/close/rename failures
    """
    target_path = os.fspath(target)
    tmp_path = target_path + TEMP_SUFFIX
    written = 0

    try:
        out = open(tmp_path, "wb")
    except OSError as e:
        raise ArtifactWriteError("create", tmp_path, e) from e

    try:
        try:
            for chunk in chunks:
                out.write(chunk)
                written += len(chunk)
        finally:
            out.close()
    except OSError as e:
        _remove_quietly(tmp_path)
        raise ArtifactWriteError("write", tmp_path, e) from e
    except BaseException:
        _remove_quietly(tmp_path)
        raise

    try:
        os.replace(tmp_path, target_path)
    except OSError as e:
        _remove_quietly(tmp_path)
        raise ArtifactWriteError("rename", target_path, e) from e

    logger.info(f"Saved {written} bytes to {target_path}")
    return Path(target_path)


def safe_video_filename(job_id: str) -> str:
    """File name for a job's video; characters outside [A-Za-z0-9._-] become '_'."""
    name = _UNSAFE_FILENAME_CHARS.sub("_", job_id.strip()).strip(".")
    return (name or "video") + VIDEO_EXTENSION


def download_artifact(
    client,
    video_id: str,
    target: Union[str, os.PathLike],
    deadline: Optional[Deadline] = None,
) -> Path:
    """
    Stream a completed job's video to ``target`` atomically.

    Args:
        client: VideoJobClient
        video_id: Completed job ID
        target: Destination file
        deadline: Overall job deadline

    Returns:
        The saved path
    """
    logger.info(f"[{video_id}] Downloading video to {target}")
    with client.stream_content(video_id, deadline) as chunks:
        return write_atomic(chunks, target)
