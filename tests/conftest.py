"""
Pytest configuration for sora_cli tests.

Sets up test environment variables and shared fixtures.
"""

import os
import sys
from typing import Callable, List

import httpx
import pytest

# Add project root to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Keep a developer's real credentials out of the tests
os.environ["OPENAI_API_KEY"] = "test-api-key"
os.environ.pop("OPENAI_ORG_ID", None)
os.environ.pop("OPENAI_PROJECT_ID", None)
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from sora_cli.config import ClientConfig  # noqa: E402
from sora_cli.services.job_client import VideoJobClient  # noqa: E402


# Minimal headers that the magic-number sniffer recognises
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00" + b"\x00" * 64
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 64
WEBP_BYTES = b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 64
UNKNOWN_BYTES = b"just some plain text, not media at all\n" * 4


@pytest.fixture
def client_config():
    return ClientConfig(
        api_key="test-api-key",
        base_url="https://api.test",
        organization="org-123",
        project="proj-456",
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_client(client_config, recorded_requests) -> Callable[..., VideoJobClient]:
    """Build a VideoJobClient whose transport calls ``handler(request)``."""
    clients = []

    def _make(handler, config=None) -> VideoJobClient:
        def _record(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        client = VideoJobClient(config or client_config, transport=httpx.MockTransport(_record))
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
