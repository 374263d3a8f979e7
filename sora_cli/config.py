"""Client configuration"""
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings

ENV_FILE_NAME = ".env"
DEFAULT_BASE_URL = "https://api.openai.com"


class ProgressBoundary(str, Enum):
    """How a raw progress value of exactly 1.0 is interpreted."""

    FRACTION = "fraction"  # 1.0 -> 100%
    PERCENT = "percent"    # 1.0 -> 1%


class Settings(BaseSettings):
    """Configuration for the video CLI, read from the environment and .env."""

    # API connection
    openai_api_key: str = ""
    openai_base_url: str = DEFAULT_BASE_URL
    openai_org_id: str = ""
    openai_project_id: str = ""

    # Timeouts and polling
    poll_interval_seconds: float = 5.0
    max_wait_seconds: float = 30 * 60
    request_timeout_seconds: float = 60.0
    list_timeout_seconds: float = 120.0
    progress_boundary: ProgressBoundary = ProgressBoundary.FRACTION

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    class Config:
        env_file = ENV_FILE_NAME
        case_sensitive = False
        env_prefix = ""  # No prefix, use exact env var names
        extra = "ignore"

    def client_config(self, api_key: Optional[str] = None) -> "ClientConfig":
        """
        Build the transport configuration.

        Args:
            api_key: Overrides the configured key (e.g. one typed at the prompt)

        Returns:
            ClientConfig for VideoJobClient
        """
        base_url = self.openai_base_url.strip() or DEFAULT_BASE_URL
        return ClientConfig(
            api_key=(api_key if api_key is not None else self.openai_api_key).strip(),
            base_url=base_url.rstrip('/'),
            organization=self.openai_org_id.strip() or None,
            project=self.openai_project_id.strip() or None,
            request_timeout_seconds=self.request_timeout_seconds,
        )


class ClientConfig(BaseModel):
    """Everything the transport needs; built once at startup."""

    model_config = {"frozen": True}

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    organization: Optional[str] = None
    project: Optional[str] = None
    request_timeout_seconds: float = 60.0


def resolve_env_path() -> Path:
    """
    Locate the .env file.

    A .env next to the launched script wins; otherwise the one in the
    current working directory is used (it may not exist yet).
    """
    if sys.argv and sys.argv[0]:
        candidate = Path(sys.argv[0]).resolve().parent / ENV_FILE_NAME
        if candidate.is_file():
            return candidate
    return Path.cwd() / ENV_FILE_NAME


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings once at startup."""
    return Settings(_env_file=str(env_file) if env_file else ENV_FILE_NAME)
