"""
Settings Tests

Tests for environment/.env configuration and transport config derivation.
"""

import os
from unittest.mock import patch

from sora_cli.config import DEFAULT_BASE_URL, ProgressBoundary, Settings, load_settings


class TestSettings:
    """Test settings loading."""

    @patch.dict(os.environ, {"OPENAI_API_KEY": "env-key", "POLL_INTERVAL_SECONDS": "2"})
    def test_should_read_environment(self):
        settings = Settings(_env_file=None)

        assert settings.openai_api_key == "env-key"
        assert settings.poll_interval_seconds == 2
        assert settings.max_wait_seconds == 1800
        assert settings.progress_boundary is ProgressBoundary.FRACTION

    def test_should_read_env_file_without_overriding_environment(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "OPENAI_API_KEY=file-key\n"
            "OPENAI_ORG_ID='org-from-file'\n"
            "PROGRESS_BOUNDARY=percent\n"
            "SOMETHING_ELSE=1\n"
        )

        with patch.dict(os.environ, {"OPENAI_API_KEY": "env-key"}):
            settings = load_settings(env_file)

        assert settings.openai_api_key == "env-key"
        assert settings.openai_org_id == "org-from-file"
        assert settings.progress_boundary is ProgressBoundary.PERCENT


class TestClientConfig:
    """Test ClientConfig derivation."""

    def test_should_normalize_values(self):
        settings = Settings(
            _env_file=None,
            openai_api_key=" key ",
            openai_base_url="https://proxy.example/",
            openai_org_id="  ",
            openai_project_id="proj",
        )

        config = settings.client_config()

        assert config.api_key == "key"
        assert config.base_url == "https://proxy.example"
        assert config.organization is None
        assert config.project == "proj"

    def test_should_prefer_explicit_api_key(self):
        settings = Settings(_env_file=None, openai_api_key="", openai_base_url="")

        config = settings.client_config(api_key="typed-key")

        assert config.api_key == "typed-key"
        assert config.base_url == DEFAULT_BASE_URL
