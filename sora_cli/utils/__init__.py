"""Utility modules for the video CLI"""

from .env_file import upsert_env_value
from .logger import ColoredFormatter, setup_logging

__all__ = [
    "ColoredFormatter",
    "setup_logging",
    "upsert_env_value",
]
