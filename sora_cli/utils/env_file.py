"""Persisting values to the .env file"""
import logging
import os
from pathlib import Path
from typing import Union

from dotenv import set_key

logger = logging.getLogger(__name__)


def upsert_env_value(path: Union[str, Path], key: str, value: str) -> Path:
    """
    Set ``key=value`` in a .env file, keeping comments and other keys.

    The file is created when missing and restricted to the owner.

    Args:
        path: .env file path
        key: Variable name
        value: Variable value

    Returns:
        The .env path
    """
    path = Path(path)
    if not path.exists():
        path.touch(mode=0o600)
    set_key(str(path), key, value, quote_mode="never")
    os.chmod(path, 0o600)
    logger.info(f"Saved {key} to {path}")
    return path
