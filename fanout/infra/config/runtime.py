"""
Runtime environment lookups.

Environment variables (a .env file in the working directory is loaded too):
    FANOUT_CONFIG   - path to the YAML config file
    FANOUT_THREADS  - default worker count
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from ..errors import ConfigurationError


DEFAULT_CONFIG_PATH = Path("~/.config/fanout/config.yaml")


@lru_cache(maxsize=1)
def load_env() -> bool:
    """Load .env once per process. Existing environment variables win."""
    return load_dotenv(find_dotenv(usecwd=True), override=False)


def get_config_path() -> Optional[Path]:
    """Config file path from FANOUT_CONFIG, else the default location if it exists."""
    load_env()
    env_path = os.getenv("FANOUT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()

    default = DEFAULT_CONFIG_PATH.expanduser()
    return default if default.exists() else None


def get_env_workers() -> Optional[int]:
    """Worker count from FANOUT_THREADS, or None if unset."""
    load_env()
    value = os.getenv("FANOUT_THREADS")
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"FANOUT_THREADS must be an integer, got {value!r}")


def detect_workers() -> int:
    """Hardware concurrency of this host."""
    count = os.cpu_count()
    if not count:
        raise ConfigurationError("unable to auto-detect processor count (threads)")
    return count
