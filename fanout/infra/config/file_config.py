"""
Config file loading.

The config file is optional YAML holding defaults for flags that were not
given on the command line. A missing file means "use built-in defaults".
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import FileConfig


def load_file_config(path: Optional[Path]) -> FileConfig:
    """
    Load and validate the config file.

    Args:
        path: Config file location, or None for no config file

    Returns:
        FileConfig, with defaults if the file doesn't exist

    Raises:
        ConfigurationError: If the file can't be read or doesn't validate
    """
    if path is None:
        return FileConfig()

    path = Path(path).expanduser()
    if not path.exists():
        return FileConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"could not read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")

    try:
        return FileConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid config file {path}: {e}") from e
