"""
Configuration management for fanout.

Precedence for each setting (first wins):
    1. Command-line flag
    2. Environment variable (FANOUT_THREADS), .env included
    3. Config file defaults (FANOUT_CONFIG or ~/.config/fanout/config.yaml)
    4. Built-in default (CPU count, WARNING level)

Usage:
    from fanout.infra.config import RunConfig, load_file_config, get_config_path

    file_config = load_file_config(get_config_path())
    config = RunConfig(command_template="echo {}", workers=4)
"""

from .schemas import (
    LogLevel,
    FileInput,
    StdinInput,
    InputSource,
    DefaultsConfig,
    FileConfig,
    RunConfig,
)

from .file_config import load_file_config

from .runtime import (
    DEFAULT_CONFIG_PATH,
    load_env,
    get_config_path,
    get_env_workers,
    detect_workers,
)


__all__ = [
    # Schemas
    "LogLevel",
    "FileInput",
    "StdinInput",
    "InputSource",
    "DefaultsConfig",
    "FileConfig",
    "RunConfig",
    # Config file
    "load_file_config",
    # Runtime
    "DEFAULT_CONFIG_PATH",
    "load_env",
    "get_config_path",
    "get_env_workers",
    "detect_workers",
]
