"""
Argument resolution: parsed CLI flags + environment + config file -> RunConfig.

Everything that can make a run invalid is checked here, before any input is
dispatched.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from fanout.infra.errors import ConfigurationError
from fanout.infra.template import PLACEHOLDER
from fanout.infra.config import (
    DefaultsConfig,
    FileInput,
    LogLevel,
    RunConfig,
    StdinInput,
    detect_workers,
    get_config_path,
    get_env_workers,
    load_file_config,
)


def resolve_command(words: List[str]) -> str:
    """Join the command words, requiring the placeholder as one of them."""
    if words and words[0] == "--":
        words = words[1:]

    if not words:
        raise ConfigurationError("no command given")

    if PLACEHOLDER not in words:
        raise ConfigurationError(
            f'could not find "{PLACEHOLDER}" in command to place inputs into'
        )

    return " ".join(words)


def resolve_workers(threads: Optional[int], defaults: DefaultsConfig) -> int:
    """
    Pick the worker count.

    Order: --threads, FANOUT_THREADS, config file defaults.workers, CPU count.
    """
    if threads is not None:
        source, workers = "--threads", threads
    else:
        env_workers = get_env_workers()
        if env_workers is not None:
            source, workers = "FANOUT_THREADS", env_workers
        elif defaults.workers is not None:
            source, workers = "config file", defaults.workers
        else:
            return detect_workers()

    if workers < 1:
        raise ConfigurationError(
            f"invalid number of threads specified ({source}): {workers} need 1 or more"
        )
    return workers


def resolve_log_level(debug: bool, verbose: bool, default: LogLevel) -> LogLevel:
    if debug and verbose:
        raise ConfigurationError("you cannot specify both verbose and debug output levels")
    if debug:
        return LogLevel.DEBUG
    if verbose:
        return LogLevel.INFO
    return default


def _format_validation_error(e: ValidationError) -> str:
    parts = []
    for error in e.errors():
        location = ".".join(str(loc) for loc in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def resolve_config(args: argparse.Namespace) -> RunConfig:
    """
    Build the run configuration from parsed arguments.

    Raises:
        ConfigurationError: On any invalid or conflicting setting
    """
    log_level_flags = (getattr(args, "debug", False), getattr(args, "verbose", False))
    command = resolve_command(list(args.command or []))

    config_path = Path(args.config).expanduser() if getattr(args, "config", None) else get_config_path()
    defaults = load_file_config(config_path).defaults

    workers = resolve_workers(args.threads, defaults)
    log_level = resolve_log_level(*log_level_flags, default=defaults.log_level)

    input_source = FileInput(path=Path(args.file)) if args.file else StdinInput()
    log_file = getattr(args, "log_file", None) or defaults.log_file

    try:
        return RunConfig(
            command_template=command,
            workers=workers,
            input_source=input_source,
            log_level=log_level,
            log_file=Path(log_file).expanduser() if log_file else None,
        )
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e
