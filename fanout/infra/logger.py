"""
Run logging for fanout.

Console records go to stderr so they never mix with the output of the
commands being run. An optional JSONL file receives one JSON object per
record, with per-invocation fields (input, command, returncode, ...).

USAGE:
  with create_logger(config) as logger:
      logger.info("created pool", workers=4)
      logger.debug("will execute command: echo a", command="echo a")

THREAD SAFETY:
  Logging calls are thread-safe (stdlib logging handlers lock per emit).
  The lazy handler setup is guarded by an internal lock.
"""

import itertools
import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from .config.schemas import LogLevel, RunConfig
from .errors import ConfigurationError


EXTRA_FIELDS = (
    "input",
    "command",
    "returncode",
    "worker",
    "workers",
    "processed",
    "total",
    "duration_seconds",
    "error",
)

CONSOLE_FORMAT = "[fanout] [%(levelname)s] %(message)s"

_logger_ids = itertools.count()


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit for real-time log visibility."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Lowercase level names: "[fanout] [warning] ..."."""
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        try:
            return super().format(record)
        finally:
            record.levelname = record.levelname.upper()


class RunLogger:
    """Logger for one fanout run.

    Level comes from the run configuration rather than any process-wide
    setting. Each instance owns a private, non-propagating stdlib logger.
    Handlers are created lazily on first use, so the JSONL file is only
    created when something is actually logged. Call open() to create them
    up front and surface an unusable log file before any work starts.
    """
    def __init__(
        self,
        level: LogLevel = LogLevel.WARNING,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.level = LogLevel(level)
        self.log_file = Path(log_file).expanduser() if log_file else None
        self.console_output = console_output
        self.stream = stream
        self.name = f"fanout.run.{next(_logger_ids)}"

        self._logger = None
        self._initialized = False
        self._init_lock = threading.Lock()

    def _ensure_initialized(self):
        if self._initialized:
            return

        with self._init_lock:
            if self._initialized:
                return

            logger = logging.getLogger(self.name)
            logger.setLevel(logging.DEBUG)
            logger.propagate = False

            if self.console_output:
                console_handler = logging.StreamHandler(self.stream or sys.stderr)
                console_handler.setLevel(self.level.logging_level)
                console_handler.setFormatter(ConsoleFormatter(CONSOLE_FORMAT))
                logger.addHandler(console_handler)

            if self.log_file:
                # The JSONL file records everything; console verbosity doesn't filter it
                try:
                    self.log_file.parent.mkdir(parents=True, exist_ok=True)
                    json_handler = FlushingFileHandler(self.log_file, mode='a')
                except OSError as e:
                    self._release(logger)
                    raise ConfigurationError(f"could not open log file {self.log_file}: {e}") from e
                json_handler.setFormatter(JSONFormatter())
                logger.addHandler(json_handler)

            self._logger = logger
            self._initialized = True

    def open(self) -> "RunLogger":
        """
        Create handlers now instead of on the first record.

        Raises:
            ConfigurationError: If the log file can't be opened
        """
        self._ensure_initialized()
        return self

    @property
    def logger(self) -> logging.Logger:
        """Get the underlying logger, initializing if needed."""
        self._ensure_initialized()
        return self._logger

    def _log(self, level: int, message: str, **kwargs):
        reserved_params = {}
        for param in ['exc_info', 'stack_info', 'stacklevel']:
            if param in kwargs:
                reserved_params[param] = kwargs.pop(param)

        self.logger.log(level, message, extra=kwargs, **reserved_params)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    @staticmethod
    def _release(logger: logging.Logger):
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        # Drop the per-run name so the logging manager doesn't keep it forever
        logging.Logger.manager.loggerDict.pop(logger.name, None)

    def close(self):
        if self._initialized and self._logger:
            self._release(self._logger)
            self._logger = None
            self._initialized = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(config: RunConfig, **kwargs) -> RunLogger:
    return RunLogger(level=config.log_level, log_file=config.log_file, **kwargs)
