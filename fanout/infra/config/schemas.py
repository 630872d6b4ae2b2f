"""
Configuration schemas for fanout.

RunConfig is the fully resolved, immutable configuration for one run.
FileConfig describes the optional YAML config file that supplies defaults.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..template import PLACEHOLDER


class LogLevel(str, Enum):
    """Console verbosity. WARNING is the quiet default."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.name)


class FileInput(BaseModel):
    """Read input records from a file, one per line."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    path: Path


class StdinInput(BaseModel):
    """Read input records from standard input, one per line."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["stdin"] = "stdin"


InputSource = Annotated[Union[FileInput, StdinInput], Field(discriminator="kind")]


class DefaultsConfig(BaseModel):
    """Defaults applied when the matching CLI flag is not given."""
    workers: Optional[int] = Field(None, ge=1, description="Worker count (default: CPU count)")
    log_level: LogLevel = Field(LogLevel.WARNING, description="Console verbosity")
    log_file: Optional[Path] = Field(None, description="Append JSONL log records here")


class FileConfig(BaseModel):
    """
    Contents of the YAML config file.

    Example:
        defaults:
          workers: 8
          log_level: info
          log_file: ~/fanout.jsonl
    """
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)


class RunConfig(BaseModel):
    """Resolved configuration for a single run. Frozen once built."""
    model_config = ConfigDict(frozen=True)

    command_template: str = Field(..., description="Shell command containing the placeholder")
    workers: int = Field(..., ge=1, description="Number of concurrent workers")
    input_source: InputSource = Field(default_factory=StdinInput)
    log_level: LogLevel = LogLevel.WARNING
    log_file: Optional[Path] = None

    @field_validator("command_template")
    @classmethod
    def check_placeholder(cls, v: str) -> str:
        if PLACEHOLDER not in v:
            raise ValueError(f'could not find "{PLACEHOLDER}" in command to place inputs into')
        return v

    @property
    def reads_stdin(self) -> bool:
        return isinstance(self.input_source, StdinInput)
