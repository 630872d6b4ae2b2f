"""
Input acquisition: one record per line, line ending stripped.

Lines are decoded as UTF-8 with surrogateescape, so bytes that aren't valid
UTF-8 (e.g. Latin-1 file names) survive the round trip back to the shell.
"""

import io
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Union

from .errors import ConfigurationError
from .config.schemas import FileInput, StdinInput


ENCODING = "utf-8"
ERRORS = "surrogateescape"


def _strip_line_ending(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def read_stream_lines(stream: TextIO) -> List[str]:
    """Read every line of an open text stream. Empty lines are kept, \\n and \\r\\n both end a line."""
    return [_strip_line_ending(line) for line in stream]


def read_file_lines(path: Union[str, Path]) -> List[str]:
    """
    Read every line of a file.

    Raises:
        ConfigurationError: If the file can't be opened
    """
    path = Path(path).expanduser()
    try:
        with open(path, "r", encoding=ENCODING, errors=ERRORS) as f:
            return read_stream_lines(f)
    except OSError as e:
        raise ConfigurationError(f"could not open {path}: {e}") from e


def read_stdin_lines(stdin: Optional[TextIO] = None) -> List[str]:
    """Read every line of stdin, tolerating bytes that aren't valid UTF-8."""
    stream = stdin if stdin is not None else sys.stdin
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return read_stream_lines(stream)

    wrapper = io.TextIOWrapper(buffer, encoding=ENCODING, errors=ERRORS)
    try:
        return read_stream_lines(wrapper)
    finally:
        # Leave the underlying stdin open
        wrapper.detach()


def read_inputs(source: Union[FileInput, StdinInput], stdin: Optional[TextIO] = None) -> List[str]:
    """Materialize the whole input list for a configured source."""
    if isinstance(source, FileInput):
        return read_file_lines(source.path)
    return read_stdin_lines(stdin)
