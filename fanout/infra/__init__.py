from fanout.infra.errors import ConfigurationError
from fanout.infra.template import CommandTemplate, PLACEHOLDER
from fanout.infra.executor import run_shell
from fanout.infra.inputs import read_file_lines, read_stdin_lines, read_stream_lines, read_inputs
from fanout.infra.logger import RunLogger, create_logger
from fanout.infra.parallel import DispatchEngine

__all__ = [
    "ConfigurationError",

    "CommandTemplate",
    "PLACEHOLDER",

    "run_shell",

    "read_file_lines",
    "read_stdin_lines",
    "read_stream_lines",
    "read_inputs",

    "RunLogger",
    "create_logger",

    "DispatchEngine",
]
