"""
Process execution primitive: run one command string through the shell and wait.

Child stdout/stderr are inherited, so command output goes straight to the
terminal. Exit statuses are logged, never raised.
"""

import subprocess
import time
from typing import Optional

from .logger import RunLogger


def run_shell(command: str, logger: Optional[RunLogger] = None) -> Optional[int]:
    """
    Run a command through the system shell and wait for it to finish.

    Args:
        command: Fully substituted command string
        logger: Optional run logger for per-invocation diagnostics

    Returns:
        The exit status, or None if the shell could not be launched
    """
    if logger:
        logger.debug(f"will execute command: {command}", command=command)

    start = time.time()
    try:
        completed = subprocess.run(command, shell=True)
    except OSError as e:
        if logger:
            logger.error(f"could not launch command: {command}: {e}", command=command, error=str(e))
        return None

    duration = time.time() - start
    if completed.returncode != 0 and logger:
        logger.warning(
            f"command exited with status {completed.returncode}: {command}",
            command=command,
            returncode=completed.returncode,
            duration_seconds=duration,
        )
    elif logger:
        logger.debug(
            f"command finished in {duration:.2f}s: {command}",
            command=command,
            returncode=completed.returncode,
            duration_seconds=duration,
        )

    return completed.returncode
