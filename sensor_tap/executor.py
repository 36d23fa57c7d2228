from __future__ import annotations

import logging
import subprocess

from sensor_tap.errors import ExecutionFailure, ExecutionTimeout
from sensor_tap.logging_utils import TRACE_LEVEL

DEFAULT_TIMEOUT_S = 10.0

logger = logging.getLogger(__name__)


def run(command_line: str, timeout: float = DEFAULT_TIMEOUT_S) -> bytes:
    """Run a whitespace-separated command line and return its stdout bytes.

    Arguments containing spaces cannot be expressed. stderr is discarded. On
    timeout the child is killed before ``ExecutionTimeout`` is raised.
    """
    command = command_line.split()
    if not command:
        raise ExecutionFailure("Empty command line")
    logger.debug("Running command: %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        # subprocess.run kills and reaps the child before re-raising
        raise ExecutionTimeout(command, timeout) from exc
    except OSError as exc:
        raise ExecutionFailure(f"Command not runnable: {command[0]}: {exc}") from exc
    if result.returncode != 0:
        raise ExecutionFailure(
            f"Command failed ({result.returncode}): {' '.join(command)}",
            returncode=result.returncode,
        )
    if result.stdout:
        logger.log(TRACE_LEVEL, "stdout: %s", result.stdout.strip())
    return result.stdout
