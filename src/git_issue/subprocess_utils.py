"""Subprocess utilities for the git gateway.

Wraps subprocess.run() so that every failure carries the operation being
attempted, the command line and git's own output.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SubprocessError(RuntimeError):
    """A command exited normally with a non-zero status."""

    def __init__(self, message: str, *, returncode: int, stderr: str) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class SubprocessKilledError(SubprocessError):
    """A command was terminated by a signal and produced no exit status."""

    @property
    def signal_number(self) -> int:
        return -self.returncode


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace").strip()
    return stream.strip()


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    input: str | None = None,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Execute subprocess with enriched error reporting.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of operation
        cwd: Working directory for command execution
        input: Optional text written to the command's stdin
        **kwargs: Additional arguments passed to subprocess.run()

    Returns:
        CompletedProcess instance from subprocess.run()

    Raises:
        SubprocessKilledError: If the command was killed by a signal
        SubprocessError: If the command exits non-zero or is not installed
    """
    cmd_str = " ".join(str(arg) for arg in cmd)
    logger.debug("Running: %s (cwd=%s)", cmd_str, cwd)
    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            input=input,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
            **kwargs,
        )

    except subprocess.CalledProcessError as e:
        stdout_text = _decode(e.stdout)
        stderr_text = _decode(e.stderr)

        if e.returncode < 0:
            error_msg = f"Failed to {operation_context}: killed by signal {-e.returncode}"
            error_msg += f"\nCommand: {cmd_str}"
            raise SubprocessKilledError(
                error_msg, returncode=e.returncode, stderr=stderr_text
            ) from e

        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"
        if stdout_text:
            error_msg += f"\nstdout: {stdout_text}"
        if stderr_text:
            error_msg += f"\nstderr: {stderr_text}"

        raise SubprocessError(error_msg, returncode=e.returncode, stderr=stderr_text) from e

    except FileNotFoundError as e:
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise SubprocessError(error_msg, returncode=127, stderr="") from e
