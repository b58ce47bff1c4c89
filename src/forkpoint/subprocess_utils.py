"""Helpers for running git subprocesses with useful failure context."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class GitCommandError(RuntimeError):
    """A git subprocess failed in a way the caller did not expect.

    Attributes:
        cmd: The command that was run
        operation_context: Human-readable description of what was being attempted
        returncode: Exit status of the process
        stderr: Captured standard error, stripped
    """

    def __init__(
        self,
        *,
        cmd: Sequence[str],
        operation_context: str,
        returncode: int,
        stderr: str,
    ) -> None:
        self.cmd = list(cmd)
        self.operation_context = operation_context
        self.returncode = returncode
        self.stderr = stderr
        message = f"Failed to {operation_context}: `{' '.join(self.cmd)}` exited with {returncode}"
        if stderr:
            message += f"\n{stderr}"
        super().__init__(message)


def run_subprocess_with_context(
    *,
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path,
    allowed_returncodes: tuple[int, ...] = (0,),
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising GitCommandError with context on failure.

    Args:
        cmd: Command and arguments
        operation_context: What the command is for, used in the error message
        cwd: Working directory
        allowed_returncodes: Exit statuses treated as success

    Returns:
        The completed process with text stdout/stderr

    Raises:
        GitCommandError: If the exit status is not in allowed_returncodes
    """
    logger.debug("Running %s in %s", cmd, cwd)
    result = subprocess.run(
        list(cmd),
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode not in allowed_returncodes:
        raise GitCommandError(
            cmd=cmd,
            operation_context=operation_context,
            returncode=result.returncode,
            stderr=result.stderr.strip(),
        )
    return result


def run_subprocess_bytes_with_context(
    *,
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path,
) -> subprocess.CompletedProcess[bytes]:
    """Like run_subprocess_with_context, but stdout is returned as raw bytes.

    For output that is not guaranteed to be text, such as commit objects,
    whose messages may use any encoding and line endings.

    Raises:
        GitCommandError: If the command exits non-zero
    """
    logger.debug("Running %s in %s", cmd, cwd)
    result = subprocess.run(
        list(cmd),
        cwd=cwd,
        capture_output=True,
        check=False,
    )
    if result.returncode != 0:
        raise GitCommandError(
            cmd=cmd,
            operation_context=operation_context,
            returncode=result.returncode,
            stderr=result.stderr.decode("utf-8", errors="replace").strip(),
        )
    return result
