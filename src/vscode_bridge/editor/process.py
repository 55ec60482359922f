"""
Asynchronous subprocess execution with a time limit.
"""

import asyncio
import logging
import shlex
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from vscode_bridge.editor.exceptions import CommandNotFoundError, CommandTimeoutError

logger = logging.getLogger(__name__)


class ProcessResult(BaseModel):
    """Captured outcome of a finished process."""

    command: str = Field(description="Command line, shell-quoted")
    cwd: Optional[str] = Field(default=None, description="Working directory")
    returncode: int = Field(description="Exit status")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_process(
    argv: Sequence[str],
    cwd: Optional[Path] = None,
    timeout: float = 30.0,
) -> ProcessResult:
    """
    Run a program without a shell and capture its output.

    Args:
        argv: Program and arguments
        cwd: Working directory (None = current directory)
        timeout: Seconds before the process is killed

    Raises:
        CommandNotFoundError: If the program cannot be started
        CommandTimeoutError: If the process runs longer than ``timeout``
    """
    command = shlex.join(argv)
    logger.debug(f"Running: {command} (cwd={cwd})")

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd) if cwd is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise CommandNotFoundError(f"Executable not found: {argv[0]}", command=command) from e
    except OSError as e:
        raise CommandNotFoundError(f"Cannot start {argv[0]}: {e}", command=command) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{command} timed out after {timeout}s")
        proc.kill()
        await proc.wait()
        raise CommandTimeoutError(command, timeout)

    result = ProcessResult(
        command=command,
        cwd=str(cwd) if cwd is not None else None,
        returncode=proc.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    logger.debug(f"{command} exited with {result.returncode}")
    return result
