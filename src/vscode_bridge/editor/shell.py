"""
Terminal command execution inside the allowed directories.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from vscode_bridge.editor.process import ProcessResult, run_process
from vscode_bridge.filesystem.authorizer import PathAuthorizer, PathLike
from vscode_bridge.filesystem.walker import ensure_directory

if TYPE_CHECKING:
    from vscode_bridge.settings.config import BridgeConfig

logger = logging.getLogger(__name__)


class ShellRunner:
    """
    Runs terminal commands through a shell.

    An explicit working directory is authorized first; without one the
    command runs in the current directory of the process.
    """

    def __init__(
        self,
        authorizer: PathAuthorizer,
        shell: str = "/bin/sh",
        timeout: float = 30.0,
    ):
        self.authorizer = authorizer
        self.shell = shell
        self.timeout = timeout

    @classmethod
    def from_config(
        cls, config: "BridgeConfig", authorizer: PathAuthorizer
    ) -> "ShellRunner":
        return cls(
            authorizer,
            shell=config.shell,
            timeout=config.command_timeout_seconds,
        )

    async def run(
        self,
        command: str,
        directory: Optional[PathLike] = None,
        shell: Optional[str] = None,
    ) -> ProcessResult:
        """
        Run ``command`` with ``shell -c``.

        A non-zero exit status is reported in the result, not raised.

        Raises:
            FileAccessDeniedError: If ``directory`` is outside the allowed directories
            NotADirectoryPathError: If ``directory`` is not an existing directory
            CommandTimeoutError: If the command does not finish in time
        """
        cwd = None
        if directory:
            cwd = ensure_directory(self.authorizer.authorize(directory))

        logger.info(f"Running command: {command} in {cwd or Path.cwd()}")

        return await run_process(
            [shell or self.shell, "-c", command], cwd=cwd, timeout=self.timeout
        )
