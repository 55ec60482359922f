"""
Editor integration: opening paths and managing extensions.
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from vscode_bridge.editor.exceptions import EditorError, InvalidExtensionIdError
from vscode_bridge.editor.process import ProcessResult, run_process
from vscode_bridge.filesystem.authorizer import PathAuthorizer, PathLike

if TYPE_CHECKING:
    from vscode_bridge.settings.config import BridgeConfig

logger = logging.getLogger(__name__)

# publisher.name, optionally pinned with @version
EXTENSION_ID_RE = re.compile(r"^[A-Za-z0-9][\w-]*\.[A-Za-z0-9][\w.-]*(@[\w.+-]+)?$")


def validate_extension_id(extension_id: str) -> str:
    """
    Check that an extension id looks like ``publisher.name[@version]``.

    Raises:
        InvalidExtensionIdError: If the id is malformed
    """
    if not extension_id or not EXTENSION_ID_RE.match(extension_id):
        raise InvalidExtensionIdError(f"Invalid extension id: {extension_id!r}")
    return extension_id


class EditorLauncher:
    """
    Runs the editor command line (``code`` by default).

    Paths are authorized before the editor is spawned; extension commands
    take no path.

    Usage:
        launcher = EditorLauncher(authorizer, editor_command="code")
        await launcher.open("~/Code/app", new_window=True)
    """

    def __init__(
        self,
        authorizer: PathAuthorizer,
        editor_command: str = "code",
        timeout: float = 30.0,
    ):
        self.authorizer = authorizer
        self.editor_command = editor_command
        self.timeout = timeout

    @classmethod
    def from_config(
        cls, config: "BridgeConfig", authorizer: PathAuthorizer
    ) -> "EditorLauncher":
        return cls(
            authorizer,
            editor_command=config.editor_command,
            timeout=config.command_timeout_seconds,
        )

    async def open(
        self, path: PathLike, new_window: bool = False, wait: bool = False
    ) -> ProcessResult:
        """
        Open a file or directory in the editor.

        Raises:
            FileAccessDeniedError: If the path is outside the allowed directories
            EditorError: If the editor exits with an error
            CommandTimeoutError: If the editor does not return in time
        """
        target = self.authorizer.authorize(path)

        logger.info(f"Opening editor: {target}")

        argv = [self.editor_command, str(target)]
        if new_window:
            argv.append("--new-window")
        if wait:
            argv.append("--wait")

        return await self._run(argv, "Failed to open editor")

    async def open_authorized(self, target: Path) -> ProcessResult:
        """Open a path that the caller has already authorized."""
        return await self._run(
            [self.editor_command, str(target)], "Failed to open editor"
        )

    async def list_extensions(self, enabled_only: bool = False) -> list[str]:
        """Return installed extensions as ``publisher.name@version`` strings."""
        argv = [self.editor_command, "--list-extensions", "--show-versions"]
        if enabled_only:
            argv.append("--enabled-only")

        result = await self._run(argv, "Failed to list extensions")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    async def install_extension(
        self, extension_id: str, force: bool = False
    ) -> ProcessResult:
        validate_extension_id(extension_id)
        logger.info(f"Installing extension: {extension_id}")

        argv = [self.editor_command, "--install-extension", extension_id]
        if force:
            argv.append("--force")
        return await self._run(argv, "Failed to install extension")

    async def uninstall_extension(self, extension_id: str) -> ProcessResult:
        validate_extension_id(extension_id)
        logger.info(f"Uninstalling extension: {extension_id}")

        return await self._run(
            [self.editor_command, "--uninstall-extension", extension_id],
            "Failed to uninstall extension",
        )

    async def _run(self, argv: list[str], failure: str) -> ProcessResult:
        result = await run_process(argv, timeout=self.timeout)
        if not result.ok:
            raise EditorError(
                f"{failure}: {result.stderr.strip() or result.stdout.strip()}",
                command=result.command,
                return_code=result.returncode,
                stderr=result.stderr,
            )
        return result
