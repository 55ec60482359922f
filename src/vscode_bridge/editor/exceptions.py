"""
Editor and shell process exceptions.
"""

from typing import Optional

from vscode_bridge.filesystem.exceptions import BridgeError


class EditorError(BridgeError):
    """Base exception for external editor and shell processes."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        return_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.command = command
        self.return_code = return_code
        self.stderr = stderr

    def __str__(self) -> str:
        parts = [self.message]
        if self.command:
            parts.append(f"command='{self.command}'")
        if self.return_code is not None:
            parts.append(f"return_code={self.return_code}")
        return " ".join(parts)


class CommandTimeoutError(EditorError):
    """Raised when an external process exceeds its time limit."""

    def __init__(self, command: str, timeout: float):
        super().__init__(f"Command timed out after {timeout:g} seconds", command=command)
        self.timeout = timeout


class CommandNotFoundError(EditorError):
    """Raised when the executable to spawn does not exist."""

    pass


class InvalidExtensionIdError(EditorError):
    """Raised when an extension identifier is malformed."""

    pass
