"""
Exceptions for filesystem operations.
"""

from pathlib import Path
from typing import Iterable, Union


class BridgeError(Exception):
    """Base exception for all vscode-bridge errors."""

    pass


class FileSystemError(BridgeError):
    """Base exception for filesystem operations."""

    pass


class ConfigError(FileSystemError):
    """Raised when no usable allowed directories are configured."""

    pass


class FileAccessDeniedError(FileSystemError):
    """Raised when a path lies outside every allowed directory."""

    def __init__(
        self,
        path: Union[str, Path],
        allowed_directories: Iterable[Union[str, Path]] = (),
        reason: str = "Access denied to path",
    ):
        self.path = str(path)
        self.allowed_directories = [str(d) for d in allowed_directories]
        self.reason = reason
        message = f"{reason}: {self.path}"
        if self.allowed_directories:
            message += f". Allowed directories: {', '.join(self.allowed_directories)}"
        super().__init__(message)


class InvalidPathError(FileSystemError):
    """Raised when a path is empty, invalid or malformed."""

    def __init__(self, path: object, reason: str = "Invalid path"):
        self.path = "" if path is None else str(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path!r}")


class PathNotFoundError(FileSystemError):
    """Raised when a path that must exist does not."""

    def __init__(self, path: Union[str, Path], reason: str = "Path not found"):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class NotADirectoryPathError(FileSystemError):
    """Raised when a directory was expected but something else was found."""

    def __init__(self, path: Union[str, Path], reason: str = "Path is not a directory"):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class SearchError(FileSystemError):
    """Raised when a search operation fails."""

    pass


class InvalidPatternError(SearchError):
    """Raised when a search pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex pattern {pattern!r}: {reason}")
