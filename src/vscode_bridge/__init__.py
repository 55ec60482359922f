"""
vscode-bridge - file management, project scaffolding and editor
integration tools for agents.

Every operation is confined to a configured set of allowed directories.
"""

__version__ = "0.1.0"

from vscode_bridge.filesystem import (
    BridgeError,
    ConfigError,
    DirectoryWalker,
    FileAccessDeniedError,
    FileEntry,
    FileSystemError,
    InvalidPathError,
    InvalidPatternError,
    NotADirectoryPathError,
    PathAuthorizer,
    PathNotFoundError,
    SearchMatch,
    TextScanner,
)

from vscode_bridge.editor import CommandTimeoutError, EditorError

from vscode_bridge.settings import BridgeConfig

from vscode_bridge.tools import WorkspaceTools

__all__ = [
    # Version
    "__version__",
    # Core
    "PathAuthorizer",
    "DirectoryWalker",
    "TextScanner",
    "FileEntry",
    "SearchMatch",
    # Errors
    "BridgeError",
    "ConfigError",
    "FileAccessDeniedError",
    "FileSystemError",
    "InvalidPathError",
    "InvalidPatternError",
    "NotADirectoryPathError",
    "PathNotFoundError",
    "CommandTimeoutError",
    "EditorError",
    # Settings
    "BridgeConfig",
    # Tools
    "WorkspaceTools",
]
