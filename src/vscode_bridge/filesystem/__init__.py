"""
Restricted filesystem interface.

Every path is authorized against the configured allowed directories
before it is read, written, listed or searched.
"""

from vscode_bridge.filesystem.authorizer import PathAuthorizer, expand_path
from vscode_bridge.filesystem.exceptions import (
    BridgeError,
    ConfigError,
    FileAccessDeniedError,
    FileSystemError,
    InvalidPathError,
    InvalidPatternError,
    NotADirectoryPathError,
    PathNotFoundError,
    SearchError,
)
from vscode_bridge.filesystem.walker import DirectoryWalker, EntryKind, FileEntry
from vscode_bridge.filesystem.search import SearchMatch, TextScanner
from vscode_bridge.filesystem.reader import RestrictedFileReader
from vscode_bridge.filesystem.writer import RestrictedFileWriter

__all__ = [
    "PathAuthorizer",
    "expand_path",
    "BridgeError",
    "ConfigError",
    "FileAccessDeniedError",
    "FileSystemError",
    "InvalidPathError",
    "InvalidPatternError",
    "NotADirectoryPathError",
    "PathNotFoundError",
    "SearchError",
    "DirectoryWalker",
    "EntryKind",
    "FileEntry",
    "SearchMatch",
    "TextScanner",
    "RestrictedFileReader",
    "RestrictedFileWriter",
]
