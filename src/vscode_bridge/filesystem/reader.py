"""
Restricted file reader and directory lister.
"""

import logging
from typing import Optional

from vscode_bridge.filesystem.authorizer import PathAuthorizer, PathLike
from vscode_bridge.filesystem.exceptions import FileSystemError, PathNotFoundError
from vscode_bridge.filesystem.walker import DirectoryWalker, FileEntry

logger = logging.getLogger(__name__)


class RestrictedFileReader:
    """
    Read-only filesystem access confined to the allowed directories.

    Usage:
        authorizer = PathAuthorizer.configure(["~/Code"])
        reader = RestrictedFileReader(authorizer)

        try:
            content = reader.read_file("~/Code/app/main.py")
        except FileAccessDeniedError as e:
            print(f"Access denied: {e}")
    """

    def __init__(
        self,
        authorizer: PathAuthorizer,
        walker: Optional[DirectoryWalker] = None,
    ):
        self.authorizer = authorizer
        self.walker = walker or DirectoryWalker(authorizer=authorizer)

    def read_file(self, path: PathLike, encoding: str = "utf-8") -> str:
        """
        Read a text file.

        Raises:
            FileAccessDeniedError: If the path is outside the allowed directories
            InvalidPathError: If the path is empty
            PathNotFoundError: If the file doesn't exist
            FileSystemError: If the path is a directory
            UnicodeDecodeError: If the file can't be decoded
        """
        resolved_path = self.authorizer.authorize(path)

        logger.debug(f"Reading file: {resolved_path}")

        if not resolved_path.exists():
            raise PathNotFoundError(resolved_path, "File not found")

        if resolved_path.is_dir():
            raise FileSystemError(f"Path is a directory, not a file: {resolved_path}")

        return resolved_path.read_text(encoding=encoding)

    def list_directory(
        self,
        directory: PathLike,
        include_hidden: bool = False,
        recursive: bool = False,
    ) -> list[FileEntry]:
        """
        List entries of a directory.

        Raises:
            FileAccessDeniedError: If the path is outside the allowed directories
            InvalidPathError: If the path is empty
            PathNotFoundError: If the directory doesn't exist
            NotADirectoryPathError: If the path is not a directory
        """
        resolved_dir = self.authorizer.authorize(directory)

        logger.debug(f"Listing files in: {resolved_dir}")

        entries = list(
            self.walker.walk(
                resolved_dir, include_hidden=include_hidden, recursive=recursive
            )
        )

        logger.debug(f"Listed {len(entries)} entries in {resolved_dir}")
        return entries
