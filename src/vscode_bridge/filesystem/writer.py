"""
Restricted file writer for file and directory creation and deletion.
"""

import logging
import shutil
from pathlib import Path

from vscode_bridge.filesystem.authorizer import PathAuthorizer, PathLike
from vscode_bridge.filesystem.exceptions import (
    FileAccessDeniedError,
    FileSystemError,
    PathNotFoundError,
)

logger = logging.getLogger(__name__)


class RestrictedFileWriter:
    """
    Mutating filesystem access confined to the allowed directories.

    Usage:
        writer = RestrictedFileWriter(PathAuthorizer.configure(["~/Code"]))
        writer.write_file("~/Code/app/notes.txt", "Hello, world!")
    """

    def __init__(self, authorizer: PathAuthorizer):
        self.authorizer = authorizer

    def write_file(
        self,
        path: PathLike,
        content: str,
        encoding: str = "utf-8",
        create_parents: bool = True,
    ) -> int:
        """
        Write text to a file, replacing any previous content.

        Args:
            path: Path to the file to write
            content: Content to write
            encoding: Text encoding (default: utf-8)
            create_parents: Create parent directories if they don't exist

        Returns:
            Number of characters written

        Raises:
            FileAccessDeniedError: If the path is outside the allowed directories
            InvalidPathError: If the path is empty
            PathNotFoundError: If the parent is missing and create_parents is False
            FileSystemError: If the path is an existing directory
        """
        resolved_path = self.authorizer.authorize(path)

        logger.debug(f"Writing file: {resolved_path}")

        if resolved_path.is_dir():
            raise FileSystemError(f"Path is a directory, not a file: {resolved_path}")

        if not resolved_path.parent.exists():
            if not create_parents:
                raise PathNotFoundError(resolved_path.parent, "Parent directory not found")
            resolved_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created parent directories for {resolved_path}")

        resolved_path.write_text(content, encoding=encoding)
        logger.info(f"Wrote {len(content)} characters to {resolved_path}")
        return len(content)

    def create_directory(self, path: PathLike) -> Path:
        """
        Create a directory and any missing parents.

        Raises:
            FileAccessDeniedError: If the path is outside the allowed directories
            InvalidPathError: If the path is empty
        """
        resolved_path = self.authorizer.authorize(path)

        logger.debug(f"Creating directory: {resolved_path}")

        if resolved_path.exists() and not resolved_path.is_dir():
            raise FileSystemError(f"Path exists and is not a directory: {resolved_path}")

        resolved_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created directory: {resolved_path}")
        return resolved_path

    def delete(self, path: PathLike, recursive: bool = False) -> Path:
        """
        Delete a file or directory.

        Directories must be empty unless ``recursive`` is set. An allowed
        root itself can never be deleted.

        Raises:
            FileAccessDeniedError: If the path is outside the allowed directories
                or is an allowed root
            InvalidPathError: If the path is empty
            PathNotFoundError: If the path doesn't exist
            FileSystemError: If a non-empty directory is deleted without recursive
        """
        resolved_path = self.authorizer.authorize(path)

        if self.authorizer.is_root(resolved_path):
            raise FileAccessDeniedError(
                path, self.authorizer.roots, reason="Refusing to delete allowed directory"
            )

        logger.debug(f"Deleting: {resolved_path}")

        if not resolved_path.exists() and not resolved_path.is_symlink():
            raise PathNotFoundError(resolved_path)

        if resolved_path.is_dir() and not resolved_path.is_symlink():
            if recursive:
                shutil.rmtree(resolved_path)
            else:
                try:
                    resolved_path.rmdir()
                except OSError as e:
                    raise FileSystemError(
                        f"Directory not empty (use recursive): {resolved_path}"
                    ) from e
        else:
            resolved_path.unlink()

        logger.info(f"Deleted: {resolved_path}")
        return resolved_path
