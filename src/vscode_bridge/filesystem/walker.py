"""
Depth-bounded directory enumeration.
"""

import logging
import os
import stat
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from pydantic import BaseModel, Field

from vscode_bridge.filesystem.exceptions import (
    NotADirectoryPathError,
    PathNotFoundError,
)

if TYPE_CHECKING:
    from vscode_bridge.filesystem.authorizer import PathAuthorizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


class EntryKind(str, Enum):
    """Kind of a directory entry."""

    FILE = "file"
    DIRECTORY = "directory"


class FileEntry(BaseModel):
    """Metadata snapshot of one directory entry, taken at enumeration time."""

    model_config = {"frozen": True}

    name: str = Field(description="Entry name")
    path: str = Field(description="Path relative to the walk root (POSIX separators)")
    kind: EntryKind = Field(description="file or directory")
    size: int = Field(description="Size in bytes")
    modified: datetime = Field(description="Last modification time (UTC)")
    permissions: str = Field(description="Permission bits as octal, e.g. '644'")

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    def __str__(self) -> str:
        icon = "📁" if self.is_dir else "📄"
        return f"{icon} {self.path} ({self.size} bytes, {self.modified.isoformat()})"


def ensure_directory(path: Path) -> Path:
    """
    Check that ``path`` exists and is a directory.

    Raises:
        PathNotFoundError: If the path does not exist
        NotADirectoryPathError: If the path is not a directory
    """
    if not path.exists():
        raise PathNotFoundError(path, "Directory not found")
    if not path.is_dir():
        raise NotADirectoryPathError(path)
    return path


class DirectoryWalker:
    """
    Lazy, depth-bounded directory enumeration.

    Every directory's children are emitted together, sorted by name,
    before any of them is descended into. Subdirectories are then visited
    depth-first. Symlinked directories are listed but never followed.

    With an authorizer, symlinks whose target is not allowed are left out
    of the listing entirely.

    Usage:
        walker = DirectoryWalker(max_depth=10)
        for entry in walker.walk(Path("/tmp/project"), recursive=True):
            print(entry.path, entry.size)
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        authorizer: Optional["PathAuthorizer"] = None,
    ):
        self.max_depth = max_depth
        self.authorizer = authorizer

    def walk(
        self,
        root: Path,
        include_hidden: bool = False,
        recursive: bool = False,
    ) -> Iterator[FileEntry]:
        """
        Enumerate entries below ``root``.

        The root is validated immediately; entries are produced lazily.

        Args:
            root: Already authorized directory
            include_hidden: Include names starting with '.'
            recursive: Descend into subdirectories (up to ``max_depth``)

        Raises:
            PathNotFoundError: If root does not exist
            NotADirectoryPathError: If root is not a directory
        """
        ensure_directory(root)
        return self._iter_entries(root, include_hidden, recursive)

    def _iter_entries(
        self, root: Path, include_hidden: bool, recursive: bool
    ) -> Iterator[FileEntry]:
        # (directory, depth) pairs still to scan; root is depth 0
        pending: list[tuple[Path, int]] = [(root, 0)]

        while pending:
            directory, depth = pending.pop()
            subdirs: list[Path] = []

            for dir_entry in self._scan(directory):
                if not include_hidden and dir_entry.name.startswith("."):
                    continue

                entry = self._make_entry(root, dir_entry)
                if entry is None:
                    continue
                yield entry

                if (
                    recursive
                    and depth < self.max_depth
                    and dir_entry.is_dir(follow_symlinks=False)
                ):
                    subdirs.append(Path(dir_entry.path))

            # Reversed so the first subdirectory is popped next.
            for subdir in reversed(subdirs):
                pending.append((subdir, depth + 1))

    def _scan(self, directory: Path) -> list[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return []

    def _target_allowed(self, dir_entry: os.DirEntry) -> bool:
        if self.authorizer is None or not dir_entry.is_symlink():
            return True
        if self.authorizer.is_allowed(dir_entry.path):
            return True
        logger.debug(f"Skipping symlink leading outside allowed directories: {dir_entry.path}")
        return False

    def _make_entry(self, root: Path, dir_entry: os.DirEntry) -> Optional[FileEntry]:
        if not self._target_allowed(dir_entry):
            return None

        try:
            try:
                st = dir_entry.stat()
            except FileNotFoundError:
                # Dangling symlink: report the link itself.
                st = dir_entry.stat(follow_symlinks=False)
        except OSError as e:
            logger.debug(f"Skipping {dir_entry.path}: {e}")
            return None

        # Kind and metadata come from the same stat.
        is_dir = stat.S_ISDIR(st.st_mode)
        relative = Path(dir_entry.path).relative_to(root).as_posix()

        return FileEntry(
            name=dir_entry.name,
            path=relative,
            kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            permissions=format(stat.S_IMODE(st.st_mode) & 0o777, "03o"),
        )
