"""
Line-level regular expression search over a directory tree.
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from pydantic import BaseModel, Field

from vscode_bridge.filesystem.exceptions import InvalidPatternError
from vscode_bridge.filesystem.walker import DirectoryWalker, EntryKind, ensure_directory

if TYPE_CHECKING:
    from vscode_bridge.filesystem.authorizer import PathAuthorizer

logger = logging.getLogger(__name__)


class SearchMatch(BaseModel):
    """A single matching line."""

    model_config = {"frozen": True}

    file: str = Field(description="File path relative to the search root")
    line: int = Field(description="1-based line number")
    content: str = Field(description="Matching line, stripped of surrounding whitespace")
    match: str = Field(description="First substring matched by the pattern")

    def __str__(self) -> str:
        return f"{self.file}:{self.line} - {self.content}"


def compile_pattern(pattern: str, case_sensitive: bool = False) -> re.Pattern:
    """
    Compile a search pattern.

    Raises:
        InvalidPatternError: If the pattern is not a valid regular expression
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e))


class TextScanner:
    """
    Regex search over the files produced by a DirectoryWalker.

    Hidden files and directories are never searched. Files that cannot be
    read or decoded as UTF-8 are skipped; the remaining results are still
    returned. With an authorizer, symlinked files whose target is not
    allowed are never opened.

    Usage:
        scanner = TextScanner(DirectoryWalker())
        for match in scanner.search(Path("/tmp/project"), r"def \\w+", [".py"]):
            print(match)
    """

    def __init__(
        self,
        walker: Optional[DirectoryWalker] = None,
        authorizer: Optional["PathAuthorizer"] = None,
    ):
        self.walker = walker or DirectoryWalker(authorizer=authorizer)
        self.authorizer = authorizer

    def search(
        self,
        root: Path,
        pattern: str,
        extensions: Iterable[str] = (),
        recursive: bool = True,
        case_sensitive: bool = False,
    ) -> Iterator[SearchMatch]:
        """
        Search files below ``root`` for lines matching ``pattern``.

        The pattern and root are validated immediately; matches are
        produced lazily, file by file in walk order, lines ascending.

        Args:
            root: Already authorized directory
            pattern: Regular expression
            extensions: Filename suffixes to include (empty = all files)
            recursive: Search subdirectories
            case_sensitive: Match case exactly

        Raises:
            InvalidPatternError: If the pattern does not compile
            PathNotFoundError: If root does not exist
            NotADirectoryPathError: If root is not a directory
        """
        regex = compile_pattern(pattern, case_sensitive)
        ensure_directory(root)
        suffixes = tuple(extensions)

        logger.debug(f"Searching in: {root} for pattern: {pattern}")
        return self._iter_matches(root, regex, suffixes, recursive)

    def _iter_matches(
        self,
        root: Path,
        regex: re.Pattern,
        suffixes: tuple[str, ...],
        recursive: bool,
    ) -> Iterator[SearchMatch]:
        for entry in self.walker.walk(root, include_hidden=False, recursive=recursive):
            if entry.kind != EntryKind.FILE:
                continue
            if suffixes and not entry.name.endswith(suffixes):
                continue

            file_path = root / entry.path
            if not file_path.is_file():
                continue
            if not self._readable(file_path):
                continue

            content = self._read_text(file_path)
            if content is None:
                continue

            for line_number, line in enumerate(content.split("\n"), start=1):
                found = regex.search(line)
                if found:
                    yield SearchMatch(
                        file=entry.path,
                        line=line_number,
                        content=line.strip(),
                        match=found.group(0),
                    )

    def _read_text(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Skipping {path}: {e}")
            return None

    def _readable(self, path: Path) -> bool:
        if self.authorizer is None or not path.is_symlink():
            return True
        if self.authorizer.is_allowed(path):
            return True
        logger.debug(f"Skipping symlink leading outside allowed directories: {path}")
        return False
