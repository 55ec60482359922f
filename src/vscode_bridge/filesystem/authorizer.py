"""
Path authorization against a fixed set of allowed root directories.
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Union

from vscode_bridge.filesystem.exceptions import (
    ConfigError,
    FileAccessDeniedError,
    InvalidPathError,
)

if TYPE_CHECKING:
    from vscode_bridge.settings.config import BridgeConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def expand_path(path_request: Optional[PathLike]) -> Optional[Path]:
    """
    Expand a user supplied path into its canonical, absolute form.

    A leading ``~`` is replaced by the home directory and ``.``/``..``
    segments are collapsed lexically. The path does not need to exist and
    symlinks are left untouched, so the result is stable:
    ``expand_path(expand_path(p)) == expand_path(p)``.

    Returns:
        The absolute path, or None for an empty or missing request
    """
    if path_request is None:
        return None
    raw = os.fspath(path_request)
    if not raw:
        return None
    return Path(os.path.abspath(os.path.expanduser(raw)))


def _is_within_directory(path: Path, directory: Path) -> bool:
    """Component-wise containment: ``directory`` is ``path`` or an ancestor of it."""
    try:
        path.relative_to(directory)
        return True
    except ValueError:
        return False


class PathAuthorizer:
    """
    Confines filesystem and process operations to allowed root directories.

    Roots are expanded once and never change afterwards. Containment is
    decided per path component, so a root ``/home/u/Code`` admits
    ``/home/u/Code/app`` but not ``/home/u/CodeExtra``.

    Usage:
        authorizer = PathAuthorizer.configure(["~/Code"])
        target = authorizer.authorize("~/Code/app/main.py")
    """

    def __init__(self, roots: Iterable[Path], follow_symlinks: bool = False):
        self._roots = tuple(roots)
        self.follow_symlinks = follow_symlinks
        if not self._roots:
            raise ConfigError("No allowed directories configured")

    @classmethod
    def configure(
        cls,
        raw_roots: Iterable[Optional[PathLike]],
        defaults: Optional[Iterable[Optional[PathLike]]] = None,
        follow_symlinks: bool = False,
    ) -> "PathAuthorizer":
        """
        Build an authorizer from raw root strings.

        Empty entries are dropped and duplicates removed, keeping the first
        occurrence. When nothing usable remains, ``defaults`` are used
        instead.

        Raises:
            ConfigError: If neither the roots nor the defaults yield a directory
        """
        roots = cls._expand_all(raw_roots)
        if not roots and defaults is not None:
            logger.debug("No allowed directories given, using defaults")
            roots = cls._expand_all(defaults)
        if not roots:
            raise ConfigError(
                "No allowed directories configured and no defaults supplied"
            )
        return cls(roots, follow_symlinks=follow_symlinks)

    @classmethod
    def from_config(cls, config: "BridgeConfig") -> "PathAuthorizer":
        """Build the authorizer for a bridge configuration."""
        from vscode_bridge.settings.config import default_allowed_directories

        return cls.configure(
            config.allowed_directories,
            defaults=default_allowed_directories(),
            follow_symlinks=config.follow_symlinks,
        )

    @staticmethod
    def _expand_all(raw_roots: Iterable[Optional[PathLike]]) -> list[Path]:
        roots: list[Path] = []
        for raw in raw_roots:
            root = expand_path(raw)
            if root is not None and root not in roots:
                roots.append(root)
        return roots

    @property
    def roots(self) -> tuple[Path, ...]:
        """The allowed root directories, in configuration order."""
        return self._roots

    def expand(self, path_request: Optional[PathLike]) -> Optional[Path]:
        return expand_path(path_request)

    def is_allowed(self, path: Optional[PathLike]) -> bool:
        """
        Check whether an expanded path lies inside an allowed root.

        Raises:
            InvalidPathError: If ``path`` is empty or None
        """
        if path is None or not os.fspath(path):
            raise InvalidPathError(path, "Empty path")

        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = expand_path(candidate)

        if not any(_is_within_directory(candidate, root) for root in self._roots):
            return False

        if self.follow_symlinks:
            return True

        # A symlink under a root must not lead outside of every root.
        try:
            real = candidate.resolve()
        except (OSError, RuntimeError) as e:
            logger.debug(f"Cannot resolve {candidate}: {e}")
            return False
        return any(
            _is_within_directory(real, root.resolve()) for root in self._roots
        )

    def authorize(self, path_request: Optional[PathLike]) -> Path:
        """
        Expand a path request and ensure it is allowed.

        Returns:
            The canonical path

        Raises:
            InvalidPathError: If the request is empty
            FileAccessDeniedError: If the path is outside all allowed roots
        """
        expanded = self.expand(path_request)
        if expanded is None:
            raise InvalidPathError(path_request, "Empty path")

        if not self.is_allowed(expanded):
            logger.warning(f"Access denied to {path_request}")
            logger.debug(f"Expanded path: {expanded}")
            logger.debug(f"Allowed directories: {[str(r) for r in self._roots]}")
            raise FileAccessDeniedError(path_request, self._roots)

        return expanded

    def is_root(self, path: Path) -> bool:
        """True if ``path`` is one of the allowed roots itself."""
        return path in self._roots

    def __repr__(self) -> str:
        return f"PathAuthorizer(roots={[str(r) for r in self._roots]})"
