"""
vscode-bridge configuration.

This module provides the immutable configuration value shared by every
component: allowed directories, default workspace, editor and shell
settings, and feature flags.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vscode_bridge.filesystem.authorizer import expand_path


def default_allowed_directories() -> list[Path]:
    """Directories allowed when none are configured explicitly."""
    home = Path.home()
    return [home / "Code", home / "Documents", home / "Desktop"]


class BridgeConfig(BaseModel):
    """
    Configuration for the bridge, built once at startup.

    The model is frozen: components receive the same instance and never
    mutate it.

    Example:
        ```python
        config = BridgeConfig(
            allowed_directories=["~/Code", "/srv/projects"],
            default_workspace="~/Code",
            auto_open_editor=False,
        )
        ```
    """

    model_config = {"frozen": True, "extra": "forbid"}

    allowed_directories: tuple[Path, ...] = Field(
        default=(),
        description="Allowed root directories (expanded to absolute paths)",
    )
    default_workspace: Path = Field(
        default_factory=lambda: Path.home() / "Code",
        description="Parent directory for new projects when none is given",
    )
    debug: bool = Field(
        default=False,
        description="Verbose logging, including denied paths",
    )
    auto_open_editor: bool = Field(
        default=True,
        description="Open newly created projects in the editor",
    )
    editor_command: str = Field(
        default="code",
        description="Editor executable used to open paths and manage extensions",
    )
    shell: str = Field(
        default_factory=lambda: os.environ.get("SHELL", "/bin/sh"),
        description="Shell used by run_terminal_command",
    )
    command_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=3600.0,
        description="Upper bound for external editor and shell processes (seconds)",
    )
    max_depth: int = Field(
        default=10,
        ge=0,
        description="Maximum recursion depth for directory listing and search",
    )
    follow_symlinks: bool = Field(
        default=False,
        description="Allow symbolic links inside a root to point outside of it",
    )
    max_search_results: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of matches returned by search_files",
    )
    templates_dir: Optional[Path] = Field(
        default=None,
        description="Directory with project template files (*.yaml)",
    )

    @field_validator("allowed_directories", mode="before")
    @classmethod
    def expand_directories(cls, v):
        """Expand all directories to absolute paths, keeping order."""
        if not v:
            return ()
        if isinstance(v, (str, Path)):
            v = [v]
        expanded = []
        for p in v:
            path = expand_path(p)
            if path is not None and path not in expanded:
                expanded.append(path)
        return tuple(expanded)

    @field_validator("default_workspace", "templates_dir", mode="before")
    @classmethod
    def expand_single_path(cls, v):
        if v is None or v == "":
            return None
        return expand_path(v)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BridgeConfig":
        """
        Load configuration from a YAML or JSON file.

        File format (YAML):
            ```yaml
            allowed_directories:
              - ~/Code
              - ~/Documents
            default_workspace: ~/Code
            auto_open_editor: false
            command_timeout_seconds: 30
            ```

        Raises:
            FileNotFoundError: If the config file doesn't exist
        """
        path = Path(path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text()

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError:
                data = json.loads(content)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "BridgeConfig":
        return cls(**data)

    @classmethod
    def from_env(cls, prefix: str = "VSCODE_BRIDGE_") -> "BridgeConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            VSCODE_BRIDGE_ALLOWED_DIRECTORIES - os.pathsep separated list
            VSCODE_BRIDGE_DEFAULT_WORKSPACE - Parent directory for new projects
            VSCODE_BRIDGE_DEBUG - Enable debug logging
            VSCODE_BRIDGE_AUTO_OPEN_EDITOR - Open created projects
            VSCODE_BRIDGE_EDITOR_COMMAND - Editor executable
            VSCODE_BRIDGE_SHELL - Shell for terminal commands
            VSCODE_BRIDGE_COMMAND_TIMEOUT_SECONDS - Process timeout
            VSCODE_BRIDGE_MAX_DEPTH - Recursion bound
            VSCODE_BRIDGE_FOLLOW_SYMLINKS - Trust symlinks below allowed directories
            VSCODE_BRIDGE_MAX_SEARCH_RESULTS - Cap on search_files matches
            VSCODE_BRIDGE_TEMPLATES_DIR - Project templates directory
        """
        env = BridgeEnvSettings(_env_prefix=prefix)
        data: dict[str, Any] = env.model_dump(exclude_none=True)

        raw_dirs = data.pop("allowed_directories", None)
        if raw_dirs:
            data["allowed_directories"] = [d for d in raw_dirs.split(os.pathsep) if d]

        return cls(**data)

    def with_overrides(self, **overrides: Any) -> "BridgeConfig":
        """Return a new config with the given fields replaced (None values ignored)."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return BridgeConfig(**data)

    def to_dict(self) -> dict:
        """Export configuration to a plain, serializable dictionary."""
        return self.model_dump(mode="json")

    def __str__(self) -> str:
        return (
            f"BridgeConfig(allowed_dirs={len(self.allowed_directories)}, "
            f"workspace={self.default_workspace}, debug={self.debug})"
        )


class BridgeEnvSettings(BaseSettings):
    """Raw environment values read by `BridgeConfig.from_env`."""

    model_config = SettingsConfigDict(env_prefix="VSCODE_BRIDGE_", extra="ignore")

    allowed_directories: Optional[str] = None
    default_workspace: Optional[str] = None
    debug: Optional[bool] = None
    auto_open_editor: Optional[bool] = None
    editor_command: Optional[str] = None
    shell: Optional[str] = None
    command_timeout_seconds: Optional[float] = None
    max_depth: Optional[int] = None
    follow_symlinks: Optional[bool] = None
    max_search_results: Optional[int] = None
    templates_dir: Optional[str] = None
