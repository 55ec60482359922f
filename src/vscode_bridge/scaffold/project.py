"""
Project scaffolding in the allowed directories.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from vscode_bridge.editor.exceptions import EditorError
from vscode_bridge.editor.launcher import EditorLauncher
from vscode_bridge.filesystem.authorizer import PathLike
from vscode_bridge.filesystem.exceptions import InvalidPathError
from vscode_bridge.filesystem.writer import RestrictedFileWriter
from vscode_bridge.scaffold.templates import DEFAULT_TEMPLATE, TemplateRegistry

logger = logging.getLogger(__name__)


class ProjectResult(BaseModel):
    """Outcome of a project creation."""

    name: str
    template: str
    path: Path
    files: list[str] = Field(default_factory=list)
    opened_in_editor: bool = False
    notes: list[str] = Field(default_factory=list)

    def summary(self) -> str:
        lines = [
            f'Successfully created project "{self.name}" with template '
            f'"{self.template}" at {self.path}'
        ]
        if self.opened_in_editor:
            lines.append("Project opened in editor")
        lines.extend(self.notes)
        return "\n".join(lines)


def validate_project_name(name: str) -> str:
    """
    A project name must be a single, non-hidden path segment.

    Raises:
        InvalidPathError: If the name is empty or contains separators
    """
    if not name or not name.strip():
        raise InvalidPathError(name, "Empty project name")
    if name in (".", "..") or "/" in name or "\\" in name:
        raise InvalidPathError(name, "Project name must be a single directory name")
    return name


class ProjectScaffolder:
    """
    Creates project directories from templates.

    All files go through the restricted writer, so every path a template
    produces is authorized individually.
    """

    def __init__(
        self,
        writer: RestrictedFileWriter,
        templates: TemplateRegistry,
        default_workspace: Path,
        launcher: Optional[EditorLauncher] = None,
        auto_open_editor: bool = True,
    ):
        self.writer = writer
        self.templates = templates
        self.default_workspace = default_workspace
        self.launcher = launcher
        self.auto_open_editor = auto_open_editor

    async def create_project(
        self,
        name: str,
        template: str = DEFAULT_TEMPLATE,
        directory: Optional[PathLike] = None,
        open_in_editor: bool = True,
    ) -> ProjectResult:
        """
        Create ``directory/name`` (or ``default_workspace/name``) from a template.

        An editor failure does not fail the creation; it is reported as a
        note in the result.

        Raises:
            InvalidPathError: If the project name is invalid
            FileAccessDeniedError: If the project directory is not allowed
        """
        validate_project_name(name)
        parent = Path(directory).expanduser() if directory else self.default_workspace
        project_dir = self.writer.create_directory(parent / name)

        project_template = self.templates.get(template)
        logger.info(
            f"Creating project: {name} with template: {project_template.name}"
        )

        written = []
        for relative, content in project_template.render(name).items():
            self.writer.write_file(project_dir / relative, content, create_parents=True)
            written.append(relative)

        result = ProjectResult(
            name=name,
            template=project_template.name,
            path=project_dir,
            files=written,
        )

        if open_in_editor and self.auto_open_editor and self.launcher is not None:
            try:
                await self.launcher.open_authorized(project_dir)
                result.opened_in_editor = True
            except EditorError as e:
                logger.warning(f"Could not open editor for {project_dir}: {e}")
                result.notes.append("Note: Could not open editor automatically")

        return result
