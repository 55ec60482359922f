"""
Project templates.

Only the ``empty`` template is built in. Further templates are loaded from
YAML files in the configured templates directory:

    ```yaml
    name: python
    description: Minimal Python project
    files:
      main.py: |
        print("Hello, {project_name}!")
      README.md: "# {project_name}\\n"
    ```

``{project_name}`` is replaced in both file paths and contents.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

PROJECT_NAME_PLACEHOLDER = "{project_name}"
DEFAULT_TEMPLATE = "empty"


class ProjectTemplate(BaseModel):
    """A named set of files to create in a new project."""

    name: str = Field(description="Template identifier")
    description: str = Field(default="", description="Human readable summary")
    files: dict[str, str] = Field(
        default_factory=dict,
        description="Relative file path -> content",
    )

    def render(self, project_name: str) -> dict[str, str]:
        """Return the template files with the project name filled in."""
        return {
            path.replace(PROJECT_NAME_PLACEHOLDER, project_name): content.replace(
                PROJECT_NAME_PLACEHOLDER, project_name
            )
            for path, content in self.files.items()
        }

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ProjectTemplate":
        path = Path(path)
        data = yaml.safe_load(path.read_text()) or {}
        data.setdefault("name", path.stem)
        return cls(**data)


class TemplateRegistry:
    """Lookup of project templates by name."""

    def __init__(self, templates: Optional[list[ProjectTemplate]] = None):
        self._templates: dict[str, ProjectTemplate] = {
            DEFAULT_TEMPLATE: ProjectTemplate(
                name=DEFAULT_TEMPLATE, description="Empty project directory"
            )
        }
        for template in templates or []:
            self.register(template)

    @classmethod
    def from_directory(cls, directory: Optional[Path]) -> "TemplateRegistry":
        """
        Load every ``*.yaml``/``*.yml`` template in ``directory``.

        Files that fail to parse are skipped with a warning.
        """
        registry = cls()
        if directory is None:
            return registry
        if not directory.is_dir():
            logger.warning(f"Templates directory not found: {directory}")
            return registry

        for path in sorted(directory.iterdir()):
            if path.suffix not in (".yaml", ".yml"):
                continue
            try:
                registry.register(ProjectTemplate.from_file(path))
            except (OSError, yaml.YAMLError, ValidationError) as e:
                logger.warning(f"Skipping template {path}: {e}")

        logger.debug(f"Loaded templates: {registry.names()}")
        return registry

    def register(self, template: ProjectTemplate) -> None:
        self._templates[template.name] = template

    def get(self, name: str) -> ProjectTemplate:
        """Return the named template, falling back to ``empty``."""
        template = self._templates.get(name)
        if template is None:
            logger.warning(f"Unknown template {name!r}, using {DEFAULT_TEMPLATE!r}")
            return self._templates[DEFAULT_TEMPLATE]
        return template

    def names(self) -> list[str]:
        return sorted(self._templates)

    def __contains__(self, name: str) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)
