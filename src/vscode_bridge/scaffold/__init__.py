"""
Project scaffolding from templates.
"""

from vscode_bridge.scaffold.templates import (
    DEFAULT_TEMPLATE,
    ProjectTemplate,
    TemplateRegistry,
)
from vscode_bridge.scaffold.project import (
    ProjectResult,
    ProjectScaffolder,
    validate_project_name,
)

__all__ = [
    "DEFAULT_TEMPLATE",
    "ProjectTemplate",
    "TemplateRegistry",
    "ProjectResult",
    "ProjectScaffolder",
    "validate_project_name",
]
