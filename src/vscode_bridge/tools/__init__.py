"""
Agent-facing tool dispatcher.
"""

from vscode_bridge.tools.workspace import WorkspaceTools

__all__ = ["WorkspaceTools"]
