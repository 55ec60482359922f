"""
External editor and shell integration.

Processes are spawned without a shell (except for explicit terminal
commands) and are bounded by a timeout.
"""

from vscode_bridge.editor.exceptions import (
    CommandNotFoundError,
    CommandTimeoutError,
    EditorError,
    InvalidExtensionIdError,
)
from vscode_bridge.editor.process import ProcessResult, run_process
from vscode_bridge.editor.launcher import EditorLauncher, validate_extension_id
from vscode_bridge.editor.shell import ShellRunner

__all__ = [
    "CommandNotFoundError",
    "CommandTimeoutError",
    "EditorError",
    "InvalidExtensionIdError",
    "ProcessResult",
    "run_process",
    "EditorLauncher",
    "validate_extension_id",
    "ShellRunner",
]
