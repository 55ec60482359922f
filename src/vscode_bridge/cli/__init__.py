"""
CLI module for vscode-bridge.
"""

from vscode_bridge.cli.main import cli

__all__ = ["cli"]
