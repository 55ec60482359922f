"""
Settings and configuration for vscode-bridge.

Example:
    ```python
    from vscode_bridge.settings import BridgeConfig

    config = BridgeConfig.from_file("~/.vscode-bridge/config.yaml")
    print(config.allowed_directories)
    ```
"""

from vscode_bridge.settings.config import (
    BridgeConfig,
    BridgeEnvSettings,
    default_allowed_directories,
)

__all__ = [
    "BridgeConfig",
    "BridgeEnvSettings",
    "default_allowed_directories",
]
