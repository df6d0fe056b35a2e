"""Module de configuration."""

from dr_command_toolkit.config.loader import (
    ConfigLoader,
    FileConfigLoader,
)
from dr_command_toolkit.config.settings import (
    AssureSettings,
    ExecutorSettings,
    LoggingSettings,
    SshSettings,
    ToolkitSettings,
    load_settings,
)

__all__ = [
    "ConfigLoader",
    "FileConfigLoader",
    "AssureSettings",
    "ExecutorSettings",
    "LoggingSettings",
    "SshSettings",
    "ToolkitSettings",
    "load_settings",
]
