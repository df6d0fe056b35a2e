"""Module de logging."""

from dr_command_toolkit.logging.base import Logger
from dr_command_toolkit.logging.file_logger import FileLogger, StandardLogger

__all__ = [
    "Logger",
    "FileLogger",
    "StandardLogger",
]
