"""Module de réessai borné."""

from dr_command_toolkit.retry.assure import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_RETRIES,
    assure,
    assure_with,
)

__all__ = [
    "DEFAULT_INTERVAL_SECONDS",
    "DEFAULT_RETRIES",
    "assure",
    "assure_with",
]
