"""Module de gestion des erreurs."""

from dr_command_toolkit.errors.exceptions import (ApplicationError,
                                                  ConfigurationError,
                                                  FileConfigurationError,
                                                  CommandError,
                                                  CommandFrozenError,
                                                  CredentialPreparationError,
                                                  AssuranceError,
                                                  ExecutorShutdownError)


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "FileConfigurationError",
    "CommandError",
    "CommandFrozenError",
    "CredentialPreparationError",
    "AssuranceError",
    "ExecutorShutdownError",
]
