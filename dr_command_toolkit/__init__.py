"""
DR Command Toolkit - Exécution de commandes pour l'automatisation
de reprise d'activité.

Modules disponibles:
- commands: Construction (CommandBuilder, catalog) et exécution
  locale ou via ssh (ProcessCommandExecutor, SshExecutor)
- retry: Réessai borné (assure)
- logging: Gestion des logs (Logger, FileLogger, StandardLogger)
- config: Chargement de configuration (TOML, JSON, Pydantic)
- credentials: Sources de clés privées ssh (env, .env, keyring)
- errors: Exceptions du toolkit
"""

__version__ = "1.0.0"

from dr_command_toolkit.logging import Logger, FileLogger, StandardLogger
from dr_command_toolkit.config import (
    ConfigLoader,
    FileConfigLoader,
    ToolkitSettings,
    load_settings,
)
from dr_command_toolkit.commands import (
    Command,
    CommandBuilder,
    CommandExecutor,
    CommandFormatter,
    ExecutionResult,
    FailureReason,
    PlainCommandFormatter,
    ProcessCommandExecutor,
    SshExecutor,
    catalog,
)
from dr_command_toolkit.credentials import (
    PrivateKeyChain,
    PrivateKeyProvider,
)
from dr_command_toolkit.retry import assure, assure_with
from dr_command_toolkit.errors import (
    ApplicationError,
    AssuranceError,
    CredentialPreparationError,
)

__all__ = [
    # Logging
    "Logger",
    "FileLogger",
    "StandardLogger",
    # Config
    "ConfigLoader",
    "FileConfigLoader",
    "ToolkitSettings",
    "load_settings",
    # Commands - Structures de données
    "Command",
    "ExecutionResult",
    "FailureReason",
    # Commands - Constructeurs
    "CommandBuilder",
    "catalog",
    # Commands - Exécuteurs
    "CommandExecutor",
    "ProcessCommandExecutor",
    "SshExecutor",
    # Commands - Formateurs
    "CommandFormatter",
    "PlainCommandFormatter",
    # Credentials
    "PrivateKeyChain",
    "PrivateKeyProvider",
    # Retry
    "assure",
    "assure_with",
    # Errors
    "ApplicationError",
    "AssuranceError",
    "CredentialPreparationError",
]
