"""Module de construction et d'exécution de commandes.

Classes disponibles :
    Command : Commande figée (jetons + exports).
    ExecutionResult : Résultat immuable d'une exécution.
    FailureReason : Raison d'un échec propre au toolkit.
    CommandBuilder : Constructeur fluent de commandes.
    CommandExecutor : Interface abstraite pour les exécuteurs.
    ProcessCommandExecutor : Exécuteur local à trois threads.
    SshExecutor : Exécuteur via tunnel ssh.
    CommandFormatter : Interface abstraite de formatage.
    PlainCommandFormatter : Formatage texte brut (exports masqués).

Le sous-module catalog fournit les commandes Linux courantes
(catalog.grep(), catalog.tar(), ...).
"""

from dr_command_toolkit.commands import catalog
from dr_command_toolkit.commands.base import (
    Command,
    ExecutionResult,
    FailureReason,
    to_command,
)
from dr_command_toolkit.commands.builder import CommandBuilder
from dr_command_toolkit.commands.executor import CommandExecutor
from dr_command_toolkit.commands.formatter import (
    CommandFormatter,
    PlainCommandFormatter,
)
from dr_command_toolkit.commands.runner import ProcessCommandExecutor
from dr_command_toolkit.commands.ssh import SshExecutor

__all__ = [
    # Structures de données
    "Command",
    "ExecutionResult",
    "FailureReason",
    "to_command",
    # Constructeurs
    "CommandBuilder",
    "catalog",
    # Interface abstraite
    "CommandExecutor",
    # Formateurs
    "CommandFormatter",
    "PlainCommandFormatter",
    # Implémentations
    "ProcessCommandExecutor",
    "SshExecutor",
]
