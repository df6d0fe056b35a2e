"""Interface abstraite des exécuteurs de commandes."""

import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

from dr_command_toolkit.commands.base import ExecutionResult
from dr_command_toolkit.commands.catalog import sudo


class CommandExecutor(ABC):
    """Interface abstraite pour l'exécution de commandes.

    Un exécuteur possède des ressources (threads) et doit être
    arrêté via shutdown(), ou utilisé comme gestionnaire de contexte :

        with ProcessCommandExecutor("dr") as executor:
            result = executor.execute(catalog.df().human_readable())
    """

    @abstractmethod
    def execute(
        self,
        command: Any,
        *input_lines: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExecutionResult:
        """Exécute une commande et retourne le résultat.

        Args:
            command: Command, CommandBuilder ou commande du catalogue.
            *input_lines: Lignes à écrire sur l'entrée standard.
            cancel_event: Événement d'interruption détenu par
                l'appelant. Le toolkit ne le réinitialise jamais.

        Returns:
            Résultat de l'exécution.
        """
        pass

    def execute_as_root(
        self,
        command: Any,
        *input_lines: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExecutionResult:
        """Exécute la commande en root, enveloppée dans sudo."""
        return self.execute(
            sudo().command(command),
            *input_lines,
            cancel_event=cancel_event,
        )

    @abstractmethod
    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Libère les ressources de l'exécuteur (idempotent)."""
        pass

    def __enter__(self) -> "CommandExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
