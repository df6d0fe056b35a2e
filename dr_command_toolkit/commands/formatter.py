"""Formateurs des messages de log des exécuteurs.

Classes :
    CommandFormatter : Interface abstraite de formatage.
    PlainCommandFormatter : Texte brut, valeurs d'export masquées.

Les valeurs exportées transportent souvent des secrets (mots de passe,
jetons) : PlainCommandFormatter les remplace par ``***`` par défaut.
"""

from abc import ABC, abstractmethod

from dr_command_toolkit.commands.base import Command

MASK = "***"


class CommandFormatter(ABC):
    """Interface abstraite pour formater les messages de commande."""

    @abstractmethod
    def format_command(self, command: Command) -> str:
        """Rend la commande pour les logs."""
        pass

    @abstractmethod
    def format_start(self, command: Command) -> str:
        """Formate le message de début d'exécution."""
        pass

    @abstractmethod
    def format_line(self, label: str, line: str) -> str:
        """Formate une ligne lue sur un flux (OUTPUT ou ERROR)."""
        pass

    @abstractmethod
    def format_failure(self, command: Command, reason: str) -> str:
        """Formate un échec du toolkit sur une commande."""
        pass


class PlainCommandFormatter(CommandFormatter):
    """Formateur texte brut pour les logs fichier.

    Example :
        Exécution : export TOKEN=***; /usr/bin/ls /
        [OUTPUT] bin
        [ERROR] ls: cannot access '/x': No such file or directory
    """

    def __init__(self, mask_exports: bool = True) -> None:
        """Initialise le formateur.

        Args:
            mask_exports: Masquer les valeurs des exports.
        """
        self._mask_exports = mask_exports

    def format_command(self, command: Command) -> str:
        if not self._mask_exports:
            return command.as_string()
        prefix = "".join(
            f"export {key}={MASK}; " for key in command.exports
        )
        return prefix + " ".join(command.tokens)

    def format_start(self, command: Command) -> str:
        return f"Exécution : {self.format_command(command)}"

    def format_line(self, label: str, line: str) -> str:
        return f"[{label}] {line}"

    def format_failure(self, command: Command, reason: str) -> str:
        return (
            f"Impossible d'exécuter la commande "
            f"{self.format_command(command)} : {reason}"
        )
