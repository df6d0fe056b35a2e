"""Structures de données pour la représentation et l'exécution
de commandes.

Ce module définit :
    - Command : commande figée (jetons ordonnés + exports).
    - FailureReason : raison d'un échec propre au toolkit.
    - ExecutionResult : résultat immuable d'une exécution.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

from dr_command_toolkit.errors.exceptions import CommandError


@dataclass(frozen=True)
class Command:
    """Commande figée, prête à être exécutée ou affichée.

    Attributes:
        tokens: Jetons dans l'ordre exact de l'argv du processus.
        exports: Variables d'environnement à surcharger. L'ordre
            d'affichage est l'ordre d'insertion.
    """

    tokens: Tuple[str, ...]
    exports: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Fige les collections et vérifie qu'il y a au moins un jeton."""
        if not self.tokens:
            raise CommandError("Une commande contient au moins un jeton.")
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(
            self, "exports", MappingProxyType(dict(self.exports))
        )

    def as_list(self) -> List[str]:
        """Retourne les jetons tels quels (argv du processus)."""
        return list(self.tokens)

    def as_string(self) -> str:
        """Retourne la forme shell : ``export K=V; ... tok0 tok1``."""
        prefix = "".join(
            f"export {key}={value}; "
            for key, value in self.exports.items()
        )
        return prefix + " ".join(self.tokens)

    def build(self) -> "Command":
        """Une commande figée est sa propre forme construite."""
        return self

    def __str__(self) -> str:
        return self.as_string()

    def __hash__(self) -> int:
        return hash((self.tokens, frozenset(self.exports.items())))


def to_command(command: Any) -> Command:
    """Normalise une commande ou un constructeur en Command.

    Args:
        command: Command, CommandBuilder ou commande du catalogue.

    Returns:
        Command figée.

    Raises:
        TypeError: Si l'objet ne sait pas se construire.
    """
    if isinstance(command, Command):
        return command
    build = getattr(command, "build", None)
    if not callable(build):
        raise TypeError(
            f"Commande attendue, reçu : {type(command).__name__}"
        )
    return build()


class FailureReason(StrEnum):
    """Raison pour laquelle le toolkit n'a pas pu mener l'exécution."""

    SPAWN_FAILED = "spawn_failed"
    CAPTURE_FAILED = "capture_failed"
    INTERRUPTED = "interrupted"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class ExecutionResult:
    """Résultat de l'exécution d'une commande.

    Un code retour non nul n'est pas une erreur à ce niveau : c'est
    une donnée, l'appelant décide. ``failure`` n'est renseigné que
    lorsque le toolkit lui-même a échoué (lancement, lecture des flux,
    interruption) ; le code retour vaut alors 1 et les sorties sont
    vides.

    Attributes:
        exit_code: Code retour du processus (0 = succès).
        stdout: Sortie standard, sans le saut de ligne final.
        stderr: Sortie d'erreur, sans le saut de ligne final.
        command: Commande à l'origine du résultat (diagnostic).
        failure: Raison de l'échec du toolkit, ou None.
    """

    exit_code: int
    stdout: str
    stderr: str
    command: Optional[Command] = field(
        default=None, repr=False, compare=False
    )
    failure: Optional[FailureReason] = None

    @property
    def is_successful(self) -> bool:
        """True si et seulement si le code retour vaut 0."""
        return self.exit_code == 0

    @classmethod
    def failed(
        cls, command: Optional[Command], reason: FailureReason
    ) -> "ExecutionResult":
        """Crée le résultat synthétique d'un échec du toolkit."""
        return cls(
            exit_code=1,
            stdout="",
            stderr="",
            command=command,
            failure=reason,
        )

    def __str__(self) -> str:
        return (
            f"Code: {self.exit_code}, Output:\n{self.stdout}\n"
            f"Error:\n{self.stderr}\n"
        )
