"""Constructeur fluent de commandes.

Ce module fournit la classe CommandBuilder qui accumule des jetons
et des exports puis les fige en Command à la première lecture.

Example:
    Construction d'une commande tar avec un export :

        from dr_command_toolkit.commands import CommandBuilder

        cmd = (
            CommandBuilder("/usr/bin/tar")
            .export("GZIP", "-9")
            .add("cvzf", "/tmp/out.tgz")
            .add("/data")
            .add_with_equal("--directory", "/srv")
        )
        cmd.as_string()
        # "export GZIP=-9; /usr/bin/tar cvzf /tmp/out.tgz /data
        #  --directory=/srv"

Aucune validation des jetons n'est faite : une commande mal formée
se traduit par un code retour non nul à l'exécution.
"""

from typing import Any, Dict, List, Mapping, Optional

from dr_command_toolkit.commands.base import Command
from dr_command_toolkit.errors.exceptions import (
    CommandError,
    CommandFrozenError,
)


def as_token(value: Any) -> str:
    """Convertit une valeur en jeton (booléens en minuscules)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CommandBuilder:
    """Accumulateur fluent de jetons et d'exports.

    Le constructeur est figé à la première lecture (build, as_list,
    as_string) : toute modification ultérieure lève
    CommandFrozenError.
    """

    def __init__(self, *tokens: Any) -> None:
        """Initialise le constructeur.

        Args:
            *tokens: Jetons initiaux (en général le chemin de
                l'exécutable).
        """
        self._tokens: List[str] = [as_token(t) for t in tokens]
        self._exports: Dict[str, str] = {}
        self._command: Optional[Command] = None

    def _ensure_mutable(self) -> None:
        if self._command is not None:
            raise CommandFrozenError(
                f"Commande déjà figée : {self._command.as_string()}"
            )

    def add(self, *tokens: Any) -> "CommandBuilder":
        """Ajoute un ou plusieurs jetons, dans l'ordre.

        ``add("-i", path)`` ajoute deux jetons (clé puis valeur).

        Returns:
            L'instance courante pour le chaînage.
        """
        self._ensure_mutable()
        self._tokens.extend(as_token(t) for t in tokens)
        return self

    def add_with_equal(self, key: str, value: Any) -> "CommandBuilder":
        """Ajoute un seul jeton ``clé=valeur``.

        Returns:
            L'instance courante pour le chaînage.
        """
        self._ensure_mutable()
        self._tokens.append(f"{key}={as_token(value)}")
        return self

    def export(self, key: str, value: Any) -> "CommandBuilder":
        """Enregistre une surcharge de variable d'environnement.

        Returns:
            L'instance courante pour le chaînage.
        """
        self._ensure_mutable()
        self._exports[key] = as_token(value)
        return self

    def pipe(self, command: Any) -> "CommandBuilder":
        """Redirige la sortie vers une autre commande.

        Ajoute ``|`` puis la forme texte de l'autre commande.

        Returns:
            L'instance courante pour le chaînage.
        """
        return self.add("|", command.as_string())

    @property
    def exports(self) -> Mapping[str, str]:
        """Exports enregistrés (copie)."""
        return dict(self._exports)

    def build(self) -> Command:
        """Fige le constructeur et retourne la Command.

        Raises:
            CommandError: Si aucun jeton n'a été ajouté.
        """
        if self._command is None:
            if not self._tokens:
                raise CommandError("Aucun jeton : commande vide.")
            self._command = Command(
                tokens=tuple(self._tokens), exports=self._exports
            )
        return self._command

    def as_list(self) -> List[str]:
        return self.build().as_list()

    def as_string(self) -> str:
        return self.build().as_string()

    def __str__(self) -> str:
        return self.as_string()
