"""Providers de clés privées : environnement, fichier .env, keyring.

Une valeur lue peut être :
    - la clé PEM elle-même, éventuellement sur une seule ligne avec
      des séquences littérales ``\\n`` (format courant des variables
      d'environnement et des secrets de CI) ;
    - le chemin d'un fichier contenant la clé.

Dans tous les cas la clé retournée se termine par un saut de ligne,
sans quoi OpenSSH refuse de la charger.
"""

import os
from pathlib import Path
from typing import Any, Optional, Union

from dr_command_toolkit.credentials.base import PrivateKeyProvider
from dr_command_toolkit.logging.base import Logger

PEM_MARKER = "-----BEGIN"


def normalize_private_key(value: Optional[str]) -> Optional[str]:
    """Convertit une valeur brute en clé PEM utilisable par ssh.

    Args:
        value: Clé PEM, clé sur une ligne ou chemin de fichier.

    Returns:
        Clé PEM terminée par un saut de ligne, ou None si vide.
    """
    if not value or not value.strip():
        return None
    if not value.lstrip().startswith(PEM_MARKER):
        path = Path(value.strip()).expanduser()
        try:
            is_file = path.is_file()
        except (OSError, ValueError):
            # Nom trop long ou invalide : la valeur n'est pas un chemin.
            is_file = False
        if is_file:
            value = path.read_text(encoding="ascii")
    key = value.replace("\\n", "\n").strip()
    return f"{key}\n"


class EnvPrivateKeyProvider(PrivateKeyProvider):
    """Lit la clé depuis os.environ[name.upper()]."""

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self._logger = logger

    def get(self, name: str) -> Optional[str]:
        return normalize_private_key(os.environ.get(name.upper()))

    def is_available(self) -> bool:
        return True

    @property
    def source_name(self) -> str:
        return "env"


class DotEnvPrivateKeyProvider(PrivateKeyProvider):
    """Lit la clé depuis un fichier .env via python-dotenv.

    Le fichier est lu sans modifier os.environ : la clé ne fuit pas
    vers l'environnement des processus lancés par les exécuteurs.

    Attributes:
        _dotenv_path: Chemin vers le fichier .env.
        _logger: Logger optionnel.
    """

    def __init__(
        self,
        dotenv_path: Union[str, Path],
        logger: Optional[Logger] = None,
    ) -> None:
        self._dotenv_path = Path(dotenv_path)
        self._logger = logger

    def get(self, name: str) -> Optional[str]:
        """Lit la variable name.upper() du fichier .env.

        Returns:
            Clé normalisée ou None si absente ou provider
            indisponible.
        """
        if not self.is_available():
            if self._logger:
                self._logger.log_warning(
                    f"Fichier .env inutilisable : {self._dotenv_path}"
                )
            return None
        from dotenv import dotenv_values
        values = dotenv_values(self._dotenv_path)
        return normalize_private_key(values.get(name.upper()))

    def is_available(self) -> bool:
        """True si python-dotenv est installé et le fichier existe."""
        try:
            import dotenv  # noqa: F401
        except ImportError:
            return False
        return self._dotenv_path.exists()

    @property
    def source_name(self) -> str:
        return "dotenv"


class KeyringPrivateKeyProvider(PrivateKeyProvider):
    """Lit la clé depuis le keyring système (Secret Service, KWallet).

    Attributes:
        _service: Service keyring sous lequel les clés sont rangées.
        _logger: Logger optionnel.
        _backend: Backend keyring injecté (tests unitaires).
    """

    def __init__(
        self,
        service: str = "dr_command_toolkit",
        logger: Optional[Logger] = None,
        keyring_backend: Optional[Any] = None,
    ) -> None:
        self._service = service
        self._logger = logger
        self._backend = keyring_backend

    def _get_keyring(self) -> Any:
        if self._backend is not None:
            return self._backend
        import keyring
        return keyring

    def get(self, name: str) -> Optional[str]:
        """Lit la clé ``name`` du service keyring.

        Returns:
            Clé normalisée, ou None si absente ou keyring en erreur.
        """
        if not self.is_available():
            return None
        try:
            value = self._get_keyring().get_password(self._service, name)
        except Exception as e:
            if self._logger:
                self._logger.log_warning(
                    f"Lecture keyring impossible "
                    f"(service={self._service!r}, key={name!r}) : {e}"
                )
            return None
        return normalize_private_key(value)

    def is_available(self) -> bool:
        if self._backend is not None:
            return True
        try:
            import keyring  # noqa: F401
            return True
        except ImportError:
            return False

    @property
    def source_name(self) -> str:
        return "keyring"
