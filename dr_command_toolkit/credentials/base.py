"""Interface abstraite des sources de clés privées ssh."""

from abc import ABC, abstractmethod
from typing import Optional


class PrivateKeyProvider(ABC):
    """Interface de lecture d'une clé privée depuis une source."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Retourne la clé privée (PEM) ou None si absente.

        Args:
            name: Nom de la clé (ex: "DR_SSH_PRIVATE_KEY").
        """
        pass  # pragma: no cover

    @abstractmethod
    def is_available(self) -> bool:
        """Indique si ce provider est opérationnel."""
        pass  # pragma: no cover

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Nom court de la source (ex: "env", "dotenv", "keyring")."""
        pass  # pragma: no cover
