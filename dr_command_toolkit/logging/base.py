"""Interface abstraite pour le logging."""

from abc import ABC, abstractmethod


class Logger(ABC):
    """Interface pour le système de logging.

    Injectée dans chaque composant à la construction : aucun composant
    du toolkit ne dépend d'un logger global.
    """

    @abstractmethod
    def log_debug(self, message: str) -> None:
        """Log un message de débogage (lignes de sortie des commandes)."""
        pass

    @abstractmethod
    def log_info(self, message: str) -> None:
        """Log un message d'information."""
        pass

    @abstractmethod
    def log_warning(self, message: str) -> None:
        """Log un avertissement."""
        pass

    @abstractmethod
    def log_error(self, message: str) -> None:
        """Log une erreur."""
        pass
