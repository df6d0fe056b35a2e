"""Loggers concrets : fichier dédié ou module logging standard."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from dr_command_toolkit.logging.base import Logger

DEFAULT_FORMAT = "%(asctime)s - %(threadName)s - %(levelname)s - %(message)s"


class FileLogger(Logger):
    """
    Logger écrivant dans un fichier, avec recopie console optionnelle.

    - un logger nommé par fichier : deux FileLogger sur le même
      fichier partagent leurs handlers
    - fichier en UTF-8, vidé après chaque message
    - pas de propagation vers le logger racine
    - le format par défaut inclut le nom du thread, pour distinguer
      les lignes émises par les threads de lecture des flux
    """

    def __init__(
        self,
        log_file: str,
        config: Optional[Dict[str, Any]] = None,
        console_output: bool = False
    ) -> None:
        """
        Initialise le logger.

        Args:
            log_file: Chemin du fichier de log (répertoire créé au
                besoin)
            config: Dict optionnel ; lit logging.level et
                logging.format
            console_output: Recopier aussi les messages sur stderr
        """
        self.log_file = log_file
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        section = (config or {}).get("logging", {})
        level = getattr(
            logging, str(section.get("level", "INFO")).upper(), logging.INFO
        )
        fmt = section.get("format", DEFAULT_FORMAT)

        self.logger = logging.getLogger(f"dr_command_toolkit.{log_file}")
        self.logger.setLevel(level)
        self.logger.propagate = False
        if not self.logger.handlers:
            self._attach_handlers(level, fmt, console_output)
        self.handler = self.logger.handlers[0]

    def _attach_handlers(
        self, level: int, fmt: str, console_output: bool
    ) -> None:
        formatter = logging.Formatter(fmt)
        handlers = [logging.FileHandler(self.log_file, encoding="utf-8")]
        if console_output:
            handlers.append(logging.StreamHandler())
        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    @classmethod
    def from_settings(cls, settings: Any) -> "FileLogger":
        """Crée un FileLogger depuis un LoggingSettings.

        Raises:
            ValueError: Si settings.file n'est pas renseigné.
        """
        if not settings.file:
            raise ValueError("logging.file est requis pour FileLogger.")
        return cls(
            str(settings.file),
            config={"logging": {
                "level": settings.level,
                "format": settings.format,
            }},
            console_output=settings.console,
        )

    def _emit(self, level: int, message: str) -> None:
        self.logger.log(level, message)
        self.handler.flush()

    def log_debug(self, message: str) -> None:
        self._emit(logging.DEBUG, message)

    def log_info(self, message: str) -> None:
        self._emit(logging.INFO, message)

    def log_warning(self, message: str) -> None:
        self._emit(logging.WARNING, message)

    def log_error(self, message: str) -> None:
        self._emit(logging.ERROR, message)


class StandardLogger(Logger):
    """Adaptateur vers un logger du module logging standard.

    Pour les applications qui configurent déjà logging elles-mêmes
    (handlers, niveaux) et veulent simplement recevoir les messages
    du toolkit.
    """

    def __init__(self, name: str = "dr_command_toolkit") -> None:
        self.logger = logging.getLogger(name)

    def log_debug(self, message: str) -> None:
        self.logger.debug(message)

    def log_info(self, message: str) -> None:
        self.logger.info(message)

    def log_warning(self, message: str) -> None:
        self.logger.warning(message)

    def log_error(self, message: str) -> None:
        self.logger.error(message)
