"""Modèles Pydantic de configuration du toolkit.

Exemple de fichier TOML :

    [executor]
    thread_name = "dr-exec"
    shutdown_timeout = 60

    [ssh]
    connect_timeout = 3600

    [assure]
    retries = 18
    interval_seconds = 10

    [logging]
    level = "DEBUG"
    file = "/var/log/dr/commands.log"
"""

import json
import tomllib
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from dr_command_toolkit.config.loader import ConfigLoader, FileConfigLoader
from dr_command_toolkit.errors.exceptions import FileConfigurationError


class ExecutorSettings(BaseModel):
    """Réglages de l'exécuteur local."""

    model_config = {"extra": "forbid"}

    thread_name: str = "command-executor"
    shutdown_timeout: float = Field(default=60.0, ge=0)


class SshSettings(BaseModel):
    """Réglages du tunnel ssh."""

    model_config = {"extra": "forbid"}

    connect_timeout: int = Field(default=3600, gt=0)


class AssureSettings(BaseModel):
    """Politique de réessai par défaut (18 x 10 s, soit 3 minutes)."""

    model_config = {"extra": "forbid"}

    retries: int = Field(default=18, ge=1)
    interval_seconds: float = Field(default=10.0, ge=0)


class LoggingSettings(BaseModel):
    """Réglages du FileLogger."""

    model_config = {"extra": "forbid"}

    level: str = "INFO"
    format: str = (
        "%(asctime)s - %(threadName)s - %(levelname)s - %(message)s"
    )
    file: Optional[Path] = None
    console: bool = False

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Niveau de log inconnu : {v}")
        return level


class ToolkitSettings(BaseModel):
    """Configuration complète du toolkit."""

    model_config = {"extra": "forbid"}

    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    ssh: SshSettings = Field(default_factory=SshSettings)
    assure: AssureSettings = Field(default_factory=AssureSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(
    config_path: Union[str, Path, None] = None,
    config_loader: ConfigLoader | None = None,
) -> ToolkitSettings:
    """Charge et valide la configuration du toolkit.

    Args:
        config_path: Fichier .toml ou .json. Si None, retourne les
            valeurs par défaut.
        config_loader: Chargeur injectable. Si None, utilise
            FileConfigLoader.

    Returns:
        Configuration validée.

    Raises:
        FileConfigurationError: Si le fichier est absent, illisible
            ou invalide.
    """
    if config_path is None:
        return ToolkitSettings()

    loader = config_loader or FileConfigLoader()
    try:
        return loader.load(config_path, schema=ToolkitSettings)
    except (
        FileNotFoundError,
        ValueError,
        ValidationError,
        tomllib.TOMLDecodeError,
        json.JSONDecodeError,
    ) as e:
        raise FileConfigurationError(
            f"Configuration invalide ({config_path}) : {e}"
        ) from e
