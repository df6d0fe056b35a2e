"""Lecture des fichiers de configuration du toolkit (TOML ou JSON).

Le format est choisi d'après l'extension. Un schéma Pydantic peut
être fourni pour obtenir directement un modèle validé, par exemple
ToolkitSettings.
"""

import json
import tomllib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Union

from pydantic import BaseModel


def _read_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _read_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


READERS: Dict[str, Callable[[Path], Dict[str, Any]]] = {
    ".toml": _read_toml,
    ".json": _read_json,
}


class ConfigLoader(ABC):
    """Interface de chargement, substituable par un mock en test."""

    @abstractmethod
    def load(
        self,
        config_path: Union[str, Path],
        schema: type | None = None
    ) -> Union[Dict[str, Any], Any]:
        """Charge la configuration située à config_path.

        Args:
            config_path: Fichier à lire.
            schema: Modèle Pydantic optionnel.

        Returns:
            Le dict brut, ou une instance de schema s'il est fourni.
        """
        pass


class FileConfigLoader(ConfigLoader):
    """Chargeur depuis le système de fichiers (.toml ou .json)."""

    def load(
        self,
        config_path: Union[str, Path],
        schema: type | None = None
    ) -> Union[Dict[str, Any], Any]:
        """Lit le fichier puis le valide éventuellement.

        Raises:
            FileNotFoundError: Fichier absent.
            ValueError: Extension autre que .toml ou .json.
            TypeError: schema n'est pas un modèle Pydantic.
            pydantic.ValidationError: Contenu refusé par schema.
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(
                f"Fichier de configuration introuvable : {path}"
            )

        reader = READERS.get(path.suffix.lower())
        if reader is None:
            raise ValueError(
                f"Extension non supportée : {path.suffix} "
                f"(attendu : {', '.join(READERS)})"
            )
        if schema is not None and not (
            isinstance(schema, type) and issubclass(schema, BaseModel)
        ):
            raise TypeError(
                f"schema doit dériver de pydantic.BaseModel : {schema!r}"
            )

        raw = reader(path)
        if schema is None:
            return raw
        return schema.model_validate(raw)
