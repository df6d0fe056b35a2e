"""Chaîne de priorité de providers de clés privées.

Exemple : variable d'environnement, puis fichier .env, puis keyring.

    chain = PrivateKeyChain.default(dotenv_path="config/.env")
    executor = SshExecutor.from_credentials(
        "dr", "ec2-user", host, chain, "DR_SSH_PRIVATE_KEY"
    )
"""

from pathlib import Path
from typing import List, Optional, Union

from dr_command_toolkit.credentials.base import PrivateKeyProvider
from dr_command_toolkit.credentials.exceptions import (
    CredentialNotFoundError,
)
from dr_command_toolkit.credentials.providers import (
    DotEnvPrivateKeyProvider,
    EnvPrivateKeyProvider,
    KeyringPrivateKeyProvider,
)
from dr_command_toolkit.logging.base import Logger


class PrivateKeyChain(PrivateKeyProvider):
    """Parcourt des providers ordonnés jusqu'au premier succès.

    Les providers indisponibles sont ignorés. Les logs ne contiennent
    jamais la clé, seulement son nom et sa source.
    """

    def __init__(
        self,
        providers: List[PrivateKeyProvider],
        logger: Optional[Logger] = None,
    ) -> None:
        self._providers = providers
        self._logger = logger

    def get(self, name: str) -> Optional[str]:
        for provider in self._providers:
            if not provider.is_available():
                continue
            key = provider.get(name)
            if key:
                if self._logger:
                    self._logger.log_info(
                        f"Clé privée {name!r} trouvée via "
                        f"{provider.source_name!r}"
                    )
                return key
        return None

    def require(self, name: str) -> str:
        """Comme get(), mais lève une erreur si la clé est absente.

        Raises:
            CredentialNotFoundError: Si aucun provider n'a la clé.
        """
        key = self.get(name)
        if key is None:
            raise CredentialNotFoundError(
                f"Clé privée introuvable : {name!r} (sources : "
                f"{[p.source_name for p in self._providers]})"
            )
        return key

    def is_available(self) -> bool:
        return any(p.is_available() for p in self._providers)

    @property
    def source_name(self) -> str:
        return "chain"

    @classmethod
    def default(
        cls,
        dotenv_path: Optional[Union[str, Path]] = None,
        keyring_service: str = "dr_command_toolkit",
        logger: Optional[Logger] = None,
    ) -> "PrivateKeyChain":
        """Crée la chaîne standard env -> dotenv -> keyring.

        Le provider dotenv est omis si dotenv_path est None.
        """
        providers: List[PrivateKeyProvider] = [
            EnvPrivateKeyProvider(logger=logger),
        ]
        if dotenv_path is not None:
            providers.append(
                DotEnvPrivateKeyProvider(dotenv_path, logger=logger)
            )
        providers.append(
            KeyringPrivateKeyProvider(keyring_service, logger=logger)
        )
        return cls(providers, logger=logger)
