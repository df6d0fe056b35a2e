"""Sources de clés privées pour l'exécuteur ssh.

Chaîne de priorité configurable :
    variables d'environnement -> fichier .env (python-dotenv)
    -> keyring système
"""

from dr_command_toolkit.credentials.base import PrivateKeyProvider
from dr_command_toolkit.credentials.chain import PrivateKeyChain
from dr_command_toolkit.credentials.exceptions import (
    CredentialError,
    CredentialNotFoundError,
)
from dr_command_toolkit.credentials.providers import (
    DotEnvPrivateKeyProvider,
    EnvPrivateKeyProvider,
    KeyringPrivateKeyProvider,
    normalize_private_key,
)

__all__ = [
    "PrivateKeyProvider",
    "PrivateKeyChain",
    "CredentialError",
    "CredentialNotFoundError",
    "EnvPrivateKeyProvider",
    "DotEnvPrivateKeyProvider",
    "KeyringPrivateKeyProvider",
    "normalize_private_key",
]
