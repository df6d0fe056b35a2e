"""Exceptions du module credentials."""

from dr_command_toolkit.errors.exceptions import ApplicationError


class CredentialError(ApplicationError):
    """Exception de base pour les erreurs de credentials."""


class CredentialNotFoundError(CredentialError):
    """Levée quand une clé est absente de tous les providers."""
