"""Exécuteur de commandes via un tunnel ssh.

Une commande envoyée à SshExecutor est ré-exprimée ainsi :

    /usr/bin/ssh
    -tt
    -oUserKnownHostsFile=/dev/null
    -oStrictHostKeyChecking=no
    -oConnectTimeout=3600
    -i /tmp/tmpxxxxxxxx.key
    ec2-user@ec2-xx-xx-xx-xx.compute.amazonaws.com
    /usr/bin/ls /

puis exécutée localement par ProcessCommandExecutor.

Sécurité : la vérification de la clé d'hôte est désactivée et le
fichier known_hosts redirigé vers /dev/null. Les hôtes de reprise
d'activité sont éphémères et leur clé n'est pas connue à l'avance ;
ce compromis est assumé.

Le fichier de clé privée est créé à chaque commande et supprimé dès
que l'exécution qui l'utilise est terminée.
"""

import threading
from datetime import timedelta
from typing import Any, Optional, Union

from dr_command_toolkit.commands.base import ExecutionResult
from dr_command_toolkit.commands.catalog import Ssh, ssh, sudo
from dr_command_toolkit.commands.formatter import CommandFormatter
from dr_command_toolkit.commands.runner import (
    DEFAULT_SHUTDOWN_TIMEOUT,
    ProcessCommandExecutor,
)
from dr_command_toolkit.credentials.base import PrivateKeyProvider
from dr_command_toolkit.errors.exceptions import CredentialPreparationError
from dr_command_toolkit.logging.base import Logger

TIMEOUT_ONE_HOUR = timedelta(hours=1)

Timeout = Union[int, float, timedelta]


def _seconds(timeout: Timeout) -> int:
    if isinstance(timeout, timedelta):
        return int(timeout.total_seconds())
    return int(timeout)


class SshExecutor(ProcessCommandExecutor):
    """Exécuteur qui lance les commandes sur un hôte distant.

    Attributes:
        _user: Utilisateur de connexion.
        _host: Adresse de l'hôte.
        _private_key: Clé privée (PEM) d'authentification.
        _connect_timeout: Délai de connexion par défaut.
    """

    def __init__(
        self,
        name: str,
        user: str,
        host: str,
        private_key: str,
        logger: Optional[Logger] = None,
        formatter: Optional[CommandFormatter] = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        connect_timeout: Timeout = TIMEOUT_ONE_HOUR,
    ) -> None:
        """Initialise l'exécuteur ssh.

        Args:
            name: Nom des threads de lecture.
            user: Utilisateur de connexion.
            host: Adresse de l'hôte.
            private_key: Clé privée d'authentification.
            logger: Logger optionnel.
            formatter: Formateur optionnel des messages.
            shutdown_timeout: Délai de grâce de shutdown().
            connect_timeout: Délai de connexion ssh par défaut
                (une heure).
        """
        super().__init__(
            name=name,
            logger=logger,
            formatter=formatter,
            shutdown_timeout=shutdown_timeout,
        )
        self._user = user
        self._host = host
        self._private_key = private_key
        self._connect_timeout = connect_timeout

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        user: str,
        host: str,
        private_key: str,
        logger: Optional[Logger] = None,
    ) -> "SshExecutor":
        """Crée un exécuteur ssh depuis un ToolkitSettings."""
        return cls(
            name=settings.executor.thread_name,
            user=user,
            host=host,
            private_key=private_key,
            logger=logger,
            shutdown_timeout=settings.executor.shutdown_timeout,
            connect_timeout=settings.ssh.connect_timeout,
        )

    @classmethod
    def from_credentials(
        cls,
        name: str,
        user: str,
        host: str,
        provider: PrivateKeyProvider,
        key_name: str,
        logger: Optional[Logger] = None,
        connect_timeout: Timeout = TIMEOUT_ONE_HOUR,
    ) -> "SshExecutor":
        """Crée un exécuteur ssh dont la clé vient d'un provider.

        Raises:
            CredentialPreparationError: Si la clé est introuvable.
        """
        private_key = provider.get(key_name)
        if not private_key:
            raise CredentialPreparationError(
                f"Clé privée introuvable via "
                f"{provider.source_name!r} : {key_name!r}"
            )
        return cls(
            name=name,
            user=user,
            host=host,
            private_key=private_key,
            logger=logger,
            connect_timeout=connect_timeout,
        )

    @property
    def target(self) -> str:
        return f"{self._user}@{self._host}"

    def tunnel(
        self, command: Any, timeout: Optional[Timeout] = None
    ) -> Ssh:
        """Enveloppe une commande dans l'invocation ssh.

        Matérialise la clé privée dans un fichier temporaire ; c'est
        à l'appelant de le supprimer (discard_identity_files()).

        Args:
            command: Commande à exécuter à distance.
            timeout: Délai de connexion, par défaut celui de
                l'exécuteur.

        Raises:
            CredentialPreparationError: Si le fichier de clé ne peut
                pas être écrit.
        """
        seconds = _seconds(
            self._connect_timeout if timeout is None else timeout
        )
        tunnel = ssh().tty().null_host_file().no_key_checking()
        tunnel.timeout(seconds)
        try:
            tunnel.private_key(self._private_key)
        except CredentialPreparationError as e:
            self._log_error(
                f"Impossible de préparer le fichier d'identité pour "
                f"{self.target} : {e}"
            )
            raise
        try:
            return tunnel.host(self._user, self._host).command(command)
        except Exception:
            tunnel.discard_identity_files()
            raise

    def _execute_tunneled(
        self,
        command: Any,
        input_lines: tuple,
        timeout: Optional[Timeout],
        cancel_event: Optional[threading.Event],
    ) -> ExecutionResult:
        tunnel = self.tunnel(command, timeout)
        try:
            return super().execute(
                tunnel, *input_lines, cancel_event=cancel_event
            )
        finally:
            tunnel.discard_identity_files()

    def execute(
        self,
        command: Any,
        *input_lines: str,
        timeout: Optional[Timeout] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExecutionResult:
        """Exécute la commande sur l'hôte distant.

        Args:
            command: Commande à exécuter à distance.
            *input_lines: Lignes écrites sur l'entrée standard de ssh.
            timeout: Délai de connexion ssh (secondes ou timedelta).
            cancel_event: Événement d'interruption de l'attente.

        Raises:
            CredentialPreparationError: Si la clé ne peut pas être
                écrite.
        """
        return self._execute_tunneled(
            command, input_lines, timeout, cancel_event
        )

    def execute_as_root(
        self,
        command: Any,
        *input_lines: str,
        timeout: Optional[Timeout] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExecutionResult:
        """Exécute la commande en root sur l'hôte distant.

        sudo enveloppe la commande avant l'enveloppe ssh.
        """
        return self._execute_tunneled(
            sudo().command(command), input_lines, timeout, cancel_event
        )
