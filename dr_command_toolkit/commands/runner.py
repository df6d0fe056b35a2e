"""Exécuteur local de commandes à trois threads.

Ce module fournit ProcessCommandExecutor. Chaque exécution mobilise :
    1. le thread appelant, qui lance le processus puis attend ;
    2. un thread qui vide la sortie standard (étiquette OUTPUT) ;
    3. un thread qui vide la sortie d'erreur (étiquette ERROR).

Les deux flux sont lus pendant que le processus tourne : un processus
qui remplit le tampon de l'un des tubes n'est jamais bloqué. Chaque
ligne lue est loguée au niveau debug au fil de l'eau, ce qui permet
de suivre une commande longue avant sa fin.

Example :
    Exécution avec log fichier :

        from dr_command_toolkit import FileLogger
        from dr_command_toolkit.commands import (
            ProcessCommandExecutor,
            catalog,
        )

        logger = FileLogger("/var/log/dr/commands.log")
        with ProcessCommandExecutor("dr", logger=logger) as executor:
            result = executor.execute(catalog.ls("/"))
            print(result.stdout)
"""

import os
import subprocess  # nosec B404
import threading
from concurrent.futures import (
    CancelledError,
    Future,
    ThreadPoolExecutor,
    wait,
)
from typing import Any, Callable, Dict, Optional, Set, TextIO, Tuple, TypeVar

from dr_command_toolkit.commands.base import (
    Command,
    ExecutionResult,
    FailureReason,
    to_command,
)
from dr_command_toolkit.commands.executor import CommandExecutor
from dr_command_toolkit.commands.formatter import (
    CommandFormatter,
    PlainCommandFormatter,
)
from dr_command_toolkit.errors.exceptions import ExecutorShutdownError
from dr_command_toolkit.logging.base import Logger

T = TypeVar("T")

# Un thread par flux : stdout et stderr.
DRAINER_COUNT = 2
DEFAULT_SHUTDOWN_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 0.1


class _Interrupted(Exception):
    """L'événement d'annulation de l'appelant a été levé."""


class ProcessCommandExecutor(CommandExecutor):
    """Exécuteur de commandes sur l'hôte local.

    Possède un pool de exactement deux threads pour toute sa durée
    de vie. Deux appels concurrents à execute() sur la même instance
    se partagent ces deux threads : pour paralléliser, utiliser des
    instances distinctes.

    Aucun délai maximal n'est imposé à une commande en cours : une
    commande bloquée bloque le thread appelant, sauf annulation via
    cancel_event.

    Attributes:
        _name: Préfixe du nom des threads de lecture.
        _logger: Logger optionnel.
        _formatter: Formateur des messages de log.
        _shutdown_timeout: Délai de grâce de shutdown() en secondes.
        _poll_interval: Période de scrutation de cancel_event.
        _pool: Pool des deux threads de lecture.
        _futures: Lectures en cours.
        _processes: Processus en cours.
    """

    def __init__(
        self,
        name: str = "command-executor",
        logger: Optional[Logger] = None,
        formatter: Optional[CommandFormatter] = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialise l'exécuteur et son pool de threads.

        Args:
            name: Nom donné aux threads de lecture (visible dans les
                logs).
            logger: Logger optionnel.
            formatter: Formateur des messages. Par défaut
                PlainCommandFormatter (exports masqués).
            shutdown_timeout: Attente maximale des lectures en cours
                lors de shutdown(), en secondes.
            poll_interval: Période de vérification de cancel_event,
                en secondes.
        """
        self._name = name
        self._logger = logger
        self._formatter = formatter or PlainCommandFormatter()
        self._shutdown_timeout = shutdown_timeout
        self._poll_interval = poll_interval
        self._pool = ThreadPoolExecutor(
            max_workers=DRAINER_COUNT, thread_name_prefix=name
        )
        self._lock = threading.Lock()
        self._futures: Set[Future] = set()
        self._processes: Set[subprocess.Popen] = set()
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        logger: Optional[Logger] = None,
    ) -> "ProcessCommandExecutor":
        """Crée un exécuteur depuis un ToolkitSettings."""
        return cls(
            name=settings.executor.thread_name,
            logger=logger,
            shutdown_timeout=settings.executor.shutdown_timeout,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def _log_debug(self, message: str) -> None:
        if self._logger:
            self._logger.log_debug(message)

    def _log_info(self, message: str) -> None:
        if self._logger:
            self._logger.log_info(message)

    def _log_warning(self, message: str) -> None:
        if self._logger:
            self._logger.log_warning(message)

    def _log_error(self, message: str) -> None:
        if self._logger:
            self._logger.log_error(message)

    def _build_env(self, command: Command) -> Optional[Dict[str, str]]:
        """Fusionne os.environ et les exports de la commande.

        Returns:
            None si la commande n'a pas d'export (subprocess hérite
            alors de os.environ).
        """
        if not command.exports:
            return None
        merged = os.environ.copy()
        merged.update(command.exports)
        return merged

    def _spawn(
        self, command: Command, with_input: bool
    ) -> subprocess.Popen:
        return subprocess.Popen(  # nosec B603
            command.as_list(),
            stdin=subprocess.PIPE if with_input else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=self._build_env(command),
        )

    def _drain(self, label: str, stream: TextIO) -> str:
        """Lit un flux jusqu'à la fin, ligne par ligne.

        Args:
            label: Étiquette du flux dans les logs (OUTPUT, ERROR).
            stream: Flux texte du processus.

        Returns:
            Lignes jointes par ``\\n``, sans saut de ligne final.
        """
        lines = []
        with stream:
            for line in stream:
                line = line.rstrip("\n")
                lines.append(line)
                self._log_debug(self._formatter.format_line(label, line))
        return "\n".join(lines)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ExecutorShutdownError(
                f"L'exécuteur {self._name} est arrêté."
            )

    def _start_drainers(
        self, process: subprocess.Popen
    ) -> Tuple[Future, Future]:
        with self._lock:
            self._ensure_open()
            output = self._pool.submit(
                self._drain, "OUTPUT", process.stdout
            )
            error = self._pool.submit(
                self._drain, "ERROR", process.stderr
            )
            self._futures.update((output, error))
            self._processes.add(process)
        output.add_done_callback(self._forget)
        error.add_done_callback(self._forget)
        return output, error

    def _feed(
        self,
        process: subprocess.Popen,
        command: Command,
        input_lines: Tuple[str, ...],
    ) -> None:
        """Écrit les lignes sur stdin puis le ferme.

        Un tube fermé par le processus (il n'attend pas d'entrée)
        n'est pas un échec : le résultat du processus fait foi.
        """
        try:
            with process.stdin:
                for line in input_lines:
                    process.stdin.write(f"{line}\n")
        except OSError as e:
            self._log_warning(
                self._formatter.format_failure(
                    command, f"entrée standard refusée ({e})"
                )
            )

    def _wait_for(
        self,
        waiter: Callable[..., T],
        cancel_event: Optional[threading.Event],
    ) -> T:
        """Attend via waiter en surveillant cancel_event.

        Raises:
            _Interrupted: Si cancel_event est (ou devient) levé.
        """
        if cancel_event is None:
            return waiter()
        while not cancel_event.is_set():
            try:
                return waiter(timeout=self._poll_interval)
            except (TimeoutError, subprocess.TimeoutExpired):
                continue
        raise _Interrupted()

    @staticmethod
    def _terminate(process: subprocess.Popen) -> None:
        """Tue le processus s'il tourne encore et le récupère."""
        if process.poll() is None:
            process.kill()
        process.wait()

    def execute(
        self,
        command: Any,
        *input_lines: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExecutionResult:
        """Exécute une commande sur l'hôte local.

        Args:
            command: Command, CommandBuilder ou commande du catalogue.
            *input_lines: Lignes écrites (UTF-8) sur l'entrée standard,
                qui est ensuite fermée.
            cancel_event: Événement d'interruption de l'attente. Le
                toolkit ne le réinitialise jamais : tant qu'il reste
                levé, les exécutions suivantes sont interrompues
                aussitôt lancées.

        Returns:
            ExecutionResult. En cas d'échec de lancement, de lecture
            des flux, d'interruption ou d'arrêt forcé de l'exécuteur :
            code 1, sorties vides et failure renseigné.

        Raises:
            ExecutorShutdownError: Si l'exécuteur est arrêté.
            KeyboardInterrupt: Relevée après avoir tué le processus.
        """
        command = to_command(command)
        self._ensure_open()
        self._log_debug(self._formatter.format_start(command))

        try:
            process = self._spawn(command, bool(input_lines))
        except (OSError, ValueError) as e:
            self._log_error(
                self._formatter.format_failure(
                    command, f"lancement du processus impossible ({e})"
                )
            )
            return ExecutionResult.failed(
                command, FailureReason.SPAWN_FAILED
            )

        try:
            output, error = self._start_drainers(process)
        except ExecutorShutdownError:
            self._terminate(process)
            raise

        try:
            if input_lines:
                self._feed(process, command, input_lines)
            stdout = self._wait_for(output.result, cancel_event)
            stderr = self._wait_for(error.result, cancel_event)
            exit_code = self._wait_for(process.wait, cancel_event)
        except _Interrupted:
            self._terminate(process)
            self._log_error(
                self._formatter.format_failure(
                    command, "attente interrompue, processus tué"
                )
            )
            return ExecutionResult.failed(
                command, FailureReason.INTERRUPTED
            )
        except CancelledError:
            # Lecture annulée par un shutdown() forcé.
            self._terminate(process)
            self._log_error(
                self._formatter.format_failure(
                    command, "exécuteur arrêté, processus tué"
                )
            )
            return ExecutionResult.failed(
                command, FailureReason.SHUTDOWN
            )
        except KeyboardInterrupt:
            self._terminate(process)
            self._log_error(
                self._formatter.format_failure(
                    command, "KeyboardInterrupt, processus tué"
                )
            )
            raise
        except (OSError, ValueError) as e:
            self._terminate(process)
            self._log_error(
                self._formatter.format_failure(
                    command, f"lecture des flux impossible ({e})"
                )
            )
            return ExecutionResult.failed(
                command, FailureReason.CAPTURE_FAILED
            )
        finally:
            with self._lock:
                self._processes.discard(process)

        if exit_code != 0:
            self._log_info(
                f"Code retour {exit_code} : "
                f"{self._formatter.format_command(command)}"
            )
        return ExecutionResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            command=command,
        )

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Arrête l'exécuteur.

        Refuse les nouvelles exécutions, attend au plus timeout
        secondes (par défaut shutdown_timeout) la fin des lectures
        en cours, puis force l'arrêt : les processus encore actifs
        sont tués pour que leurs lectures atteignent la fin de flux
        et les lectures en attente sont annulées.

        Idempotent : les appels suivants ne font rien.

        Args:
            timeout: Délai de grâce en secondes.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = set(self._futures)

        grace = self._shutdown_timeout if timeout is None else timeout
        self._pool.shutdown(wait=False)
        _, not_done = wait(pending, timeout=grace)
        if not_done:
            self._log_warning(
                f"{len(not_done)} lecture(s) encore active(s) après "
                f"{grace}s : arrêt forcé de {self._name}."
            )
            with self._lock:
                processes = list(self._processes)
            for process in processes:
                self._terminate(process)
            self._pool.shutdown(wait=False, cancel_futures=True)
        self._log_debug(f"Exécuteur {self._name} arrêté.")
