"""Tests pour ProcessCommandExecutor avec de vrais processus."""

import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from dr_command_toolkit.commands import (
    CommandBuilder,
    FailureReason,
    ProcessCommandExecutor,
)
from dr_command_toolkit.config import ToolkitSettings
from dr_command_toolkit.errors import ExecutorShutdownError
from dr_command_toolkit.logging.base import Logger


def shell(script: str) -> CommandBuilder:
    return CommandBuilder("sh", "-c", script)


class TestProcessCommandExecutor:
    """Tests d'exécution locale."""

    def setup_method(self):
        self.mock_logger = MagicMock(spec=Logger)
        self.executor = ProcessCommandExecutor(
            "test-exec", logger=self.mock_logger
        )

    def teardown_method(self):
        self.executor.shutdown(timeout=1)

    def test_sortie_standard(self):
        """Test de la capture de la sortie standard."""
        result = self.executor.execute(shell("echo hello"))
        assert result.exit_code == 0
        assert result.stdout == "hello"
        assert result.stderr == ""
        assert result.failure is None
        assert result.is_successful

    def test_sortie_erreur_et_code_retour(self):
        """Test du code retour non nul et de stderr."""
        result = self.executor.execute(shell("echo oops >&2; exit 2"))
        assert result.exit_code == 2
        assert result.stdout == ""
        assert result.stderr == "oops"
        assert result.failure is None
        self.mock_logger.log_info.assert_called_once()

    def test_lignes_jointes_sans_saut_final(self):
        """Test que seul le dernier saut de ligne est retiré."""
        result = self.executor.execute(shell("printf 'a\\nb\\n\\n'"))
        assert result.stdout == "a\nb\n"

    def test_pas_d_interblocage_sur_gros_volumes(self):
        """Test qu'un processus qui écrit beaucoup sur les deux flux
        termine sans blocage."""
        script = (
            "i=0; while [ $i -lt 20000 ]; do "
            "echo out$i; echo err$i >&2; i=$((i+1)); done"
        )
        result = self.executor.execute(shell(script))
        assert result.exit_code == 0
        out_lines = result.stdout.split("\n")
        err_lines = result.stderr.split("\n")
        assert len(out_lines) == 20000
        assert len(err_lines) == 20000
        assert out_lines[0] == "out0"
        assert out_lines[-1] == "out19999"
        assert err_lines[-1] == "err19999"

    def test_entree_standard(self):
        """Test de l'écriture des lignes d'entrée puis fermeture."""
        result = self.executor.execute(CommandBuilder("cat"), "a", "b")
        assert result.exit_code == 0
        assert result.stdout == "a\nb"

    def test_entree_standard_fermee_sans_lignes(self):
        """Test qu'un processus lisant stdin ne bloque pas."""
        result = self.executor.execute(CommandBuilder("cat"))
        assert result.exit_code == 0
        assert result.stdout == ""

    def test_exports_dans_l_environnement(self):
        """Test que les exports sont visibles par le processus."""
        cmd = shell("echo $DR_TEST_VALUE").export("DR_TEST_VALUE", "42")
        result = self.executor.execute(cmd)
        assert result.stdout == "42"

    def test_lignes_loguees_en_debug(self):
        """Test du log de chaque ligne avec son étiquette."""
        self.executor.execute(shell("echo visible; echo cache >&2"))
        messages = [
            c.args[0] for c in self.mock_logger.log_debug.call_args_list
        ]
        assert "[OUTPUT] visible" in messages
        assert "[ERROR] cache" in messages

    def test_exports_masques_dans_les_logs(self):
        """Test qu'une valeur exportée n'apparaît pas dans les logs."""
        cmd = shell("true").export("DR_SECRET", "s3cr3t")
        self.executor.execute(cmd)
        for call in self.mock_logger.method_calls:
            assert "s3cr3t" not in str(call)

    def test_echec_de_lancement(self):
        """Test d'un exécutable introuvable."""
        result = self.executor.execute(
            CommandBuilder("/nonexistent/dr-binary")
        )
        assert result.exit_code == 1
        assert result.stdout == ""
        assert result.stderr == ""
        assert result.failure is FailureReason.SPAWN_FAILED
        self.mock_logger.log_error.assert_called_once()

    @pytest.mark.parametrize("command", [
        CommandBuilder("echo", "a\x00b"),
        CommandBuilder("true").export("A=B", "x"),
    ], ids=["octet-nul", "cle-avec-egal"])
    def test_commande_mal_formee(self, command):
        """Test qu'une commande refusée par le système devient un
        résultat en échec, jamais une exception."""
        result = self.executor.execute(command)
        assert result.exit_code == 1
        assert result.failure is FailureReason.SPAWN_FAILED
        self.mock_logger.log_error.assert_called_once()

    def test_evenement_deja_leve(self):
        """Test qu'un événement levé interrompt aussitôt."""
        event = threading.Event()
        event.set()
        start = time.monotonic()
        result = self.executor.execute(
            CommandBuilder("sleep", "30"), cancel_event=event
        )
        assert time.monotonic() - start < 5
        assert result.exit_code == 1
        assert result.failure is FailureReason.INTERRUPTED
        assert event.is_set()

    def test_interruption_tue_le_processus(self):
        """Test qu'une interruption pendant l'attente tue le
        processus."""
        event = threading.Event()
        timer = threading.Timer(0.2, event.set)
        timer.start()
        start = time.monotonic()
        result = self.executor.execute(
            CommandBuilder("sleep", "30"), cancel_event=event
        )
        timer.join()
        assert time.monotonic() - start < 5
        assert result.failure is FailureReason.INTERRUPTED
        assert not self.executor._processes

    def test_commande_du_catalogue(self):
        """Test qu'une commande du catalogue est acceptée."""
        from dr_command_toolkit.commands import catalog

        result = self.executor.execute(catalog.echo().content("ok"))
        assert result.stdout == "ok"

    def test_resultat_porte_la_commande(self):
        cmd = shell("true").build()
        assert self.executor.execute(cmd).command is cmd

    def test_deux_threads_de_lecture(self):
        """Test que le pool compte exactement deux threads."""
        assert self.executor._pool._max_workers == 2


class TestProcessCommandExecutorErrors:
    """Tests des erreurs de lecture, avec Popen simulé."""

    def setup_method(self):
        self.mock_logger = MagicMock(spec=Logger)

    @patch("dr_command_toolkit.commands.runner.subprocess.Popen")
    def test_erreur_de_lecture(self, mock_popen):
        """Test qu'une erreur de lecture donne CAPTURE_FAILED."""
        process = MagicMock()
        process.stdout.__iter__.side_effect = OSError("tube cassé")
        process.stderr.__iter__.return_value = iter([])
        process.poll.return_value = 0
        process.wait.return_value = 0
        mock_popen.return_value = process

        with ProcessCommandExecutor(logger=self.mock_logger) as executor:
            result = executor.execute(CommandBuilder("ls"))

        assert result.exit_code == 1
        assert result.failure is FailureReason.CAPTURE_FAILED
        self.mock_logger.log_error.assert_called_once()

    @patch("dr_command_toolkit.commands.runner.subprocess.Popen")
    def test_keyboard_interrupt_tue_et_propage(self, mock_popen):
        """Test que KeyboardInterrupt tue le processus puis remonte."""
        process = MagicMock()
        process.stdout.__iter__.return_value = iter([])
        process.stderr.__iter__.return_value = iter([])
        process.poll.return_value = None
        process.wait.side_effect = [KeyboardInterrupt(), -9]
        mock_popen.return_value = process

        executor = ProcessCommandExecutor(logger=self.mock_logger)
        with pytest.raises(KeyboardInterrupt):
            executor.execute(CommandBuilder("ls"))
        executor.shutdown(timeout=1)

        process.kill.assert_called_once()

    @patch("dr_command_toolkit.commands.runner.subprocess.Popen")
    def test_stdin_ferme_n_est_pas_un_echec(self, mock_popen):
        """Test qu'un tube stdin refusé est seulement signalé."""
        process = MagicMock()
        process.stdin.write.side_effect = BrokenPipeError()
        process.stdout.__iter__.return_value = iter(["fini\n"])
        process.stderr.__iter__.return_value = iter([])
        process.wait.return_value = 0
        mock_popen.return_value = process

        with ProcessCommandExecutor(logger=self.mock_logger) as executor:
            result = executor.execute(CommandBuilder("true"), "x")

        assert result.exit_code == 0
        assert result.stdout == "fini"
        self.mock_logger.log_warning.assert_called_once()


class TestProcessCommandExecutorShutdown:
    """Tests de l'arrêt de l'exécuteur."""

    def test_shutdown_rapide_sans_travail(self):
        """Test qu'un exécuteur inactif s'arrête immédiatement."""
        executor = ProcessCommandExecutor()
        start = time.monotonic()
        executor.shutdown()
        assert time.monotonic() - start < 1
        assert executor.closed

    def test_shutdown_idempotent(self):
        executor = ProcessCommandExecutor()
        executor.shutdown()
        executor.shutdown()
        assert executor.closed

    def test_execute_apres_shutdown(self):
        """Test qu'un exécuteur arrêté refuse les commandes."""
        executor = ProcessCommandExecutor()
        executor.shutdown()
        with pytest.raises(ExecutorShutdownError):
            executor.execute(CommandBuilder("true"))

    def test_context_manager(self):
        with ProcessCommandExecutor() as executor:
            assert executor.execute(CommandBuilder("true")).exit_code == 0
        assert executor.closed

    def test_shutdown_force_tue_les_processus(self):
        """Test que shutdown() tue une commande qui dépasse le délai
        de grâce."""
        mock_logger = MagicMock(spec=Logger)
        executor = ProcessCommandExecutor(logger=mock_logger)
        results = []
        worker = threading.Thread(
            target=lambda: results.append(
                executor.execute(CommandBuilder("sleep", "30"))
            )
        )
        worker.start()

        deadline = time.monotonic() + 5
        while not executor._processes and time.monotonic() < deadline:
            time.sleep(0.01)

        executor.shutdown(timeout=0.2)
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert results[0].exit_code != 0
        mock_logger.log_warning.assert_called_once()

    def test_shutdown_force_avec_deux_executions(self):
        """Test qu'une exécution dont les lectures sont annulées par
        shutdown() retourne un résultat en échec."""
        executor = ProcessCommandExecutor(logger=MagicMock(spec=Logger))
        results = {}

        def run(key, command):
            results[key] = executor.execute(command)

        long_running = threading.Thread(
            target=run, args=("long", CommandBuilder("sleep", "30"))
        )
        long_running.start()
        deadline = time.monotonic() + 5
        while not executor._processes and time.monotonic() < deadline:
            time.sleep(0.01)

        # Les deux threads de lecture sont occupés par sleep.
        queued = threading.Thread(
            target=run, args=("queued", CommandBuilder("echo", "hi"))
        )
        queued.start()
        while len(executor._processes) < 2 and time.monotonic() < deadline:
            time.sleep(0.01)

        executor.shutdown(timeout=0.2)
        long_running.join(timeout=5)
        queued.join(timeout=5)

        assert not long_running.is_alive()
        assert not queued.is_alive()
        assert results["long"].exit_code != 0
        assert results["queued"].exit_code == 1
        assert results["queued"].failure is FailureReason.SHUTDOWN
        assert not executor._processes

    def test_from_settings(self):
        """Test de la création depuis la configuration."""
        settings = ToolkitSettings.model_validate(
            {"executor": {"thread_name": "dr-exec", "shutdown_timeout": 5}}
        )
        executor = ProcessCommandExecutor.from_settings(settings)
        try:
            assert executor.name == "dr-exec"
            assert executor._shutdown_timeout == 5
        finally:
            executor.shutdown()
