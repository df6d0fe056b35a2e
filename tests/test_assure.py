"""Tests pour le réessai borné assure()."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from dr_command_toolkit.config.settings import AssureSettings
from dr_command_toolkit.errors import AssuranceError
from dr_command_toolkit.logging.base import Logger
from dr_command_toolkit.retry import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_RETRIES,
    assure,
    assure_with,
)


class Flaky:
    """Opération qui échoue les `failures` premières fois."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"échec {self.calls}")


class TestAssure:
    """Tests de la boucle de réessai."""

    def setup_method(self):
        self.mock_logger = MagicMock(spec=Logger)

    def test_valeurs_par_defaut(self):
        """Test de la politique par défaut : 18 x 10 s."""
        assert DEFAULT_RETRIES == 18
        assert DEFAULT_INTERVAL_SECONDS == 10.0

    def test_succes_immediat(self):
        operation = Flaky(0)
        assure(operation, retries=3, interval_seconds=0)
        assert operation.calls == 1

    def test_succes_a_la_troisieme_tentative(self):
        """Test d'un succès après deux échecs."""
        operation = Flaky(2)
        assure(
            operation, retries=5, interval_seconds=0,
            logger=self.mock_logger,
        )
        assert operation.calls == 3
        assert self.mock_logger.log_debug.call_count == 2
        self.mock_logger.log_error.assert_not_called()

    def test_epuisement(self):
        """Test que l'épuisement lève AssuranceError après N appels."""
        operation = Flaky(100)
        with pytest.raises(AssuranceError, match="Assuring failed.") as exc:
            assure(
                operation, retries=4, interval_seconds=0,
                logger=self.mock_logger,
            )
        assert operation.calls == 4
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert str(exc.value.__cause__) == "échec 4"
        self.mock_logger.log_error.assert_called_once()

    def test_au_moins_une_tentative(self):
        """Test qu'une tentative est faite même si retries < 1."""
        operation = Flaky(100)
        with pytest.raises(AssuranceError):
            assure(operation, retries=0, interval_seconds=0)
        assert operation.calls == 1

    def test_pas_d_attente_apres_le_dernier_echec(self):
        """Test de la durée : N-1 attentes pour N tentatives."""
        operation = Flaky(100)
        start = time.monotonic()
        with pytest.raises(AssuranceError):
            assure(operation, retries=3, interval_seconds=0.1)
        elapsed = time.monotonic() - start
        assert 0.2 <= elapsed < 0.3 + 0.5

    def test_attente_entre_tentatives(self):
        """Test que l'intervalle est respecté entre deux tentatives."""
        operation = Flaky(2)
        start = time.monotonic()
        assure(operation, retries=3, interval_seconds=0.05)
        assert time.monotonic() - start >= 0.1

    def test_interruption(self):
        """Test qu'un événement levé arrête les réessais."""
        operation = Flaky(100)
        stop = threading.Event()
        stop.set()
        with pytest.raises(AssuranceError) as exc:
            assure(
                operation, retries=18, interval_seconds=10,
                logger=self.mock_logger, stop_event=stop,
            )
        assert operation.calls == 1
        assert isinstance(exc.value.__cause__, RuntimeError)
        self.mock_logger.log_info.assert_called_once_with(
            "Assuring interrupted."
        )

    def test_interruption_pendant_l_attente(self):
        """Test d'une interruption levée par un autre thread."""
        operation = Flaky(100)
        stop = threading.Event()
        timer = threading.Timer(0.1, stop.set)
        timer.start()
        start = time.monotonic()
        with pytest.raises(AssuranceError):
            assure(operation, retries=18, interval_seconds=10,
                   stop_event=stop)
        timer.join()
        assert time.monotonic() - start < 5
        assert operation.calls == 1

    def test_valeur_de_retour_ignoree(self):
        assert assure(lambda: 42, interval_seconds=0) is None


class TestAssureWith:
    """Tests de assure_with() avec AssureSettings."""

    def test_politique_de_la_configuration(self):
        operation = Flaky(100)
        settings = AssureSettings(retries=2, interval_seconds=0)
        with pytest.raises(AssuranceError):
            assure_with(settings, operation)
        assert operation.calls == 2
