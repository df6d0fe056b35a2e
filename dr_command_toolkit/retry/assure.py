"""Réessai borné d'une opération faillible.

Sert à attendre un état externe qui finit par devenir cohérent, par
exemple un hôte distant qui devient joignable :

    def host_is_up() -> None:
        result = executor.execute(catalog.hostname())
        if not result.is_successful:
            raise RuntimeError(result.stderr)

    assure(host_is_up)  # 18 tentatives espacées de 10 s

L'épuisement des tentatives lève AssuranceError, qui doit terminer
le workflow appelant.
"""

import threading
from typing import Any, Callable, Optional

from dr_command_toolkit.errors.exceptions import AssuranceError
from dr_command_toolkit.logging.base import Logger

DEFAULT_RETRIES = 18
DEFAULT_INTERVAL_SECONDS = 10.0


def assure(
    operation: Callable[[], Any],
    retries: int = DEFAULT_RETRIES,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    logger: Optional[Logger] = None,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Appelle operation jusqu'à ce qu'elle réussisse.

    Une tentative échoue si operation lève une Exception. Entre deux
    tentatives, attend interval_seconds. Au moins une tentative est
    toujours faite, même si retries < 1.

    Args:
        operation: Callable sans argument ; sa valeur de retour est
            ignorée.
        retries: Nombre maximal de tentatives.
        interval_seconds: Attente entre deux tentatives.
        logger: Logger optionnel.
        stop_event: Événement qui interrompt l'attente. S'il est
            levé, les réessais s'arrêtent aussitôt.

    Raises:
        AssuranceError: Si aucune tentative n'a réussi (épuisement
            ou interruption). La dernière erreur est chaînée.
    """
    stop_event = stop_event or threading.Event()
    last_error: Optional[Exception] = None
    remaining = retries
    while True:
        try:
            operation()
            return
        except Exception as e:
            last_error = e
        remaining -= 1
        if remaining <= 0:
            break
        if logger:
            logger.log_debug(
                f"Assuring, wait for {interval_seconds} seconds, "
                f"{remaining} retries left ({last_error!r})."
            )
        if stop_event.wait(interval_seconds):
            if logger:
                logger.log_info("Assuring interrupted.")
            break

    if logger:
        logger.log_error(f"Assuring failed: {last_error!r}")
    raise AssuranceError("Assuring failed.") from last_error


def assure_with(
    settings: Any,
    operation: Callable[[], Any],
    logger: Optional[Logger] = None,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Appelle assure() avec la politique d'un AssureSettings."""
    assure(
        operation,
        retries=settings.retries,
        interval_seconds=settings.interval_seconds,
        logger=logger,
        stop_event=stop_event,
    )
