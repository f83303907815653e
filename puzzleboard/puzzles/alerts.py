import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class AlertSink(Protocol):
    """Somewhere to show a blocking, user-facing error message."""

    def alert(self, title: str, message: str) -> None:
        ...


class LoggingAlertSink:
    def alert(self, title: str, message: str) -> None:
        logger.error(f"{title}: {message}")
