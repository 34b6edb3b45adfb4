"""Notification dispatch port

Fire-and-forget: the engine never waits for or checks delivery.
"""
import logging
from typing import Protocol

logger = logging.getLogger(__name__)

NOTIFICATION_PREFIX = "HABIT ENGINE"


class Notifier(Protocol):
    def send(self, title: str, body: str) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes notifications to the log"""

    def __init__(self, prefix: str = NOTIFICATION_PREFIX):
        self.prefix = prefix

    def send(self, title: str, body: str) -> None:
        logger.info(f"🔔 {self.prefix}: {title} - {body}")
