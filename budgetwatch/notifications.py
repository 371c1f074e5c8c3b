"""Output channels for budget alert notifications.

The alert service only knows the ``emit(message, severity)`` contract;
delivery (toast, log, email) belongs to whoever implements the channel.
"""
import logging
from typing import List, Protocol

from budgetwatch.domain import Notification
from budgetwatch.events import BUDGET_ALERT, EventBus

logger = logging.getLogger(__name__)

WARNING = "warning"
ERROR = "error"


class NotificationChannel(Protocol):
    def emit(self, message: str, severity: str) -> None:
        ...


class EventBusChannel:
    """Publishes each notification as a BUDGET_ALERT event."""

    def __init__(self, bus: EventBus):
        self.bus = bus

    def emit(self, message: str, severity: str) -> None:
        logger.debug("Publishing %s alert: %s", severity, message)
        self.bus.publish(BUDGET_ALERT, {"message": message, "severity": severity})


class RecordingChannel:
    """Keeps every emitted notification in memory, oldest first."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def emit(self, message: str, severity: str) -> None:
        self.notifications.append(Notification(message=message, severity=severity))

    def clear(self) -> None:
        self.notifications.clear()
