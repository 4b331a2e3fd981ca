"""User-facing notifications (toasts) raised by the data layer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A transient message meant for the user, not for the log."""

    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier(ABC):
    """Sink for notifications. UIs plug in their toast implementation here."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        ...

    def info(self, message: str) -> None:
        self.notify(Notification(NotificationLevel.INFO, message))

    def success(self, message: str) -> None:
        self.notify(Notification(NotificationLevel.SUCCESS, message))

    def warning(self, message: str) -> None:
        self.notify(Notification(NotificationLevel.WARNING, message))

    def error(self, message: str) -> None:
        self.notify(Notification(NotificationLevel.ERROR, message))


_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LogNotifier(Notifier):
    """Default notifier — writes every notification to the log."""

    def notify(self, notification: Notification) -> None:
        logger.log(_LOG_LEVELS[notification.level], notification.message)


class CollectingNotifier(Notifier):
    """Keeps notifications in memory until drained."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain(self) -> list[Notification]:
        drained, self.notifications = self.notifications, []
        return drained

    def messages(self, level: NotificationLevel | None = None) -> list[str]:
        return [
            n.message for n in self.notifications
            if level is None or n.level == level
        ]
