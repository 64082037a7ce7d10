"""
User-facing notifications.

The adapter emits a Notification for anything the end user should see
(e.g. a rejected login). Presenting it (toast, stderr, dialog) is up to the
notifier callback passed in by the UI layer.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Severity of a notification."""
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Default notifier: write the notification to the log."""
    if notification.level == NotificationLevel.ERROR:
        logger.warning(f"Notification: {notification.message}")
    else:
        logger.info(f"Notification: {notification.message}")


class NotificationRecorder:
    """Notifier that keeps every notification it receives, in order."""
    
    def __init__(self):
        self.notifications: List[Notification] = []
    
    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)
    
    @property
    def messages(self) -> List[str]:
        return [n.message for n in self.notifications]
    
    def clear(self) -> None:
        self.notifications.clear()
