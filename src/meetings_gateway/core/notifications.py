"""Non-blocking notifications (toasts) surfaced to the client"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A single toast message"""

    message: str
    level: str = "error"
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "level": self.level,
            "createdAt": self.created_at,
        }


class Notifier:
    """
    Bounded queue of pending notifications.

    Providers push a message when they swallow an error; the client drains
    the queue and shows each message once.
    """

    def __init__(self, max_pending: int = 50):
        self._pending: Deque[Notification] = deque(maxlen=max_pending)

    def notify(self, message: str, level: str = "error") -> Notification:
        notification = Notification(message=message, level=level)
        self._pending.append(notification)
        logger.warning(f"Notification ({level}): {message}")
        return notification

    def pending(self) -> List[Notification]:
        """Peek at pending notifications without consuming them"""
        return list(self._pending)

    def drain(self) -> List[Notification]:
        """Return and clear pending notifications"""
        drained = list(self._pending)
        self._pending.clear()
        return drained
