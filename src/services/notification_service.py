"""Notification sink for dashboard toasts."""

import logging
from collections import deque
from typing import Protocol

from src.core.config import Constants
from src.domain.notification import Notification, NotificationSeverity


logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Fire-and-forget notification capability consumed by the dashboard services."""

    def notify(self, notification: Notification) -> None: ...


class NotificationCenter:
    """Collects notifications until the browser fetches them.

    Services only call ``notify``; the HTTP layer drains pending notifications
    and renders them as toasts.
    """

    def __init__(self, maxlen: int = Constants.MAX_PENDING_NOTIFICATIONS) -> None:
        self._pending: deque[Notification] = deque(maxlen=maxlen)

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.severity == NotificationSeverity.DESTRUCTIVE else logging.INFO
        logger.log(
            level,
            "notification",
            extra={"title": notification.title, "description": notification.description},
        )
        self._pending.append(notification)

    def pending(self) -> list[Notification]:
        """Return pending notifications without removing them."""
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return and clear pending notifications, oldest first."""
        drained = list(self._pending)
        self._pending.clear()
        return drained
