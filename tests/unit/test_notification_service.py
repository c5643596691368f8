"""Tests for the notification center."""

from src.domain.notification import Notification, NotificationSeverity
from src.services.notification_service import NotificationCenter


def test_drain_returns_oldest_first_and_clears() -> None:
    center = NotificationCenter()
    center.notify(Notification(title="Task added", description="Order badges has been added"))
    center.notify(Notification(title="Error", description="boom", severity=NotificationSeverity.DESTRUCTIVE))

    drained = center.drain()

    assert [n.title for n in drained] == ["Task added", "Error"]
    assert center.drain() == []


def test_pending_does_not_clear() -> None:
    center = NotificationCenter()
    center.notify(Notification(title="Task completed", description="done"))

    assert len(center.pending()) == 1
    assert len(center.pending()) == 1


def test_oldest_dropped_when_full() -> None:
    center = NotificationCenter(maxlen=2)
    for i in range(3):
        center.notify(Notification(title=f"n{i}", description=""))

    assert [n.title for n in center.drain()] == ["n1", "n2"]


def test_default_severity_is_normal() -> None:
    assert Notification(title="Task added", description="").severity == NotificationSeverity.NORMAL
