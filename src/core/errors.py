"""Error types shared by the dashboard services.

Only two failure kinds reach the user:

- ``FormValidationError``: a precondition detected locally (missing title,
  missing recipient group, unknown template, bad credentials). No state change
  happens.
- ``RemoteError``: the data store reported a failure. The message is shown to
  the user verbatim, so it carries the store's own wording.
"""

from src.domain.notification import Notification, NotificationSeverity


class DashboardError(Exception):
    """Base class for errors surfaced to the dashboard user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_notification(self, title: str) -> Notification:
        """Build a destructive notification describing this error."""
        return Notification(title=title, description=self.message, severity=NotificationSeverity.DESTRUCTIVE)


class FormValidationError(DashboardError):
    """Client-detected precondition failure."""


class RemoteError(DashboardError):
    """Failure reported by the remote data client."""
