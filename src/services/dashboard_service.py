"""Per-session composition of auth context, task store and email composer."""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from src.core.config import settings
from src.domain.email import EMAIL_TEMPLATES, RECIPIENT_GROUPS
from src.domain.user import AuthState, User
from src.models.service_models import ComposerView, DashboardView, TaskListView
from src.services.auth_service import AuthContext
from src.services.email_composer import EmailComposer
from src.services.notification_service import NotificationCenter
from src.services.overview_service import build_overview
from src.services.task_store import TaskStore


logger = logging.getLogger(__name__)


class DashboardSession:
    """State behind one signed-in browser session.

    The task store reloads whenever the auth context publishes a new identity.
    """

    def __init__(
        self,
        session_id: str,
        *,
        today: Callable[[], date] = date.today,
        send_delay_seconds: float | None = None,
    ) -> None:
        self.session_id = session_id
        self.last_seen = datetime.now(UTC)
        self._today = today
        self.notifications = NotificationCenter()
        self.auth = AuthContext()
        self.tasks = TaskStore(notifier=self.notifications, today=today)
        self.composer = EmailComposer(notifier=self.notifications, send_delay_seconds=send_delay_seconds)
        self.auth.subscribe(self._on_auth_change)

    async def _on_auth_change(self, state: AuthState) -> None:
        await self.tasks.load(state.user)

    async def sign_in(self, user: User) -> None:
        await self.auth.set_user(user)

    async def sign_out(self) -> None:
        await self.auth.sign_out()

    def view(self) -> DashboardView:
        """Compose the dashboard for the current user; derived values are recomputed here."""
        user = self.auth.user
        today = self._today()
        return DashboardView(
            user_email=user.email if user else "",
            overview=build_overview(store=self.tasks, composer=self.composer, today=today),
            task_list=TaskListView(
                tasks=self.tasks.task_views(today),
                completed_count=self.tasks.completed_count,
                total_count=self.tasks.total_count,
                draft_title=self.tasks.draft_title,
            ),
            composer=ComposerView(
                state=self.composer.state,
                draft=self.composer.draft,
                selected_group=self.composer.selected_group,
                recent_emails=self.composer.recent_emails,
                templates=list(EMAIL_TEMPLATES),
                groups=list(RECIPIENT_GROUPS),
            ),
        )


class SessionRegistry:
    """In-memory map of session id to dashboard session.

    Sessions are created only at sign-in. A closed or idle-expired id is gone
    for good, so an old cookie that still verifies resolves to nothing.
    """

    def __init__(
        self,
        *,
        max_idle_seconds: int | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._sessions: dict[str, DashboardSession] = {}
        self._max_idle = timedelta(
            seconds=settings.session_max_age_seconds if max_idle_seconds is None else max_idle_seconds
        )
        self._clock = clock

    def __len__(self) -> int:
        return len(self._sessions)

    def new_session_id(self) -> str:
        return secrets.token_urlsafe(32)

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self._max_idle
        expired = [sid for sid, session in self._sessions.items() if session.last_seen < cutoff]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Evicted idle dashboard sessions", extra={"count": len(expired)})

    def get(self, session_id: str) -> DashboardSession | None:
        """Return a live session and refresh its idle timer, or None."""
        self._evict_expired()
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_seen = self._clock()
        return session

    def resolve(self, session_id: str, user: User) -> DashboardSession | None:
        """Return the live session for a verified cookie, or None if it ended or belongs to someone else."""
        session = self.get(session_id)
        if session is None or session.auth.user != user:
            return None
        return session

    async def open(self, user: User) -> DashboardSession:
        """Create a session for a user who just signed in and load their tasks."""
        self._evict_expired()
        session = DashboardSession(self.new_session_id())
        session.last_seen = self._clock()
        self._sessions[session.session_id] = session
        await session.sign_in(user)
        logger.info("Opened dashboard session", extra={"user_id": user.id})
        return session

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            await session.sign_out()
            logger.info("Closed dashboard session")

    def clear(self) -> None:
        self._sessions.clear()


# Global registry instance (in-memory, sessions are lost on restart)
session_registry = SessionRegistry()
