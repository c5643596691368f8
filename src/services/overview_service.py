"""Overview panel counters."""

from datetime import date

from src.domain.email import ALL_ATTENDEES_GROUP_ID, find_group
from src.models.service_models import OverviewStats
from src.services.email_composer import EmailComposer
from src.services.task_store import TaskStore


def build_overview(*, store: TaskStore, composer: EmailComposer, today: date) -> OverviewStats:
    """Summarize the current task list and composer history."""
    views = store.task_views(today)
    completed = store.completed_count
    attendees = find_group(ALL_ATTENDEES_GROUP_ID)

    return OverviewStats(
        total_tasks=store.total_count,
        completed_tasks=completed,
        pending_tasks=store.total_count - completed,
        overdue_tasks=sum(1 for view in views if view.is_overdue),
        attendees=attendees.count if attendees else 0,
        emails_sent=composer.sent_count,
    )
