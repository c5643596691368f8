"""Pydantic models for service layer return types and API payloads.

These models provide type safety at service boundaries and describe the JSON
the dashboard page consumes.
"""

from pydantic import BaseModel

from src.domain.email import ComposerState, EmailDraft, EmailTemplate, RecipientGroup, SentEmail
from src.domain.notification import Notification
from src.domain.task import TaskView


class OverviewStats(BaseModel):
    """Counters shown on the overview panel."""

    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    attendees: int
    emails_sent: int


class TaskListView(BaseModel):
    """Task list with its header counters."""

    tasks: list[TaskView]
    completed_count: int
    total_count: int
    draft_title: str


class ComposerView(BaseModel):
    """Email composer form state."""

    state: ComposerState
    draft: EmailDraft
    selected_group: RecipientGroup | None
    recent_emails: list[SentEmail]
    templates: list[EmailTemplate]
    groups: list[RecipientGroup]


class DashboardView(BaseModel):
    """Everything the dashboard page renders for the signed-in user."""

    user_email: str
    overview: OverviewStats
    task_list: TaskListView
    composer: ComposerView


class AddTaskRequest(BaseModel):
    """New task; without a title the pending task input is used."""

    title: str | None = None


class TaskDraftRequest(BaseModel):
    title: str


class SelectTemplateRequest(BaseModel):
    template_id: str | None = None


class DraftUpdateRequest(BaseModel):
    """Partial composer update; omitted fields are left unchanged."""

    template_id: str | None = None
    group_id: str | None = None
    subject: str | None = None
    body: str | None = None


class NotificationList(BaseModel):
    notifications: list[Notification]
