"""Domain models and DTOs."""

from src.domain.email import (
    EMAIL_TEMPLATES,
    RECIPIENT_GROUPS,
    ComposerState,
    EmailDraft,
    EmailTemplate,
    RecipientGroup,
    SentEmail,
)
from src.domain.notification import Notification, NotificationSeverity
from src.domain.task import Task, TaskCreate, TaskPriority, TaskView, is_overdue
from src.domain.user import AuthState, User


__all__ = [
    "EMAIL_TEMPLATES",
    "RECIPIENT_GROUPS",
    "AuthState",
    "ComposerState",
    "EmailDraft",
    "EmailTemplate",
    "Notification",
    "NotificationSeverity",
    "RecipientGroup",
    "SentEmail",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskView",
    "User",
    "is_overdue",
]
