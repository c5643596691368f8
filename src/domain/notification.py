"""Notification domain model (toast messages shown by the dashboard)."""

from enum import StrEnum

from pydantic import BaseModel, Field


class NotificationSeverity(StrEnum):
    """How prominently a notification is rendered."""

    NORMAL = "normal"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    """A single fire-and-forget user notification."""

    title: str = Field(..., description="Short headline")
    description: str = Field(default="", description="Detail line shown under the title")
    severity: NotificationSeverity = Field(default=NotificationSeverity.NORMAL, description="normal or destructive")
