"""Task domain models and the overdue rule."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.core.config import Constants


class TaskPriority(StrEnum):
    """Task priority badge."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def is_overdue(*, due_date: date, completed: bool, today: date) -> bool:
    """Return True when an open task's due date is strictly before today."""
    return not completed and due_date < today


class Task(BaseModel):
    """Task data transfer object (one attendee-management to-do item)."""

    id: str = Field(..., description="Unique task ID assigned by the data store")
    created: str = Field(..., description="Creation timestamp (ISO format)")
    updated: str = Field(..., description="Last update timestamp (ISO format)")
    user_id: str = Field(..., description="Owner user ID")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    completed: bool = Field(default=False, description="Whether the task is done")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="high, medium or low")
    due_date: date = Field(..., description="Calendar date the task is due")
    category: str = Field(default=Constants.DEFAULT_TASK_CATEGORY, description="Free-form grouping label")


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    user_id: str = Field(..., description="Owner user ID")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    completed: bool = Field(default=False)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: date = Field(default_factory=date.today)
    category: str = Field(default=Constants.DEFAULT_TASK_CATEGORY)

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        """Strip the title and reject blank values."""
        v = v.strip()
        if not v:
            raise ValueError("Task title cannot be empty")
        return v


class TaskView(Task):
    """Task as rendered in the list, with display-derived fields."""

    is_overdue: bool = Field(..., description="Computed from due date, completion and the current date")

    @classmethod
    def from_task(cls, task: Task, *, today: date) -> "TaskView":
        return cls(
            **task.model_dump(),
            is_overdue=is_overdue(due_date=task.due_date, completed=task.completed, today=today),
        )
