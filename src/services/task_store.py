"""In-memory reflection of the signed-in user's task collection.

The local list is only ever patched with responses the data store has
confirmed: toggles flip locally after the remote write succeeds, and adds
prepend the record the store returned. Each operation remembers the identity
generation it started under and drops its result if the user changed while
the remote call was in flight.
"""

import logging
from collections.abc import Callable
from datetime import date

from src.core.errors import RemoteError
from src.core.logging import log_with_user_context, span
from src.domain.notification import Notification
from src.domain.task import Task, TaskCreate, TaskView
from src.domain.user import User
from src.services import task_service
from src.services.notification_service import NotificationSink


logger = logging.getLogger(__name__)


class TaskStore:
    """Local task list for the current user, kept in step with the data store."""

    def __init__(self, *, notifier: NotificationSink, today: Callable[[], date] = date.today) -> None:
        self._notifier = notifier
        self._today = today
        self._user: User | None = None
        self._generation = 0
        self.tasks: list[Task] = []
        self.draft_title = ""

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def completed_count(self) -> int:
        return sum(1 for task in self.tasks if task.completed)

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    def task_views(self, today: date | None = None) -> list[TaskView]:
        """Render the list with the overdue indicator computed for ``today``."""
        current = today or self._today()
        return [TaskView.from_task(task, today=current) for task in self.tasks]

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            logger.info("Discarding task result from a previous identity", extra={"generation": generation})
            return True
        return False

    async def load(self, user: User | None) -> list[Task]:
        """Replace the local list with the user's tasks.

        Without a user the list is emptied and nothing is fetched.
        """
        if user != self._user:
            self._generation += 1
            self._user = user
        generation = self._generation

        if user is None:
            self.tasks = []
            return self.tasks

        with span("task_store.load"):
            try:
                tasks = await task_service.list_tasks_for_user(user=user)
            except RemoteError as e:
                if self._is_stale(generation):
                    return self.tasks
                self.tasks = []
                self._notifier.notify(e.to_notification("Error loading tasks"))
                return self.tasks

            if self._is_stale(generation):
                return self.tasks

            self.tasks = tasks
            log_with_user_context(logger, "info", "Loaded tasks", user_id=user.id, count=len(tasks))
            return self.tasks

    async def toggle(self, task_id: str) -> Task | None:
        """Invert a task's completed flag, remote first.

        Returns the updated task, or None when nothing changed locally.
        """
        task = next((t for t in self.tasks if t.id == task_id), None)
        if task is None:
            return None

        generation = self._generation
        new_state = not task.completed

        with span("task_store.toggle"):
            try:
                await task_service.update_task_completed(task_id=task_id, completed=new_state)
            except RemoteError as e:
                if not self._is_stale(generation):
                    self._notifier.notify(e.to_notification("Error updating task"))
                return None

            if self._is_stale(generation):
                return None

            updated: Task | None = None
            tasks = []
            for current in self.tasks:
                if current.id == task_id:
                    current = current.model_copy(update={"completed": new_state})
                    updated = current
                tasks.append(current)
            self.tasks = tasks

            if updated is None:
                return None

            if new_state:
                self._notifier.notify(
                    Notification(title="Task completed", description=f'"{updated.title}" marked as completed.')
                )
            else:
                self._notifier.notify(
                    Notification(title="Task reopened", description=f'"{updated.title}" marked as not completed.')
                )
            return updated

    async def add(self, title: str | None = None) -> Task | None:
        """Create a task from a title (defaults to the pending input).

        Blank titles and a missing user are silently ignored.
        """
        raw_title = self.draft_title if title is None else title
        clean_title = raw_title.strip()
        user = self._user
        if not clean_title or user is None:
            return None

        generation = self._generation
        fields = TaskCreate(user_id=user.id, title=clean_title, due_date=self._today())

        with span("task_store.add"):
            try:
                created = await task_service.insert_task(fields=fields)
            except RemoteError as e:
                if not self._is_stale(generation):
                    self._notifier.notify(e.to_notification("Error adding task"))
                return None

            if self._is_stale(generation):
                return None

            self.tasks = [created, *self.tasks]
            self.draft_title = ""
            self._notifier.notify(Notification(title="Task added", description=f'"{created.title}" added to your list.'))
            log_with_user_context(logger, "info", "Added task", user_id=user.id, task_id=created.id)
            return created
