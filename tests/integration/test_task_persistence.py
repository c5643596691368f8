"""Integration tests for the task store against a real SQLite database."""

from datetime import date

import pytest

from src.core import db_client
from src.core.errors import FormValidationError, RemoteError
from src.domain.task import TaskCreate
from src.services import auth_service, task_service
from src.services.notification_service import NotificationCenter
from src.services.task_store import TaskStore


pytestmark = pytest.mark.integration


@pytest.fixture
async def organizer(sqlite_db):
    return await auth_service.sign_up(email="organizer@example.com", password="secret-pass")


async def test_insert_and_list_roundtrip(organizer):
    await task_service.insert_task(fields=TaskCreate(user_id=organizer.id, title="Book venue", due_date=date(2025, 3, 1)))
    await task_service.insert_task(fields=TaskCreate(user_id=organizer.id, title="Order badges", due_date=date(2025, 3, 2)))

    tasks = await task_service.list_tasks_for_user(user=organizer)

    assert [t.title for t in tasks] == ["Order badges", "Book venue"]
    assert tasks[0].completed is False
    assert tasks[0].due_date == date(2025, 3, 2)


async def test_tasks_scoped_to_owner(organizer):
    other = await auth_service.sign_up(email="other@example.com", password="secret-pass")
    await task_service.insert_task(fields=TaskCreate(user_id=other.id, title="Not mine", due_date=date(2025, 3, 1)))

    assert await task_service.list_tasks_for_user(user=organizer) == []


async def test_update_completed_persists(organizer):
    task = await task_service.insert_task(
        fields=TaskCreate(user_id=organizer.id, title="Test AV equipment", due_date=date(2025, 3, 1))
    )

    await task_service.update_task_completed(task_id=task.id, completed=True)

    record = await db_client.get_record(collection="tasks", record_id=task.id)
    assert record["completed"] == 1


async def test_update_missing_task_raises_remote_error(organizer):
    with pytest.raises(RemoteError, match="Record not found in tasks: missing"):
        await task_service.update_task_completed(task_id="missing", completed=True)


async def test_store_add_and_toggle(organizer):
    notifications = NotificationCenter()
    store = TaskStore(notifier=notifications, today=lambda: date(2025, 1, 15))
    await store.load(organizer)

    created = await store.add("Print schedules")
    await store.toggle(created.id)

    reloaded = TaskStore(notifier=NotificationCenter())
    await reloaded.load(organizer)
    assert [(t.title, t.completed) for t in reloaded.tasks] == [("Print schedules", True)]
    assert [n.title for n in notifications.drain()] == ["Task added", "Task completed"]


async def test_duplicate_email_rejected(organizer):
    with pytest.raises(FormValidationError):
        await auth_service.sign_up(email="ORGANIZER@example.com", password="secret-pass")


async def test_duplicate_email_with_quote_rejected(sqlite_db):
    created = await auth_service.sign_up(email='o"brien@example.com', password="secret-pass")

    with pytest.raises(FormValidationError, match="already exists"):
        await auth_service.sign_up(email='o"brien@example.com', password="other-pass")

    signed_in = await auth_service.sign_in(email='o"brien@example.com', password="secret-pass")
    assert signed_in == created
