"""Pytest configuration and fixtures for unit tests."""

from datetime import date

import pytest

from src.domain.user import User
from src.services.notification_service import NotificationCenter
from src.services.task_store import TaskStore
from tests.unit.mocks import InMemoryDBClient


TODAY = date(2025, 1, 15)


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches src.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("src.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("src.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("src.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("src.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("src.core.db_client.get_first_record", in_memory_db.get_first_record)
    return in_memory_db


@pytest.fixture
def alice() -> User:
    return User(id="user-alice", email="alice@example.com")


@pytest.fixture
def bob() -> User:
    return User(id="user-bob", email="bob@example.com")


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def store(notifications) -> TaskStore:
    """Task store with a fixed clock."""
    return TaskStore(notifier=notifications, today=lambda: TODAY)


@pytest.fixture
def seed_task(patched_db):
    """Insert a task record directly into the in-memory store."""

    async def _seed(user: User, title: str, **fields):
        data = {
            "user_id": user.id,
            "title": title,
            "description": "",
            "completed": False,
            "priority": "medium",
            "due_date": TODAY.isoformat(),
            "category": "General",
            **fields,
        }
        return await patched_db.create_record("tasks", data)

    return _seed
