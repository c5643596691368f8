"""Tests for InMemoryDBClient implementation."""

from datetime import date

import pytest

from src.core.db_client import DatabaseError, RecordNotFoundError


@pytest.mark.unit
class TestInMemoryDBClient:
    """Test suite for InMemoryDBClient."""

    async def test_create_record(self, in_memory_db):
        """Test creating a record."""
        record = await in_memory_db.create_record("tasks", {"title": "Book venue", "due_date": date(2025, 1, 15)})

        assert record["id"] is not None
        assert record["title"] == "Book venue"
        assert record["due_date"] == "2025-01-15"
        assert record["created"] == record["updated"]

    async def test_create_record_generates_unique_ids(self, in_memory_db):
        record1 = await in_memory_db.create_record("tasks", {"title": "One"})
        record2 = await in_memory_db.create_record("tasks", {"title": "Two"})

        assert record1["id"] != record2["id"]

    async def test_create_record_invalid_data(self, in_memory_db):
        with pytest.raises(DatabaseError, match="Data must be a dictionary"):
            await in_memory_db.create_record("tasks", "invalid")

    async def test_get_record_not_found(self, in_memory_db):
        with pytest.raises(RecordNotFoundError):
            await in_memory_db.get_record("tasks", "missing")

    async def test_update_record(self, in_memory_db):
        created = await in_memory_db.create_record("tasks", {"title": "Task", "completed": False})

        updated = await in_memory_db.update_record("tasks", created["id"], {"completed": True})

        assert updated["completed"] is True
        assert updated["title"] == "Task"
        assert updated["updated"] != created["updated"]

    async def test_update_record_not_found(self, in_memory_db):
        with pytest.raises(RecordNotFoundError):
            await in_memory_db.update_record("tasks", "missing", {"completed": True})

    async def test_list_records_with_filter(self, in_memory_db):
        await in_memory_db.create_record("tasks", {"user_id": "a", "title": "Mine"})
        await in_memory_db.create_record("tasks", {"user_id": "b", "title": "Theirs"})

        records = await in_memory_db.list_records("tasks", filter_query='user_id = "a"')

        assert [r["title"] for r in records] == ["Mine"]

    async def test_list_records_with_boolean_filter(self, in_memory_db):
        await in_memory_db.create_record("tasks", {"title": "Done", "completed": True})
        await in_memory_db.create_record("tasks", {"title": "Open", "completed": False})

        records = await in_memory_db.list_records("tasks", filter_query="completed = true")

        assert [r["title"] for r in records] == ["Done"]

    async def test_list_records_with_and_filter(self, in_memory_db):
        await in_memory_db.create_record("tasks", {"user_id": "a", "title": "Open", "completed": False})
        await in_memory_db.create_record("tasks", {"user_id": "a", "title": "Done", "completed": True})

        records = await in_memory_db.list_records("tasks", filter_query='user_id = "a" && completed != true')

        assert [r["title"] for r in records] == ["Open"]

    async def test_list_records_invalid_filter(self, in_memory_db):
        await in_memory_db.create_record("tasks", {"title": "Task"})

        with pytest.raises(DatabaseError, match="Invalid filter syntax"):
            await in_memory_db.list_records("tasks", filter_query="title")

    async def test_descending_sort_breaks_ties_newest_first(self, in_memory_db):
        for title in ("First", "Second", "Third"):
            await in_memory_db.create_record("tasks", {"title": title, "created": "2025-01-01T00:00:00Z"})

        records = await in_memory_db.list_records("tasks", sort="-created")

        assert [r["title"] for r in records] == ["Third", "Second", "First"]

    async def test_get_first_record_no_match(self, in_memory_db):
        await in_memory_db.create_record("users", {"email": "a@example.com"})

        assert await in_memory_db.get_first_record("users", 'email = "b@example.com"') is None

    async def test_record_modifications_dont_affect_storage(self, in_memory_db):
        created = await in_memory_db.create_record("tasks", {"title": "Original"})
        created["title"] = "Modified"

        record = await in_memory_db.get_record("tasks", created["id"])

        assert record["title"] == "Original"
