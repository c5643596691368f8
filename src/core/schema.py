"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "users",
    "tasks",
]


_TABLE_DEFINITIONS: dict[str, list[str]] = {
    "users": [
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            email TEXT NOT NULL,
            password_hash TEXT NOT NULL
        )
        """,
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email ON users (email)",
    ],
    "tasks": [
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            title TEXT NOT NULL CHECK (length(trim(title)) > 0),
            description TEXT NOT NULL DEFAULT '',
            completed INTEGER NOT NULL DEFAULT 0,
            priority TEXT NOT NULL DEFAULT 'medium' CHECK (priority IN ('high', 'medium', 'low')),
            due_date TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT 'General'
        )
        """,
        "CREATE INDEX IF NOT EXISTS idx_tasks_user_created ON tasks (user_id, created)",
    ],
}


async def init_db(*, db_path: str | None = None) -> None:
    """Create every collection table and index if missing."""
    conn = await db_client.get_connection(db_path=db_path)

    for collection in COLLECTIONS:
        for statement in _TABLE_DEFINITIONS[collection]:
            await conn.execute(statement)
        logger.info("Ensured collection schema", extra={"collection": collection})

    await conn.commit()
