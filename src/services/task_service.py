"""Task data access: the three remote operations the task store consumes."""

import logging

from src.core import db_client
from src.core.config import Constants
from src.core.db_client import sanitize_param
from src.core.errors import RemoteError
from src.core.logging import span
from src.domain.task import Task, TaskCreate
from src.domain.user import User


logger = logging.getLogger(__name__)


async def list_tasks_for_user(*, user: User) -> list[Task]:
    """Get every task owned by a user, newest first.

    Args:
        user: Owner whose tasks to fetch

    Returns:
        Tasks ordered by creation time descending

    Raises:
        RemoteError: If the data store query fails
    """
    with span("task_service.list_tasks_for_user"):
        try:
            records = await db_client.list_records(
                collection=Constants.TASKS_COLLECTION,
                filter_query=f'user_id = "{sanitize_param(user.id)}"',
                sort="-created",
                per_page=Constants.DEFAULT_PER_PAGE_LIMIT,
            )
        except db_client.DatabaseError as e:
            logger.error("Failed to list tasks", extra={"user_id": user.id, "error": str(e)})
            raise RemoteError(str(e)) from e

        logger.debug("Retrieved %d tasks for user %s", len(records), user.id)
        return [Task.model_validate(record) for record in records]


async def insert_task(*, fields: TaskCreate) -> Task:
    """Create a task record and return it with store-assigned id and timestamps.

    Args:
        fields: Validated task fields

    Returns:
        The created task as stored

    Raises:
        RemoteError: If the insert fails
    """
    with span("task_service.insert_task"):
        try:
            record = await db_client.create_record(
                collection=Constants.TASKS_COLLECTION,
                data=fields.model_dump(mode="json"),
            )
        except db_client.DatabaseError as e:
            logger.error("Failed to insert task", extra={"user_id": fields.user_id, "error": str(e)})
            raise RemoteError(str(e)) from e

        logger.info("Created task: %s (owner: %s)", fields.title, fields.user_id)
        return Task.model_validate(record)


async def update_task_completed(*, task_id: str, completed: bool) -> Task:
    """Set the completed flag of a task.

    Raises:
        RemoteError: If the task does not exist or the update fails
    """
    with span("task_service.update_task_completed"):
        try:
            record = await db_client.update_record(
                collection=Constants.TASKS_COLLECTION,
                record_id=task_id,
                data={"completed": completed},
            )
        except (db_client.DatabaseError, db_client.RecordNotFoundError) as e:
            logger.error("Failed to update task", extra={"task_id": task_id, "error": str(e)})
            raise RemoteError(str(e)) from e

        logger.info("Task %s completed=%s", task_id, completed)
        return Task.model_validate(record)
