from src.services import (
    auth_service,
    notification_service,
    task_service,
)


__all__ = [
    "auth_service",
    "notification_service",
    "task_service",
]
