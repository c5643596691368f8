"""Configuration management for eventdesk."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Data store Configuration
    sqlite_db_path: str = Field(default="eventdesk.db", description="Path to the SQLite database file")

    # Session Configuration
    secret_key: str | None = Field(default=None, description="Secret key used to sign session cookies")
    session_max_age_seconds: int = Field(default=86400, description="Lifetime of a signed session cookie")
    is_production: bool = Field(default=False, description="Serve cookies with the Secure flag")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Email Composer Configuration
    email_send_delay_seconds: float = Field(
        default=2.0, description="Simulated transmission time for a bulk email (no real transport)"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_UNPROCESSABLE_ENTITY: int = 422

    # Collections
    TASKS_COLLECTION: str = "tasks"
    USERS_COLLECTION: str = "users"

    # Task defaults
    DEFAULT_TASK_CATEGORY: str = "General"

    # Email Composer
    RECENT_EMAILS_LIMIT: int = 10

    # Notifications
    MAX_PENDING_NOTIFICATIONS: int = 50

    # Session cookie
    SESSION_COOKIE_NAME: str = "eventdesk_session"
    CSRF_COOKIE_NAME: str = "eventdesk_csrf"
    CSRF_MAX_AGE_SECONDS: int = 3600

    # Password hashing
    PASSWORD_HASH_ITERATIONS: int = 260_000
    MIN_PASSWORD_LENGTH: int = 8

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 1000  # Task list is not paginated in the dashboard

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent
    TEMPLATES_DIR: Path = PROJECT_ROOT / "templates"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
