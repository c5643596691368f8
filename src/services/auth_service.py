"""Authentication: account records and the per-session auth context."""

import base64
import hashlib
import logging
import secrets
from collections.abc import Awaitable, Callable

from src.core import db_client
from src.core.config import Constants
from src.core.db_client import sanitize_param
from src.core.errors import FormValidationError
from src.core.logging import span
from src.domain.user import AuthState, User


logger = logging.getLogger(__name__)


AuthListener = Callable[[AuthState], Awaitable[None]]


def hash_password(password: str, *, salt: bytes | None = None) -> str:
    """Hash a password with PBKDF2-SHA256; the salt is stored alongside the digest."""
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, Constants.PASSWORD_HASH_ITERATIONS)
    return f"{base64.b64encode(salt).decode()}${base64.b64encode(digest).decode()}"


def verify_password(password: str, stored_hash: str) -> bool:
    try:
        salt_b64, _ = stored_hash.split("$", 1)
        salt = base64.b64decode(salt_b64)
    except ValueError:
        return False
    return secrets.compare_digest(hash_password(password, salt=salt), stored_hash)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def sign_up(*, email: str, password: str) -> User:
    """Create an account.

    Raises:
        FormValidationError: If the email is taken or the input is invalid
    """
    with span("auth_service.sign_up"):
        email = _normalize_email(email)
        if "@" not in email:
            raise FormValidationError("Please enter a valid email address.")
        if len(password) < Constants.MIN_PASSWORD_LENGTH:
            raise FormValidationError(f"Password must be at least {Constants.MIN_PASSWORD_LENGTH} characters.")

        existing = await db_client.get_first_record(
            collection=Constants.USERS_COLLECTION,
            filter_query=f'email = "{sanitize_param(email)}"',
        )
        if existing:
            logger.warning("Sign-up rejected for existing email")
            raise FormValidationError("An account with this email already exists.")

        record = await db_client.create_record(
            collection=Constants.USERS_COLLECTION,
            data={"email": email, "password_hash": hash_password(password)},
        )
        logger.info("Created user", extra={"user_id": record["id"]})
        return User(id=record["id"], email=record["email"])


async def sign_in(*, email: str, password: str) -> User:
    """Check credentials and return the matching user.

    Raises:
        FormValidationError: If the email or password is wrong
    """
    with span("auth_service.sign_in"):
        record = await db_client.get_first_record(
            collection=Constants.USERS_COLLECTION,
            filter_query=f'email = "{sanitize_param(_normalize_email(email))}"',
        )
        if not record or not verify_password(password, record.get("password_hash", "")):
            logger.warning("Failed sign-in attempt")
            raise FormValidationError("Invalid email or password.")

        logger.info("User signed in", extra={"user_id": record["id"]})
        return User(id=record["id"], email=record["email"])


class AuthContext:
    """Holds the current ``AuthState`` for one browser session.

    The snapshot is immutable and replaced wholesale on every identity change;
    subscribers are awaited in registration order after each replacement.
    """

    def __init__(self) -> None:
        self._state = AuthState()
        self._listeners: list[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> User | None:
        return self._state.user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _publish(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            await listener(state)

    async def set_user(self, user: User | None) -> None:
        if user == self._state.user and not self._state.loading:
            return
        await self._publish(AuthState(user=user))

    async def sign_out(self) -> None:
        if self._state.user is not None:
            logger.info("User signed out", extra={"user_id": self._state.user.id})
        await self._publish(AuthState(user=None))
