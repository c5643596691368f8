"""User identity models supplied by the auth provider."""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Signed-in user identity."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique user ID from the auth store")
    email: str = Field(..., description="Email address used to sign in")


class AuthState(BaseModel):
    """Immutable snapshot of the current authentication state.

    Consumers read it; only the auth context replaces it.
    """

    model_config = ConfigDict(frozen=True)

    user: User | None = Field(default=None, description="Current user, None when signed out")
    loading: bool = Field(default=False, description="True while the auth provider is resolving the session")

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
