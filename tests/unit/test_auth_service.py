"""Unit tests for auth_service and AuthContext."""

import pytest

from src.core.errors import FormValidationError
from src.domain.user import AuthState, User
from src.services import auth_service
from src.services.auth_service import AuthContext, hash_password, verify_password


@pytest.mark.unit
class TestPasswords:
    def test_hash_roundtrip(self):
        stored = hash_password("correct horse")

        assert verify_password("correct horse", stored) is True
        assert verify_password("wrong horse", stored) is False

    def test_salts_differ(self):
        assert hash_password("same password") != hash_password("same password")

    def test_malformed_hash_rejected(self):
        assert verify_password("anything", "not-a-hash") is False


@pytest.mark.unit
class TestSignUpAndSignIn:
    async def test_sign_up_then_sign_in(self, patched_db):
        created = await auth_service.sign_up(email="Organizer@Example.com ", password="secret-pass")

        signed_in = await auth_service.sign_in(email="organizer@example.com", password="secret-pass")

        assert created == signed_in
        assert signed_in.email == "organizer@example.com"

    async def test_duplicate_email_rejected(self, patched_db):
        await auth_service.sign_up(email="organizer@example.com", password="secret-pass")

        with pytest.raises(FormValidationError, match="already exists"):
            await auth_service.sign_up(email="organizer@example.com", password="other-pass")

    async def test_short_password_rejected(self, patched_db):
        with pytest.raises(FormValidationError, match="at least 8 characters"):
            await auth_service.sign_up(email="organizer@example.com", password="short")

    async def test_wrong_password_rejected(self, patched_db):
        await auth_service.sign_up(email="organizer@example.com", password="secret-pass")

        with pytest.raises(FormValidationError, match="Invalid email or password"):
            await auth_service.sign_in(email="organizer@example.com", password="not-it-at-all")

    async def test_unknown_email_rejected(self, patched_db):
        with pytest.raises(FormValidationError, match="Invalid email or password"):
            await auth_service.sign_in(email="nobody@example.com", password="secret-pass")


@pytest.mark.unit
class TestAuthContext:
    async def test_subscribers_receive_snapshots(self, alice):
        context = AuthContext()
        received: list[AuthState] = []

        async def listener(state: AuthState) -> None:
            received.append(state)

        context.subscribe(listener)
        await context.set_user(alice)
        await context.sign_out()

        assert [s.user for s in received] == [alice, None]
        assert context.state.is_authenticated is False

    async def test_same_user_does_not_republish(self, alice):
        context = AuthContext()
        received: list[AuthState] = []

        async def listener(state: AuthState) -> None:
            received.append(state)

        context.subscribe(listener)
        await context.set_user(alice)
        await context.set_user(User(id=alice.id, email=alice.email))

        assert len(received) == 1

    async def test_unsubscribe(self, alice):
        context = AuthContext()
        received: list[AuthState] = []

        async def listener(state: AuthState) -> None:
            received.append(state)

        unsubscribe = context.subscribe(listener)
        unsubscribe()
        await context.set_user(alice)

        assert received == []

    def test_snapshot_is_immutable(self, alice):
        state = AuthState(user=alice)

        with pytest.raises(ValueError, match="frozen"):
            state.user = None


@pytest.mark.unit
async def test_duplicate_email_containing_quote_rejected(patched_db):
    await auth_service.sign_up(email='o"brien@example.com', password="secret-pass")

    with pytest.raises(FormValidationError, match="already exists"):
        await auth_service.sign_up(email='o"brien@example.com', password="other-pass")
