"""Pytest configuration and shared fixtures."""

import os


# Settings are read at import time; give the session serializer a real key
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("EMAIL_SEND_DELAY_SECONDS", "0")

import pytest  # noqa: E402

from src.services.dashboard_service import session_registry  # noqa: E402


@pytest.fixture(autouse=True)
def reset_session_registry():
    """Start every test without dashboard sessions."""
    session_registry.clear()
    yield
    session_registry.clear()
