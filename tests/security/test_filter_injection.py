from unittest.mock import AsyncMock

import pytest

from src.core import db_client
from src.core.errors import FormValidationError
from src.domain.user import User
from src.services import auth_service, task_service


@pytest.fixture
def capture_db_queries(monkeypatch):
    """Mocks db_client functions to capture query parameters."""
    mock_list = AsyncMock(return_value=[])
    mock_get_first = AsyncMock(return_value=None)

    monkeypatch.setattr("src.core.db_client.list_records", mock_list)
    monkeypatch.setattr("src.core.db_client.get_first_record", mock_get_first)

    return mock_list, mock_get_first


class TestFilterInjection:
    async def test_sanitize_param_escapes_quotes(self):
        """Verify sanitize_param correctly escapes double quotes."""
        malicious_input = 'foo" || true || "'
        sanitized = db_client.sanitize_param(malicious_input)

        assert sanitized == r'foo\" || true || \"'
        assert f'field = "{sanitized}"' == r'field = "foo\" || true || \""'

    async def test_list_tasks_owner_filter_is_escaped(self, capture_db_queries):
        mock_list, _ = capture_db_queries

        await task_service.list_tasks_for_user(user=User(id='user1" || true || "', email="x@example.com"))

        filter_query = mock_list.call_args.kwargs["filter_query"]
        assert filter_query == r'user_id = "user1\" || true || \""'

    async def test_sign_in_email_filter_is_escaped(self, capture_db_queries):
        _, mock_get_first = capture_db_queries

        with pytest.raises(FormValidationError):
            await auth_service.sign_in(email='a@b.c" || true || "', password="secret-pass")

        filter_query = mock_get_first.call_args.kwargs["filter_query"]
        assert filter_query == r'email = "a@b.c\" || true || \""'

    def test_escaped_filter_stays_a_single_condition(self):
        clause, params = db_client.parse_filter(r'user_id = "user1\" || true || \""')

        assert clause == "user_id = ?"
        assert params == ['user1" || true || "']
