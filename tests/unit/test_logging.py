"""Tests for structured logging context."""

from uuid import uuid4

import pytest

from studio.logging import bind_context, clear_context, current_context, get_logger
from studio.logging.structured import add_request_context, add_service_info


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


class TestContext:
    def test_bind_accumulates(self):
        account_id = uuid4()
        bind_context(request_id="req-1")
        bind_context(account_id=account_id)

        assert current_context() == {"request_id": "req-1", "account_id": str(account_id)}

    def test_none_values_are_skipped(self):
        bind_context(request_id="req-1", workspace_id=None)
        assert "workspace_id" not in current_context()

    def test_clear(self):
        bind_context(request_id="req-1")
        clear_context()
        assert current_context() == {}


class TestProcessors:
    def test_request_context_added(self):
        bind_context(request_id="req-2")
        event = add_request_context(None, "info", {"event": "approval_committed"})
        assert event["request_id"] == "req-2"

    def test_explicit_fields_win(self):
        bind_context(request_id="req-2")
        event = add_request_context(None, "info", {"event": "x", "request_id": "mine"})
        assert event["request_id"] == "mine"

    def test_service_info(self):
        event = add_service_info(None, "info", {"event": "x"})
        assert event["service"] == "studio-review"


def test_get_logger_logs_keyword_fields():
    logger = get_logger("studio.test")
    logger.info("test_event", post_id="p1")
