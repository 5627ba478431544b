"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Settings: mock_settings, make_settings
2. Infrastructure: mock_logfire, test_client
3. Webhook helpers: sign_body, message_payload
4. Messaging: mock_messaging_service, failing_messaging_service
"""

import json
import os
from contextlib import contextmanager
from unittest.mock import MagicMock, Mock

import pytest

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from ig_relay.services.messaging_protocol import MockMessagingService
from ig_relay.services.signature import compute_signature

# Modules that call get_settings() at request time
_SETTINGS_CONSUMERS = (
    "ig_relay.config",
    "ig_relay.main",
    "ig_relay.logging_config",
    "ig_relay.api.webhook",
    "ig_relay.api.conversations",
    "ig_relay.services.graph_service",
)

# Modules holding a module-level logfire reference
_LOGFIRE_CONSUMERS = (
    "ig_relay.main",
    "ig_relay.logging_config",
    "ig_relay.middleware.correlation_id",
    "ig_relay.services.graph_service",
    "ig_relay.services.event_processor",
)


@pytest.fixture
def make_settings(monkeypatch):
    """Build Settings with test defaults and install them everywhere.

    Keyword overrides replace individual fields, e.g.
    ``make_settings(app_secret=None)``.
    """
    from ig_relay.config import Settings

    def _make(**overrides):
        values = {
            "page_access_token": "test-page-token",
            "verify_token": "test-verify-token",
            "app_secret": "test-app-secret",
            "require_signature": False,
            "env": "local",
            "logfire_token": None,
            "sentry_dsn": None,
        }
        values.update(overrides)
        settings = Settings(**values)
        for module in _SETTINGS_CONSUMERS:
            monkeypatch.setattr(f"{module}.get_settings", lambda: settings)
        return settings

    return _make


@pytest.fixture
def mock_settings(make_settings):
    """Mock application settings with a configured app secret."""
    return make_settings()


@pytest.fixture
def mock_logfire(monkeypatch):
    """Mock Logfire for tests that don't verify logging behavior."""

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warn = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in _LOGFIRE_CONSUMERS:
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


@pytest.fixture
def test_client(mock_settings, mock_logfire):
    """FastAPI TestClient for E2E tests."""
    from fastapi.testclient import TestClient

    from ig_relay.main import app

    return TestClient(app)


@pytest.fixture
def sign_body():
    """Serialize a payload and sign it with the given secret."""

    def _sign(payload, secret="test-app-secret"):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        return body, compute_signature(body, secret)

    return _sign


@pytest.fixture
def message_payload():
    """Build a single-message webhook delivery."""

    def _payload(sender_id="U1", text="hi"):
        message = {"mid": "mid.1"}
        if text is not None:
            message["text"] = text
        return {
            "object": "instagram",
            "entry": [
                {
                    "id": "ig-biz-1",
                    "time": 1700000000,
                    "messaging": [
                        {
                            "sender": {"id": sender_id},
                            "recipient": {"id": "ig-biz-1"},
                            "timestamp": 1700000000,
                            "message": message,
                        }
                    ],
                }
            ],
        }

    return _payload


@pytest.fixture
def mock_messaging_service():
    """MessagingService that records replies and always succeeds."""
    return MockMessagingService()


@pytest.fixture
def failing_messaging_service():
    """MessagingService whose sends are always rejected."""
    return MockMessagingService(should_fail_send=True)
