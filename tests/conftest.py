"""Shared pytest fixtures for contact intake tests."""
import sys
sys.dont_write_bytecode = True

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from contactdesk.api.factory import build_intake_handler, create_app  # noqa: E402
from contactdesk.domain.rate_limit import RateLimiter  # noqa: E402
from contactdesk.infra.rate_limit_store import InMemoryRateLimitStore  # noqa: E402
from contactdesk.infra.settings import IntakeSettings  # noqa: E402
from contactdesk.notifications.dispatcher import DispatchResult  # noqa: E402

from .helpers import FakeClock  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_contact_env(monkeypatch):
    """Keep host environment variables from leaking into settings."""
    for name in (
        "CONTACT_FORM_WEBHOOK_URL",
        "CONTACT_WEBHOOK_TIMEOUT",
        "CONTACT_RATE_LIMIT_MAX",
        "CONTACT_RATE_LIMIT_WINDOW_SECONDS",
        "CONTACT_SPAM_KEYWORDS",
        "CONTACT_DISPLAY_TIMEZONE",
        "CONTACT_COMPANY_NAME",
        "CONTACT_AUTO_REPLY_FOOTER",
        "TRUST_FORWARDED_FOR",
        "LOG_FINGERPRINT_SALT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> IntakeSettings:
    return IntakeSettings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore()


@pytest.fixture
def rate_limiter(store, clock) -> RateLimiter:
    return RateLimiter(store, now=clock)


@pytest.fixture
def mock_dispatcher():
    """Dispatcher double that records calls and reports a delivered webhook."""
    dispatcher = MagicMock()
    dispatcher.dispatch.return_value = DispatchResult(
        channel="webhook", delivered=True, status_code=200, acknowledged=True
    )
    return dispatcher


@pytest.fixture
def client(settings, rate_limiter, mock_dispatcher) -> TestClient:
    """App with a fake clock and a mocked dispatcher."""
    handler = build_intake_handler(
        settings, rate_limiter=rate_limiter, dispatcher=mock_dispatcher
    )
    return TestClient(create_app(settings=settings, handler=handler))
