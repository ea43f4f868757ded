"""Tests for the intake pipeline order and outcomes.

The handler is async; tests drive it with asyncio.run.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from contactdesk.domain.attachments import INVALID_TYPE, TOO_LARGE
from contactdesk.domain.intake import (
    RATE_LIMITED_ERROR,
    SUCCESS_MESSAGE,
    UNEXPECTED_ERROR,
    IntakeHandler,
)
from contactdesk.domain.spam import KeywordFilter
from contactdesk.domain.submission import RawSubmission
from contactdesk.domain.validation import INVALID_EMAIL, MISSING_FIELDS
from contactdesk.infra.settings import DEFAULT_SPAM_KEYWORDS

from .helpers import MIB, PNG, attachment, form_loader, raw_submission, valid_form, without

IP = "203.0.113.7"


@pytest.fixture
def handler(rate_limiter, mock_dispatcher):
    return IntakeHandler(
        rate_limiter=rate_limiter,
        keyword_filter=KeywordFilter(DEFAULT_SPAM_KEYWORDS),
        dispatcher=mock_dispatcher,
    )


def _handle(handler, raw, ip=IP):
    return asyncio.run(handler.handle(form_loader(raw), ip))


class TestAccepted:
    def test_valid_submission_dispatched(self, handler, mock_dispatcher):
        result = _handle(handler, raw_submission())

        assert result.status_code == 200
        assert result.body == {"success": True, "message": SUCCESS_MESSAGE}
        mock_dispatcher.dispatch.assert_called_once()
        submission, ip = mock_dispatcher.dispatch.call_args[0]
        assert submission.email == "asha@example.com"
        assert ip == IP
        assert result.dispatch.delivered is True

    def test_valid_attachment_dispatched(self, handler, mock_dispatcher):
        result = _handle(handler, raw_submission(attachment=attachment(size=5 * MIB)))
        assert result.status_code == 200
        mock_dispatcher.dispatch.assert_called_once()

    def test_dispatch_failure_still_success(self, handler, mock_dispatcher):
        mock_dispatcher.dispatch.side_effect = RuntimeError("boom")

        result = _handle(handler, raw_submission())

        assert result.status_code == 200
        assert result.body["success"] is True
        assert result.dispatch is None


class TestSilentSpam:
    def test_honeypot_returns_success_without_dispatch(self, handler, mock_dispatcher):
        result = _handle(handler, raw_submission(website="http://spam.example"))

        assert result.status_code == 200
        assert result.body == {"success": True}
        mock_dispatcher.dispatch.assert_not_called()

    def test_honeypot_checked_before_validation(self, handler, mock_dispatcher):
        raw = RawSubmission(fields={"website": "filled"})
        result = _handle(handler, raw)

        assert result.status_code == 200
        assert result.body == {"success": True}

    @pytest.mark.parametrize("message", ["cheap viagra", "VIAGRA", "Best Casino bonus"])
    def test_keyword_spam_returns_success_without_dispatch(
        self, handler, mock_dispatcher, message
    ):
        result = _handle(handler, raw_submission(message=message))

        assert result.status_code == 200
        assert result.body == {"success": True}
        mock_dispatcher.dispatch.assert_not_called()

    def test_keywords_checked_after_validation(self, handler):
        result = _handle(handler, raw_submission(message="viagra", email="not-an-email"))
        assert result.status_code == 400
        assert result.body["error"] == INVALID_EMAIL

    def test_keywords_checked_before_attachment(self, handler, mock_dispatcher):
        raw = raw_submission(message="casino", attachment=attachment(content_type=PNG))
        result = _handle(handler, raw)
        assert result.status_code == 200
        mock_dispatcher.dispatch.assert_not_called()


class TestRejected:
    def test_missing_email(self, handler, mock_dispatcher):
        raw = RawSubmission(fields=without(valid_form(), "email"))
        result = _handle(handler, raw)

        assert result.status_code == 400
        assert result.body == {"success": False, "error": MISSING_FIELDS}
        mock_dispatcher.dispatch.assert_not_called()

    def test_invalid_email(self, handler):
        result = _handle(handler, raw_submission(email="not-an-email"))
        assert result.status_code == 400
        assert result.body["error"] == INVALID_EMAIL

    def test_bad_attachment_type(self, handler, mock_dispatcher):
        result = _handle(handler, raw_submission(attachment=attachment(content_type=PNG)))
        assert result.status_code == 400
        assert result.body["error"] == INVALID_TYPE
        mock_dispatcher.dispatch.assert_not_called()

    def test_attachment_too_large(self, handler):
        result = _handle(handler, raw_submission(attachment=attachment(size=11 * MIB)))
        assert result.status_code == 400
        assert result.body["error"] == TOO_LARGE


class TestRateLimitGate:
    def test_sixth_submission_limited(self, handler, mock_dispatcher):
        results = [_handle(handler, raw_submission()) for _ in range(6)]

        assert [r.status_code for r in results] == [200] * 5 + [429]
        assert results[-1].body == {"success": False, "error": RATE_LIMITED_ERROR}
        assert results[-1].retry_after == 3600
        assert mock_dispatcher.dispatch.call_count == 5

    def test_limited_before_form_is_read(self, handler):
        for _ in range(5):
            _handle(handler, raw_submission())
        loader = MagicMock()

        result = asyncio.run(handler.handle(loader, IP))

        assert result.status_code == 429
        loader.assert_not_called()

    def test_rejected_submissions_count_toward_limit(self, handler):
        for _ in range(5):
            assert _handle(handler, raw_submission(email="bad")).status_code == 400
        assert _handle(handler, raw_submission()).status_code == 429

    def test_recovers_after_window(self, handler, clock):
        for _ in range(5):
            _handle(handler, raw_submission())
        assert _handle(handler, raw_submission()).status_code == 429

        clock.advance(hours=1, seconds=1)

        assert _handle(handler, raw_submission()).status_code == 200

    def test_same_payload_same_outcome(self, handler, rate_limiter, store):
        spam = raw_submission(message="viagra")
        first = _handle(handler, spam)
        second = _handle(handler, spam)

        assert first == second
        assert store.get(IP).count == 2


class TestUnexpectedFailure:
    def test_form_parse_failure_is_generic_500(self, handler, mock_dispatcher):
        async def broken():
            raise ValueError("multipart boundary missing")

        result = asyncio.run(handler.handle(broken, IP))

        assert result.status_code == 500
        assert result.body == {"success": False, "error": UNEXPECTED_ERROR}
        assert "boundary" not in str(result.body)
        mock_dispatcher.dispatch.assert_not_called()

    def test_internal_fault_is_generic_500(self, mock_dispatcher):
        limiter = MagicMock()
        limiter.check_and_increment.side_effect = KeyError("store corrupted")
        handler = IntakeHandler(limiter, KeywordFilter(DEFAULT_SPAM_KEYWORDS), mock_dispatcher)

        result = _handle(handler, raw_submission())

        assert result.status_code == 500
        assert result.body["error"] == UNEXPECTED_ERROR
