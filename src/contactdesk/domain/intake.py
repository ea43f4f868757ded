"""Contact intake pipeline.

Order of gates (each either stops with a response or continues):

1. rate limit              -> 429
2. form parse              -> 500 on structural failure
3. honeypot                -> 200 success, silently dropped
4. required fields / email -> 400
5. spam keywords           -> 200 success, silently dropped
6. attachment policy       -> 400
7. notification dispatch   -> outcome logged only
8. 200 success

Spam is answered exactly like a real submission so that senders cannot
learn what triggered the filter. Any unexpected error becomes a generic 500.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from contactdesk.infra.hashing import fingerprint
from contactdesk.notifications.dispatcher import DispatchResult, NotificationDispatcher
from contactdesk.observability.correlation import get_correlation_id
from contactdesk.observability.logging import get_logger
from contactdesk.observability.redaction import safe_log_context

from .attachments import validate_attachment
from .rate_limit import RateLimiter
from .spam import KeywordFilter, is_honeypot_filled
from .submission import RawSubmission, Submission
from .validation import ValidationError, validate_submission

logger = get_logger(__name__)

RATE_LIMITED_ERROR = "Too many submissions. Please try again later."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again or contact us directly."
SUCCESS_MESSAGE = (
    "Your message has been sent successfully. We'll get back to you within 24 hours."
)

FormLoader = Callable[[], Awaitable[RawSubmission]]


@dataclass(frozen=True)
class IntakeResult:
    """HTTP-shaped outcome of one submission.

    Attributes:
        status_code: 200, 400, 429 or 500.
        body: JSON body, ``{"success": bool, "message"?: str, "error"?: str}``.
        retry_after: Seconds to wait, set only for 429.
        dispatch: Notification outcome, set only when dispatch ran.
    """

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)
    retry_after: int | None = None
    dispatch: DispatchResult | None = None


def _accepted(dispatch: DispatchResult | None = None, message: str | None = None) -> IntakeResult:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    return IntakeResult(status_code=200, body=body, dispatch=dispatch)


def _rejected(status_code: int, error: str, retry_after: int | None = None) -> IntakeResult:
    return IntakeResult(
        status_code=status_code,
        body={"success": False, "error": error},
        retry_after=retry_after,
    )


class IntakeHandler:
    def __init__(
        self,
        rate_limiter: RateLimiter,
        keyword_filter: KeywordFilter,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._keyword_filter = keyword_filter
        self._dispatcher = dispatcher

    async def handle(self, load_form: FormLoader, client_identity: str) -> IntakeResult:
        """Run one submission through the pipeline.

        Args:
            load_form: Coroutine factory that parses the request body.
            client_identity: Rate limit key (normally the client IP).
        """
        log_ctx = safe_log_context(
            correlationId=get_correlation_id(),
            client=fingerprint(client_identity),
        )
        try:
            return await self._run(load_form, client_identity, log_ctx)
        except Exception:
            logger.exception(
                "contact submission failed unexpectedly",
                extra={"extra_fields": log_ctx},
            )
            return _rejected(500, UNEXPECTED_ERROR)

    async def _run(
        self,
        load_form: FormLoader,
        client_identity: str,
        log_ctx: dict[str, str],
    ) -> IntakeResult:
        decision = self._rate_limiter.check_and_increment(client_identity)
        if not decision.allowed:
            logger.warning(
                "contact submission rate limited",
                extra={"extra_fields": safe_log_context(**log_ctx, retry_after=decision.retry_after)},
            )
            return _rejected(429, RATE_LIMITED_ERROR, retry_after=decision.retry_after)

        raw = await load_form()

        if is_honeypot_filled(raw.get("website")):
            logger.info(
                "spam detected via honeypot",
                extra={"extra_fields": log_ctx},
            )
            return _accepted()

        try:
            submission = validate_submission(raw)
        except ValidationError as e:
            logger.info(
                "contact submission rejected",
                extra={"extra_fields": safe_log_context(**log_ctx, reason=e.reason)},
            )
            return _rejected(400, e.reason)

        if self._keyword_filter.matches(submission):
            logger.info(
                "spam detected via keywords",
                extra={"extra_fields": log_ctx},
            )
            return _accepted()

        try:
            validate_attachment(submission.attachment)
        except ValidationError as e:
            logger.info(
                "contact attachment rejected",
                extra={"extra_fields": safe_log_context(**log_ctx, reason=e.reason)},
            )
            return _rejected(400, e.reason)

        dispatch = await self._dispatch(submission, client_identity, log_ctx)
        return _accepted(dispatch, SUCCESS_MESSAGE)

    async def _dispatch(
        self,
        submission: Submission,
        client_identity: str,
        log_ctx: dict[str, str],
    ) -> DispatchResult | None:
        # Blocking HTTP call; keep it off the event loop
        try:
            result = await asyncio.to_thread(
                self._dispatcher.dispatch, submission, client_identity
            )
        except Exception:
            logger.exception(
                "notification dispatch crashed",
                extra={"extra_fields": log_ctx},
            )
            return None

        logger.info(
            "contact submission accepted",
            extra={
                "extra_fields": safe_log_context(
                    **log_ctx,
                    channel=result.channel,
                    delivered=result.delivered,
                    acknowledged=result.acknowledged,
                )
            },
        )
        return result
