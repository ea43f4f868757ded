"""Notification dispatch for accepted submissions.

Delivery is best effort. Whatever happens here (webhook down, timeout,
auto-reply failure) is reported through ``DispatchResult`` and the logs,
never raised to the caller: the submitter has already been accepted.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Protocol

from contactdesk.domain.submission import Submission
from contactdesk.infra.hashing import fingerprint
from contactdesk.infra.settings import IntakeSettings
from contactdesk.infra.time import format_local, utc_now
from contactdesk.observability.correlation import get_correlation_id
from contactdesk.observability.logging import get_logger
from contactdesk.observability.redaction import safe_log_context

from .templates import NOT_PROVIDED, NOT_SPECIFIED, or_default, render
from .webhook import WebhookDeliveryError, post_webhook

logger = get_logger(__name__)

# Log-only channel: the full notification text goes here when no webhook is
# configured, so it can be routed to its own sink.
notification_log = get_logger("contactdesk.notifications.log_channel")


@dataclass(frozen=True)
class Notification:
    subject: str
    body: str
    submitted_at: datetime


@dataclass(frozen=True)
class AutoReply:
    to: str
    subject: str
    body: str


@dataclass(frozen=True)
class DispatchResult:
    """What happened to one notification.

    Attributes:
        channel: "webhook" if a webhook is configured, else "log".
        delivered: True if the channel accepted the notification.
        status_code: Webhook response status, when one was received.
        error: Short failure description (no PII).
        acknowledged: True if the auto-reply was handed off without error.
    """

    channel: Literal["webhook", "log"]
    delivered: bool
    status_code: int | None = None
    error: str | None = None
    acknowledged: bool = False


class AcknowledgmentSender(Protocol):
    def send(self, reply: AutoReply) -> None: ...


class LoggingAcknowledgmentSender:
    """Records that an auto-reply was prepared.

    Stand-in until a mail provider is wired up; logs lengths only.
    """

    def send(self, reply: AutoReply) -> None:
        logger.info(
            "auto-reply prepared",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=get_correlation_id(),
                    subject_len=len(reply.subject),
                    body_len=len(reply.body),
                )
            },
        )


WebhookPoster = Callable[..., int]


class NotificationDispatcher:
    def __init__(
        self,
        settings: IntakeSettings,
        *,
        acknowledgment_sender: AcknowledgmentSender | None = None,
        poster: WebhookPoster = post_webhook,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings
        self._ack_sender = acknowledgment_sender or LoggingAcknowledgmentSender()
        self._poster = poster
        self._now = now

    def build_notification(self, submission: Submission, client_identity: str) -> Notification:
        submitted_at = self._now()
        subject = render("notification_subject", {"service": submission.service})
        body = render(
            "notification_body",
            {
                "first_name": submission.first_name,
                "last_name": submission.last_name,
                "email": submission.email,
                "phone": or_default(submission.phone, NOT_PROVIDED),
                "company": or_default(submission.company, NOT_PROVIDED),
                "contact_method": or_default(submission.contact_method, NOT_SPECIFIED),
                "service": submission.service,
                "timeline": or_default(submission.timeline, NOT_SPECIFIED),
                "project_size": or_default(submission.project_size, NOT_SPECIFIED),
                "message": submission.message,
                "submitted_at": self._format_submitted_at(submitted_at),
                "client_identity": client_identity,
                "has_attachment": "Yes" if submission.has_attachment else "No",
                "company_name": self._settings.company_name,
            },
        )
        return Notification(subject=subject, body=body, submitted_at=submitted_at)

    def build_auto_reply(self, submission: Submission) -> AutoReply:
        company_name = self._settings.company_name
        return AutoReply(
            to=submission.email,
            subject=render("auto_reply_subject", {"company_name": company_name}),
            body=render(
                "auto_reply_body",
                {
                    "first_name": submission.first_name,
                    "service": submission.service,
                    "timeline": or_default(submission.timeline, NOT_SPECIFIED),
                    "project_size": or_default(submission.project_size, NOT_SPECIFIED),
                    "company_name": company_name,
                    "footer": self._footer(),
                },
            ),
        )

    def _format_submitted_at(self, submitted_at: datetime) -> str:
        try:
            return format_local(submitted_at, self._settings.display_timezone)
        except ValueError:
            logger.warning(
                "unknown display timezone, using UTC",
                extra={
                    "extra_fields": safe_log_context(timezone=self._settings.display_timezone)
                },
            )
            return format_local(submitted_at, "UTC")

    def _footer(self) -> str:
        footer = self._settings.auto_reply_footer.strip()
        return f"\n\n---\n{footer}" if footer else ""

    def build_webhook_payload(
        self,
        notification: Notification,
        submission: Submission,
        client_identity: str,
    ) -> dict[str, Any]:
        return {
            "subject": notification.subject,
            "body": notification.body,
            "data": submission.to_wire(),
            "timestamp": notification.submitted_at.isoformat(),
            "ip": client_identity,
        }

    def dispatch(self, submission: Submission, client_identity: str) -> DispatchResult:
        """Forward an accepted submission and send the auto-reply.

        Never raises for delivery problems; see ``DispatchResult``.
        """
        notification = self.build_notification(submission, client_identity)
        log_ctx = safe_log_context(
            correlationId=get_correlation_id(),
            client=fingerprint(client_identity),
            service=submission.service,
        )

        webhook_url = self._settings.webhook_url
        if webhook_url:
            result = self._deliver_webhook(
                webhook_url, notification, submission, client_identity, log_ctx
            )
        else:
            notification_log.info(
                "=== NEW CONTACT FORM SUBMISSION ===\n%s\n%s",
                notification.subject,
                notification.body,
            )
            result = DispatchResult(channel="log", delivered=True)

        acknowledged = self._acknowledge(submission, log_ctx)
        return DispatchResult(
            channel=result.channel,
            delivered=result.delivered,
            status_code=result.status_code,
            error=result.error,
            acknowledged=acknowledged,
        )

    def _deliver_webhook(
        self,
        url: str,
        notification: Notification,
        submission: Submission,
        client_identity: str,
        log_ctx: dict[str, str],
    ) -> DispatchResult:
        payload = self.build_webhook_payload(notification, submission, client_identity)
        try:
            status_code = self._poster(
                url,
                payload,
                timeout=self._settings.webhook_timeout,
                correlation_id=get_correlation_id(),
            )
        except WebhookDeliveryError as e:
            logger.error(
                "notification delivery failed",
                extra={"extra_fields": safe_log_context(**log_ctx, error=str(e))},
            )
            return DispatchResult(
                channel="webhook",
                delivered=False,
                status_code=e.status_code,
                error=str(e),
            )
        return DispatchResult(channel="webhook", delivered=True, status_code=status_code)

    def _acknowledge(self, submission: Submission, log_ctx: dict[str, str]) -> bool:
        try:
            self._ack_sender.send(self.build_auto_reply(submission))
        except Exception as e:
            logger.error(
                "auto-reply failed",
                extra={
                    "extra_fields": safe_log_context(**log_ctx, error_type=type(e).__name__)
                },
            )
            return False
        return True
