"""Outbound JSON webhook for submission notifications.

Security: the payload carries visitor PII. NEVER log the payload or the
URL query string; log only the host and the response status.
"""

from typing import Any
from urllib.parse import urlsplit

import requests

from contactdesk.observability.logging import get_logger
from contactdesk.observability.redaction import safe_log_context

logger = get_logger(__name__)


class WebhookDeliveryError(Exception):
    """Raised when the webhook could not be reached or answered non-2xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def _host(url: str) -> str:
    return urlsplit(url).netloc or "<invalid>"


def post_webhook(
    url: str,
    payload: dict[str, Any],
    *,
    timeout: float,
    correlation_id: str | None = None,
    session: requests.Session | None = None,
) -> int:
    """POST ``payload`` as JSON and return the response status code.

    Args:
        url: Webhook endpoint.
        payload: JSON-serialisable body. NEVER logged.
        timeout: Connect and read timeout in seconds.
        correlation_id: Forwarded as X-Correlation-ID.
        session: Optional requests session (tests, connection reuse).

    Raises:
        WebhookDeliveryError: On network error, timeout, or a non-2xx status.
    """
    headers = {
        "Content-Type": "application/json",
        "X-Correlation-ID": correlation_id or "",
    }
    log_ctx = safe_log_context(host=_host(url), timeout=timeout)
    poster = session.post if session is not None else requests.post

    try:
        response = poster(url, json=payload, headers=headers, timeout=timeout)
    except requests.Timeout as e:
        logger.warning(
            "notification webhook timed out",
            extra={"extra_fields": log_ctx},
        )
        raise WebhookDeliveryError("webhook timed out") from e
    except requests.RequestException as e:
        logger.warning(
            "notification webhook unreachable",
            extra={
                "extra_fields": safe_log_context(**log_ctx, error_type=type(e).__name__)
            },
        )
        raise WebhookDeliveryError(f"webhook request failed: {type(e).__name__}") from e

    if not 200 <= response.status_code < 300:
        logger.warning(
            "notification webhook rejected delivery",
            extra={
                "extra_fields": safe_log_context(**log_ctx, status=response.status_code)
            },
        )
        raise WebhookDeliveryError(
            f"webhook answered {response.status_code}",
            status_code=response.status_code,
        )

    logger.info(
        "notification webhook delivered",
        extra={"extra_fields": safe_log_context(**log_ctx, status=response.status_code)},
    )
    return response.status_code
