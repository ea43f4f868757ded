"""Redaction helpers for safe logging.

Visitor details (name, email, phone, message, client address) must never
reach the logs in clear. Anything passed as structured log context goes
through here.
"""

import re
from typing import Any

_IPV4_PATTERN = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")
_IPV6_PATTERN = re.compile(
    r"\b(?:[0-9a-fA-F]{1,4}:){3,7}[0-9a-fA-F]{1,4}\b|[0-9a-fA-F:]*::[0-9a-fA-F:]*"
)
_PHONE_PATTERN = re.compile(r"\+?\d[\d\s\-()]{8,}\d")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Context keys whose values are visitor PII whatever they look like
PII_KEYS = frozenset(
    {
        "firstName",
        "first_name",
        "lastName",
        "last_name",
        "email",
        "phone",
        "company",
        "message",
        "ip",
        "client_identity",
    }
)

_REDACTED = "[REDACTED]"


def redact_string(value: str) -> str:
    """Replace client addresses, phone numbers and email addresses in ``value``."""
    result = _EMAIL_PATTERN.sub(_REDACTED, value)
    result = _IPV4_PATTERN.sub(_REDACTED, result)
    result = _IPV6_PATTERN.sub(_REDACTED, result)
    return _PHONE_PATTERN.sub(_REDACTED, result)


def redact_value(value: Any) -> str:
    """Render any value as a log-safe string.

    Containers are reduced to their shape: dict keys, list length.
    Unknown objects are reduced to their type name.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        return f"dict(keys={sorted(str(k) for k in value)})"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build an ``extra_fields`` dict with every value redacted.

    Values under a visitor field name are dropped entirely.
    """
    return {
        k: _REDACTED if k in PII_KEYS else redact_value(v) for k, v in kwargs.items()
    }
