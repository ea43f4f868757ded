"""Intake service configuration.

All settings come from environment variables and are read once, at app
creation, into a frozen dataclass. Tests build ``IntakeSettings`` directly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from contactdesk.infra.time import load_zone

DEFAULT_SPAM_KEYWORDS: tuple[str, ...] = (
    "casino",
    "viagra",
    "porn",
    "gambling",
    "crypto mining",
)

DEFAULT_AUTO_REPLY_FOOTER = (
    "Explore our services: https://eexperts.info/services\n"
    "Call us: +91 79 4895 5466\n"
    "WhatsApp: https://wa.me/917948955466\n"
    "\n"
    "Business hours (IST):\n"
    "Monday - Friday: 9:00 AM - 6:00 PM\n"
    "Saturday: 9:00 AM - 1:00 PM\n"
    "Sunday: Closed\n"
    "\n"
    "Our offices:\n"
    "Ahmedabad: D-607 Ganesh Glory-11, Jagatpur Road, off SG Highway\n"
    "Valsad: 506, 5th Floor, Millennium Empire, Near D-Mart"
)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class IntakeSettings:
    """Runtime configuration for the contact intake pipeline.

    Attributes:
        webhook_url: Notification webhook. None means notifications are
                     only logged.
        webhook_timeout: Seconds before an outbound webhook call is abandoned.
        rate_limit_max: Submissions allowed per identity per window.
        rate_limit_window_seconds: Length of the rolling window.
        spam_keywords: Lowercase substrings that mark content as spam.
        display_timezone: IANA zone for the human-readable submission time.
        company_name: Used in notification subject footer and auto-reply.
        auto_reply_footer: Contact details appended to the auto-reply. Empty
                           omits the footer.
        trust_forwarded_for: Take client identity from X-Forwarded-For. Only
                             enable behind a proxy that overwrites the header.
    """

    webhook_url: str | None = None
    webhook_timeout: float = 10.0
    rate_limit_max: int = 5
    rate_limit_window_seconds: int = 3600
    spam_keywords: tuple[str, ...] = field(default=DEFAULT_SPAM_KEYWORDS)
    display_timezone: str = "Asia/Kolkata"
    company_name: str = "Ritesource & eExperts"
    auto_reply_footer: str = DEFAULT_AUTO_REPLY_FOOTER
    trust_forwarded_for: bool = False


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _parse_positive(name: str, raw: str, cast: type) -> float | int:
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _parse_timezone(name: str, raw: str) -> str:
    value = raw.strip()
    try:
        load_zone(value)
    except ValueError:
        raise ValueError(f"{name} must be an IANA timezone, got {raw!r}") from None
    return value


def _parse_keywords(raw: str) -> tuple[str, ...]:
    keywords = tuple(k.strip().lower() for k in raw.split(",") if k.strip())
    return keywords or DEFAULT_SPAM_KEYWORDS


def load_settings(env: Mapping[str, str] | None = None) -> IntakeSettings:
    """Build settings from the environment.

    Args:
        env: Mapping to read instead of ``os.environ`` (for tests).

    Raises:
        ValueError: If a numeric, boolean or timezone variable is malformed.
    """
    if env is None:
        env = os.environ

    defaults = IntakeSettings()

    webhook_url = env.get("CONTACT_FORM_WEBHOOK_URL", "").strip() or None

    webhook_timeout = defaults.webhook_timeout
    if env.get("CONTACT_WEBHOOK_TIMEOUT"):
        webhook_timeout = float(
            _parse_positive("CONTACT_WEBHOOK_TIMEOUT", env["CONTACT_WEBHOOK_TIMEOUT"], float)
        )

    rate_limit_max = defaults.rate_limit_max
    if env.get("CONTACT_RATE_LIMIT_MAX"):
        rate_limit_max = int(
            _parse_positive("CONTACT_RATE_LIMIT_MAX", env["CONTACT_RATE_LIMIT_MAX"], int)
        )

    window = defaults.rate_limit_window_seconds
    if env.get("CONTACT_RATE_LIMIT_WINDOW_SECONDS"):
        window = int(
            _parse_positive(
                "CONTACT_RATE_LIMIT_WINDOW_SECONDS",
                env["CONTACT_RATE_LIMIT_WINDOW_SECONDS"],
                int,
            )
        )

    spam_keywords = defaults.spam_keywords
    if env.get("CONTACT_SPAM_KEYWORDS"):
        spam_keywords = _parse_keywords(env["CONTACT_SPAM_KEYWORDS"])

    display_timezone = defaults.display_timezone
    if env.get("CONTACT_DISPLAY_TIMEZONE"):
        display_timezone = _parse_timezone(
            "CONTACT_DISPLAY_TIMEZONE", env["CONTACT_DISPLAY_TIMEZONE"]
        )

    auto_reply_footer = defaults.auto_reply_footer
    if "CONTACT_AUTO_REPLY_FOOTER" in env:
        # Single-line env values spell newlines as a literal backslash-n
        auto_reply_footer = env["CONTACT_AUTO_REPLY_FOOTER"].replace("\\n", "\n").strip()

    trust_forwarded_for = defaults.trust_forwarded_for
    if env.get("TRUST_FORWARDED_FOR"):
        trust_forwarded_for = _parse_bool("TRUST_FORWARDED_FOR", env["TRUST_FORWARDED_FOR"])

    return IntakeSettings(
        webhook_url=webhook_url,
        webhook_timeout=webhook_timeout,
        rate_limit_max=rate_limit_max,
        rate_limit_window_seconds=window,
        spam_keywords=spam_keywords,
        display_timezone=display_timezone,
        company_name=env.get("CONTACT_COMPANY_NAME") or defaults.company_name,
        auto_reply_footer=auto_reply_footer,
        trust_forwarded_for=trust_forwarded_for,
    )
