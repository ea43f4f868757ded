"""Time utilities for consistent timestamp handling."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """Return current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


def load_zone(tz_name: str) -> ZoneInfo:
    """Look up an IANA timezone.

    Raises:
        ValueError: If the name is not a known zone.
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise ValueError(f"unknown timezone: {tz_name!r}") from None


def format_local(moment: datetime, tz_name: str) -> str:
    """Format an aware timestamp for humans in the given IANA timezone.

    Example: ``18/10/2026, 3:45:12 pm IST`` for Asia/Kolkata.

    Raises:
        ValueError: If the timezone is unknown.
    """
    local = moment.astimezone(load_zone(tz_name))
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return (
        f"{local:%d/%m/%Y}, {hour}:{local:%M:%S} {meridiem} "
        f"{local.tzname()}"
    )
