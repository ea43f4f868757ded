"""Silent spam checks.

Neither check raises or explains itself: the caller answers spam with the
same success response a real visitor gets and simply skips notification.
"""

from collections.abc import Iterable

from .submission import Submission


def is_honeypot_filled(value: str | None) -> bool:
    """True if the hidden ``website`` field carries anything at all."""
    return bool(value)


class KeywordFilter:
    """Case-insensitive substring match over the free-text fields."""

    def __init__(self, keywords: Iterable[str]) -> None:
        self._keywords = tuple(k.lower() for k in keywords if k)

    @property
    def keywords(self) -> tuple[str, ...]:
        return self._keywords

    def matches(self, submission: Submission) -> bool:
        content = " ".join(
            (
                submission.message,
                submission.company,
                submission.first_name,
                submission.last_name,
            )
        ).lower()
        return any(keyword in content for keyword in self._keywords)
