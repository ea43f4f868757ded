"""Shared test helper functions for contact intake tests.

Plain functions and classes importable from conftest.py and test modules.
These are NOT fixtures.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from contactdesk.domain.submission import Attachment, RawSubmission

MIB = 1024 * 1024

PDF = "application/pdf"
PNG = "image/png"

T0 = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic replacement for utc_now()."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


def valid_form(**overrides: str) -> dict[str, str]:
    """Well-formed, non-spam form fields keyed by wire name."""
    form = {
        "service": "Web Development",
        "timeline": "1-3 months",
        "company": "Acme Pvt Ltd",
        "projectSize": "medium",
        "message": "We need a new marketing site with a blog.",
        "firstName": "Asha",
        "lastName": "Patel",
        "email": "asha@example.com",
        "phone": "+91 98765 43210",
        "contactMethod": "email",
    }
    form.update(overrides)
    return form


def without(form: dict[str, str], *names: str) -> dict[str, str]:
    return {k: v for k, v in form.items() if k not in names}


def raw_submission(attachment: Attachment | None = None, **overrides: str) -> RawSubmission:
    return RawSubmission(fields=valid_form(**overrides), attachment=attachment)


def attachment(content_type: str = PDF, size: int = 5 * MIB, filename: str = "brief.pdf") -> Attachment:
    return Attachment(filename=filename, content_type=content_type, size=size)


def upload(content_type: str = PDF, size: int = 5 * MIB, filename: str = "brief.pdf") -> dict:
    """``files=`` argument for TestClient with a file of ``size`` bytes."""
    return {"attachment": (filename, b"\0" * size, content_type)}


def form_loader(raw: RawSubmission):
    """Coroutine factory standing in for request form parsing."""

    async def load() -> RawSubmission:
        return raw

    return load
