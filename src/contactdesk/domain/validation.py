"""Submission validation: required fields and email format."""

import re

from .submission import RawSubmission, Submission

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS = "Missing required fields"
INVALID_EMAIL = "Invalid email address"


class ValidationError(Exception):
    """Raised when a submission or its attachment is rejected.

    ``reason`` is safe to show to the submitter.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def validate_submission(raw: RawSubmission) -> Submission:
    """Trim fields and build a ``Submission``.

    Raises:
        ValidationError: If a required field is blank or the email is malformed.
    """
    service = raw.get("service").strip()
    message = raw.get("message").strip()
    first_name = raw.get("firstName").strip()
    last_name = raw.get("lastName").strip()
    email = raw.get("email").strip()

    if not (service and message and first_name and last_name and email):
        raise ValidationError(MISSING_FIELDS)

    if not is_valid_email(email):
        raise ValidationError(INVALID_EMAIL)

    return Submission(
        service=service,
        message=message,
        first_name=first_name,
        last_name=last_name,
        email=email,
        timeline=raw.get("timeline").strip(),
        company=raw.get("company").strip(),
        project_size=raw.get("projectSize").strip(),
        phone=raw.get("phone").strip(),
        contact_method=raw.get("contactMethod").strip(),
        attachment=raw.attachment,
    )
