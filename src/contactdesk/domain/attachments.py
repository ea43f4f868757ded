"""Attachment policy: document types only, at most 10 MiB."""

from .submission import Attachment
from .validation import ValidationError

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/zip",
    }
)

MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024

INVALID_TYPE = "Invalid file type. Only PDF, DOC, DOCX, XLS, XLSX, ZIP allowed."
TOO_LARGE = "File too large. Maximum size is 10MB."


def validate_attachment(attachment: Attachment | None) -> None:
    """Check an optional attachment against the policy.

    Absent or zero-byte attachments pass. Type is checked before size.

    Raises:
        ValidationError: On a disallowed type or an oversized file.
    """
    if attachment is None or attachment.is_empty:
        return

    if attachment.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(INVALID_TYPE)

    if attachment.size > MAX_ATTACHMENT_BYTES:
        raise ValidationError(TOO_LARGE)
