"""Contact submission models.

A ``Submission`` holds visitor PII (name, email, phone, free text). It lives
only for the duration of one request: never persist it and never log its
fields in clear.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Attachment:
    """Uploaded file as declared by the client. Content is not retained."""

    filename: str
    content_type: str
    size: int

    @property
    def is_empty(self) -> bool:
        return self.size <= 0


@dataclass(frozen=True)
class RawSubmission:
    """Form payload as received, keyed by wire field name.

    ``fields`` maps names such as ``firstName`` or ``website`` to the
    submitted string. Absent fields are simply missing from the mapping.
    """

    fields: dict[str, str] = field(default_factory=dict)
    attachment: Attachment | None = None

    def get(self, name: str) -> str:
        return self.fields.get(name) or ""


@dataclass(frozen=True)
class Submission:
    """Validated, trimmed contact submission."""

    service: str
    message: str
    first_name: str
    last_name: str
    email: str
    timeline: str = ""
    company: str = ""
    project_size: str = ""
    phone: str = ""
    contact_method: str = ""
    attachment: Attachment | None = None

    @property
    def has_attachment(self) -> bool:
        return self.attachment is not None and not self.attachment.is_empty

    def to_wire(self) -> dict[str, object]:
        """Fields by their form names, for the notification webhook.

        Only attachment metadata is included.
        """
        return {
            "service": self.service,
            "timeline": self.timeline,
            "company": self.company,
            "projectSize": self.project_size,
            "message": self.message,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "contactMethod": self.contact_method,
            "attachment": (
                {
                    "filename": self.attachment.filename,
                    "contentType": self.attachment.content_type,
                    "size": self.attachment.size,
                }
                if self.has_attachment
                else None
            ),
        }
