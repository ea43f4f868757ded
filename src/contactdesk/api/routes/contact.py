"""Contact form endpoint.

POST /api/contact with multipart/form-data (url-encoded also accepted).

Security: the form carries visitor PII. Fields exist only in memory for the
duration of the request; logs carry a fingerprint of the client address,
never the address, name, email, phone or message.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from contactdesk.domain.intake import IntakeHandler
from contactdesk.domain.submission import Attachment, RawSubmission
from contactdesk.infra.settings import IntakeSettings

router = APIRouter(prefix="/api", tags=["contact"])

FORM_FIELDS = (
    "service",
    "timeline",
    "company",
    "projectSize",
    "message",
    "firstName",
    "lastName",
    "email",
    "phone",
    "contactMethod",
    "website",
)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


class ContactResponse(BaseModel):
    """Response contract consumed by the site's contact form."""

    success: bool
    message: str | None = None
    error: str | None = None


class FormParseError(Exception):
    """Raised when the request body is not a usable form."""


def get_client_identity(request: Request, trust_forwarded_for: bool = False) -> str:
    """Return the rate limit key for a request.

    First hop of X-Forwarded-For when trusted (only when a proxy in front
    rewrites the header), else the socket peer, else "unknown".
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    return request.client.host if request.client else "unknown"


async def read_attachment(upload: UploadFile) -> Attachment | None:
    content = await upload.read()
    await upload.close()
    if not content:
        return None
    return Attachment(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        size=len(content),
    )


async def parse_contact_form(request: Request) -> RawSubmission:
    """Read the form body into a ``RawSubmission``.

    Raises:
        FormParseError: If the body cannot be parsed as a form.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type not in FORM_CONTENT_TYPES:
        raise FormParseError(f"unsupported content type: {content_type or 'none'}")

    try:
        form = await request.form()
    except Exception as e:
        raise FormParseError("request body is not a valid form") from e

    fields: dict[str, str] = {}
    for name in FORM_FIELDS:
        value = form.get(name)
        # A file sent under a text field name is ignored
        if isinstance(value, str):
            fields[name] = value

    attachment = None
    upload = form.get("attachment")
    if isinstance(upload, UploadFile):
        attachment = await read_attachment(upload)

    return RawSubmission(fields=fields, attachment=attachment)


def _get_handler(request: Request) -> IntakeHandler:
    return request.app.state.intake_handler


def _get_settings(request: Request) -> IntakeSettings:
    return request.app.state.settings


@router.post("/contact", response_model=ContactResponse, response_model_exclude_none=True)
async def submit_contact(request: Request) -> JSONResponse:
    """Accept a contact form submission.

    Returns:
        200 if accepted (or silently dropped as spam).
        400 if a field or the attachment is invalid.
        429 if the client exceeded the submission limit.
        500 on unexpected failure.
    """
    settings = _get_settings(request)
    client_identity = get_client_identity(request, settings.trust_forwarded_for)

    async def load_form() -> RawSubmission:
        return await parse_contact_form(request)

    result = await _get_handler(request).handle(load_form, client_identity)

    body = ContactResponse(**result.body).model_dump(exclude_none=True)
    headers = {}
    if result.retry_after is not None:
        headers["Retry-After"] = str(result.retry_after)
    return JSONResponse(status_code=result.status_code, content=body, headers=headers)
