"""Notification and auto-reply text templates.

Rendered in memory at dispatch time only. ``render`` refuses parameters a
template does not declare so that stray fields cannot leak into a message.
"""

from typing import Any

NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"

TEMPLATES: dict[str, dict[str, Any]] = {
    "notification_subject": {
        "text": "New Contact Form Submission - {service}",
        "allowed_params": ["service"],
    },
    "notification_body": {
        "text": (
            "New contact form submission received:\n"
            "\n"
            "CONTACT INFORMATION:\n"
            "- Name: {first_name} {last_name}\n"
            "- Email: {email}\n"
            "- Phone: {phone}\n"
            "- Company: {company}\n"
            "- Preferred Contact: {contact_method}\n"
            "\n"
            "PROJECT DETAILS:\n"
            "- Service: {service}\n"
            "- Timeline: {timeline}\n"
            "- Project Size: {project_size}\n"
            "- Message: {message}\n"
            "\n"
            "METADATA:\n"
            "- Submission Time: {submitted_at}\n"
            "- IP Address: {client_identity}\n"
            "- Has Attachment: {has_attachment}\n"
            "\n"
            "---\n"
            "This email was sent from the {company_name} contact form."
        ),
        "allowed_params": [
            "first_name",
            "last_name",
            "email",
            "phone",
            "company",
            "contact_method",
            "service",
            "timeline",
            "project_size",
            "message",
            "submitted_at",
            "client_identity",
            "has_attachment",
            "company_name",
        ],
    },
    "auto_reply_subject": {
        "text": "Thank you for contacting {company_name}",
        "allowed_params": ["company_name"],
    },
    "auto_reply_body": {
        "text": (
            "Dear {first_name},\n"
            "\n"
            "Thank you for your interest in our services! We've received your "
            "inquiry about {service} and will get back to you within 24 hours "
            "during business hours.\n"
            "\n"
            "Here's a summary of your submission:\n"
            "- Service: {service}\n"
            "- Timeline: {timeline}\n"
            "- Project Size: {project_size}\n"
            "\n"
            "Best regards,\n"
            "{company_name} Team"
            "{footer}"
        ),
        "allowed_params": [
            "first_name",
            "service",
            "timeline",
            "project_size",
            "company_name",
            "footer",
        ],
    },
}


def render(template_key: str, params: dict[str, Any]) -> str:
    """Render a template.

    Raises:
        ValueError: If the template is unknown, a declared parameter is
            missing, or an undeclared one is supplied.
    """
    if template_key not in TEMPLATES:
        raise ValueError(f"Unknown template: {template_key}")

    template = TEMPLATES[template_key]
    allowed = set(template["allowed_params"])
    provided = set(params)

    extras = provided - allowed
    if extras:
        raise ValueError(f"Disallowed params for {template_key}: {sorted(extras)}")

    missing = allowed - provided
    if missing:
        raise ValueError(f"Missing params for {template_key}: {sorted(missing)}")

    return template["text"].format(**params)


def or_default(value: str, default: str) -> str:
    return value if value else default
