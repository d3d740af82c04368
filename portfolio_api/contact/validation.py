"""
Validation rules shared by the form client and the contact service.

Both sides import the same field set, pattern and messages from here. The
server check is authoritative; the client runs it only to fail fast.
"""

import re
from typing import Any, List, Mapping

from portfolio_api.contact.schemas import ContactSubmission
from portfolio_api.core.errors import ContactValidationError

REQUIRED_FIELDS = ("name", "email", "message")
OPTIONAL_FIELDS = ("subject",)
FORM_FIELDS = ("name", "email", "subject", "message")

# local-part@domain.tld: no whitespace or "@" in either part, a dot after "@"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS_MESSAGE = "Name, email, and message are required fields."
INVALID_EMAIL_MESSAGE = "Please provide a valid email address."
SUCCESS_MESSAGE = "Message sent successfully!"


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


def missing_required_fields(payload: Mapping[str, Any]) -> List[str]:
    """Return required fields that are absent, not text, or empty."""
    missing = []
    for field in REQUIRED_FIELDS:
        value = payload.get(field)
        if not isinstance(value, str) or not value:
            missing.append(field)
    return missing


def validate_submission(payload: Any) -> ContactSubmission:
    """
    Check a decoded request body and build the submission from it.

    Anything that is not a JSON object is treated as missing every field.
    Extra keys are ignored; a subject that is not text is dropped.

    Raises:
        ContactValidationError: required field missing or email malformed
    """
    if not isinstance(payload, Mapping) or missing_required_fields(payload):
        raise ContactValidationError(REQUIRED_FIELDS_MESSAGE)

    if not is_valid_email(payload["email"]):
        raise ContactValidationError(INVALID_EMAIL_MESSAGE)

    subject = payload.get("subject")
    return ContactSubmission(
        name=payload["name"],
        email=payload["email"],
        subject=subject if isinstance(subject, str) and subject else None,
        message=payload["message"],
    )
