"""
Pydantic schemas for the contact API.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ContactSubmission(BaseModel):
    """A validated contact-form submission. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    subject: Optional[str] = None
    message: str


class OutboundMessage(BaseModel):
    """One email handed to the mail transport"""

    model_config = ConfigDict(frozen=True)

    from_address: str
    to: str
    reply_to: Optional[str] = None
    subject: str
    html_body: str


class ContactResponse(BaseModel):
    """Response model for contact submissions and errors"""

    message: str
    error: Optional[str] = None
