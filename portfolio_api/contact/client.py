"""
Contact form client.

Holds the form's field values, validates them with the same rules as the
service, posts them with a hard deadline and turns the outcome into a
SubmitStatus. One submission at a time: ``submit`` is a no-op while another
attempt is in flight. No retries; a failed attempt needs a new ``submit``.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import httpx

from portfolio_api.contact.validation import (
    FORM_FIELDS,
    INVALID_EMAIL_MESSAGE,
    SUCCESS_MESSAGE,
    is_valid_email,
    missing_required_fields,
)
from portfolio_api.core.config import settings

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill in all required fields."
TIMEOUT_MESSAGE = "Request timeout. Please try again."
NETWORK_ERROR_MESSAGE = "Network error. Please try again later."
SERVER_ERROR_FALLBACK = "Failed to send message."


class StatusKind(str, Enum):
    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class SubmitStatus:
    """Idle, Success(message) or Error(message)."""

    kind: StatusKind
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "SubmitStatus":
        return cls(StatusKind.IDLE)

    @classmethod
    def success(cls, message: str) -> "SubmitStatus":
        return cls(StatusKind.SUCCESS, message)

    @classmethod
    def error(cls, message: str) -> "SubmitStatus":
        return cls(StatusKind.ERROR, message)

    @property
    def is_idle(self) -> bool:
        return self.kind is StatusKind.IDLE

    @property
    def is_success(self) -> bool:
        return self.kind is StatusKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR


def _empty_fields() -> Dict[str, str]:
    return {field: "" for field in FORM_FIELDS}


class ContactFormClient:
    """State and submission logic for the contact form."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url or settings.CONTACT_API_URL
        self.timeout = (
            timeout if timeout is not None else settings.CONTACT_FORM_TIMEOUT_SECONDS
        )
        self._http_client = http_client

        self.fields: Dict[str, str] = _empty_fields()
        self.status = SubmitStatus.idle()
        self.is_submitting = False

    def update_field(self, name: str, value: str) -> None:
        """Set one field, leaving the others untouched."""
        if name not in self.fields:
            raise KeyError(f"Unknown form field: {name}")
        self.fields[name] = value

    def validate(self) -> Optional[str]:
        """Return the error message for the current fields, or None if valid."""
        if missing_required_fields(self.fields):
            return MISSING_FIELDS_MESSAGE
        if not is_valid_email(self.fields["email"]):
            return INVALID_EMAIL_MESSAGE
        return None

    async def submit(self) -> SubmitStatus:
        """
        Validate and post the form.

        Returns:
            The resulting status (also stored on ``self.status``). While a
            submission is already running, returns the current status and
            sends nothing.
        """
        if self.is_submitting:
            logger.debug("Submission already in progress, ignoring")
            return self.status

        self.is_submitting = True
        self.status = SubmitStatus.idle()
        try:
            self.status = await self._submit()
        finally:
            self.is_submitting = False

        return self.status

    async def _submit(self) -> SubmitStatus:
        error = self.validate()
        if error:
            return SubmitStatus.error(error)

        try:
            response = await asyncio.wait_for(
                self._post(dict(self.fields)), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Contact submission timed out after {self.timeout}s")
            return SubmitStatus.error(TIMEOUT_MESSAGE)
        except Exception as e:
            logger.warning(f"Contact submission failed: {str(e)}")
            return SubmitStatus.error(NETWORK_ERROR_MESSAGE)

        if response.is_success:
            self.fields = _empty_fields()
            return SubmitStatus.success(SUCCESS_MESSAGE)

        return SubmitStatus.error(self._server_message(response))

    async def _post(self, payload: Dict[str, str]) -> httpx.Response:
        # The deadline in _submit is the only timeout applied
        if self._http_client is not None:
            return await self._http_client.post(self.url, json=payload, timeout=None)

        async with httpx.AsyncClient() as client:
            return await client.post(self.url, json=payload, timeout=None)

    @staticmethod
    def _server_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return SERVER_ERROR_FALLBACK

        message = data.get("message") if isinstance(data, dict) else None
        if isinstance(message, str) and message:
            return message
        return SERVER_ERROR_FALLBACK
