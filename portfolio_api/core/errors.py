"""
Error types shared by the contact API.

HTTP-facing errors subclass HTTPException so the handlers registered in
main.py render them as {"message": detail}. MailTransportError never reaches
a caller: it is raised inside fire-and-forget dispatches and only logged.
"""

from typing import Optional

from fastapi import HTTPException, status

GENERIC_FAILURE_MESSAGE = "Failed to send message. Please try again later."
ORIGIN_NOT_ALLOWED_MESSAGE = "CORS policy: Request not allowed"
NOT_FOUND_MESSAGE = "Endpoint not found"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"


class ContactValidationError(HTTPException):
    """Missing or malformed submission fields."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class OriginNotAllowedError(HTTPException):
    """Request Origin is not on the allow-list."""

    def __init__(self, origin: str):
        self.origin = origin
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN, detail=ORIGIN_NOT_ALLOWED_MESSAGE
        )


class RateLimitExceededError(HTTPException):
    """Too many submissions from one source address in the current window."""

    def __init__(
        self, window_minutes: int, retry_after: int, headers: Optional[dict] = None
    ):
        detail = (
            "Too many contact attempts from this IP, "
            f"please try again after {window_minutes} minutes."
        )
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            headers={**(headers or {}), "Retry-After": str(retry_after)},
        )


class MailTransportError(Exception):
    """Sending one message through the mail transport failed."""

    pass
