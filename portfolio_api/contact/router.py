"""
Contact API routes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from slowapi.util import get_remote_address

from portfolio_api.contact.rate_limit import ContactRateLimiter, WindowState
from portfolio_api.contact.schemas import ContactResponse
from portfolio_api.contact.service import ContactService
from portfolio_api.contact.validation import SUCCESS_MESSAGE, validate_submission
from portfolio_api.core.config import settings
from portfolio_api.core.errors import GENERIC_FAILURE_MESSAGE, RateLimitExceededError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])



def get_rate_limiter(request: Request) -> ContactRateLimiter:
    return request.app.state.contact_rate_limiter


def get_contact_service(request: Request) -> ContactService:
    return request.app.state.contact_service


def rate_limit_headers(window: WindowState) -> dict:
    return {
        "RateLimit-Limit": str(window.limit),
        "RateLimit-Remaining": str(window.remaining),
        "RateLimit-Reset": str(window.reset_in),
    }


async def _read_json(request: Request):
    """Decoded JSON body, or None if the body is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("", response_model=ContactResponse, response_model_exclude_none=True)
async def submit_contact(
    request: Request,
    response: Response,
    rate_limiter: ContactRateLimiter = Depends(get_rate_limiter),
    contact_service: ContactService = Depends(get_contact_service),
):
    """
    Relay a contact-form submission to the site owner.

    Responds as soon as the submission is validated and both emails are
    scheduled; delivery happens afterwards and its outcome is only logged.

    Body:
        {"name": str, "email": str, "subject": str (optional), "message": str}

    Returns:
        200 {"message": "Message sent successfully!"}
        400 missing or malformed fields
        429 too many submissions from this address
        500 anything unexpected before dispatch
    """
    address = get_remote_address(request)
    allowed = rate_limiter.check(address)
    window = rate_limiter.window(address)

    if not allowed:
        raise RateLimitExceededError(
            window_minutes=rate_limiter.window_minutes,
            retry_after=window.reset_in,
            headers=rate_limit_headers(window),
        )

    response.headers.update(rate_limit_headers(window))

    try:
        payload = await _read_json(request)
        submission = validate_submission(payload)
        contact_service.dispatch(submission)
        return ContactResponse(message=SUCCESS_MESSAGE)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Contact submission failed: {str(e)}")
        content = {"message": GENERIC_FAILURE_MESSAGE}
        if not settings.is_production:
            content["error"] = str(e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
            headers=rate_limit_headers(window),
        )
