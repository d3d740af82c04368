"""
Request ID middleware for FastAPI.

Automatically generates and injects a unique request_id for each incoming request.
The request_id is:
- Added to the request state
- Added to response headers (X-Request-ID)
- Set in context variables so ALL logs in this request automatically include it,
  including the fire-and-forget mail dispatches the request starts
"""

import uuid

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from portfolio_api.core.logging_config import clear_request_id, set_request_id
from portfolio_api.core.sentry import set_request_tag


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Adds a unique request_id to each request and sets it in context."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        set_request_id(request_id)
        set_request_tag(request_id)

        try:
            logger.info(f"{request.method} {request.url.path} - Request started")

            response: Response = await call_next(request)

            response.headers["X-Request-ID"] = request_id

            logger.info(
                f"{request.method} {request.url.path} - Request completed with status {response.status_code}"
            )

            return response

        except Exception as e:
            logger.error(f"{request.method} {request.url.path} - Request failed: {e}")
            raise
        finally:
            clear_request_id()
