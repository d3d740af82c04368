"""
Origin allow-list enforcement.

CORSMiddleware only withholds CORS headers from unknown origins; the request
itself still runs. This middleware rejects it outright with 403 before any
route executes. Requests without an Origin header (curl, server-to-server,
mobile clients) pass through.
"""

import logging
from typing import Iterable

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from portfolio_api.core.errors import OriginNotAllowedError

logger = logging.getLogger(__name__)


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    def is_allowed(self, origin) -> bool:
        return not origin or origin in self.allowed_origins

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if not self.is_allowed(origin):
            logger.warning(f"Blocked by CORS: {origin}")
            error = OriginNotAllowedError(origin)
            return JSONResponse(
                status_code=error.status_code, content={"message": error.detail}
            )

        return await call_next(request)
