"""Middleware package for the application."""

from portfolio_api.middleware.origin_policy import OriginPolicyMiddleware
from portfolio_api.middleware.request_id import RequestIDMiddleware
from portfolio_api.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "OriginPolicyMiddleware",
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
]
