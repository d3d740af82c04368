"""Sentry initialization for unexpected-error tracking."""

import logging

import sentry_sdk

from portfolio_api.core.config import settings

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    """Initialize Sentry SDK.

    Called once at app startup (main.py). No-op if SENTRY_DSN is not set.
    """
    if not settings.SENTRY_DSN:
        logger.info("Sentry DSN not configured - skipping initialization")
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=1.0 if settings.is_local else 0.1,
        environment=settings.ENVIRONMENT,
        # Submissions carry visitor names and addresses
        send_default_pii=False,
    )
    logger.info("Sentry initialized (environment=%s)", settings.ENVIRONMENT)


def set_request_tag(request_id: str) -> None:
    """Tag Sentry events raised while handling this request."""
    if not settings.SENTRY_DSN:
        return
    sentry_sdk.set_tag("request_id", request_id)
