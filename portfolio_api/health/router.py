"""
Liveness endpoint. Not rate limited, no side effects.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from portfolio_api.core.config import settings

router = APIRouter(tags=["health"])


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2026-01-01T12:00:00.000Z."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@router.get("/health")
async def health_check():
    return {
        "message": "Server is running!",
        "timestamp": utc_timestamp(),
        "environment": settings.ENVIRONMENT,
    }
