"""
Per-address rate limiting for contact submissions.

Backed by the ``limits`` package (the engine behind slowapi) with in-memory
storage: fixed windows, atomic increments, state lost on restart.
"""

import logging
import time
from dataclasses import dataclass

from limits import RateLimitItemPerMinute
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from portfolio_api.core.config import settings

logger = logging.getLogger(__name__)

NAMESPACE = "contact"


@dataclass
class WindowState:
    """Snapshot of one address's current window."""

    limit: int
    remaining: int
    reset_at: float

    @property
    def reset_in(self) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, int(self.reset_at - time.time()))


class ContactRateLimiter:
    """Allow at most ``max_requests`` per source address per window."""

    def __init__(self, max_requests: int = 5, window_minutes: int = 15):
        self.max_requests = max_requests
        self.window_minutes = window_minutes
        self._item = RateLimitItemPerMinute(max_requests, window_minutes)
        self._storage = MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self._storage)

    def check(self, address: str) -> bool:
        """
        Count one request from ``address``.

        Returns:
            True if the request is within the limit, False if denied.
        """
        allowed = self._limiter.hit(self._item, NAMESPACE, address)
        if not allowed:
            logger.warning(f"Contact rate limit exceeded for {address}")
        return allowed

    def window(self, address: str) -> WindowState:
        stats = self._limiter.get_window_stats(self._item, NAMESPACE, address)
        return WindowState(
            limit=self.max_requests,
            remaining=stats.remaining,
            reset_at=stats.reset_time,
        )

    def reset(self) -> None:
        """Forget every address."""
        self._storage.reset()


def create_rate_limiter() -> ContactRateLimiter:
    return ContactRateLimiter(
        max_requests=settings.CONTACT_RATE_LIMIT_MAX,
        window_minutes=settings.CONTACT_RATE_LIMIT_WINDOW_MINUTES,
    )
