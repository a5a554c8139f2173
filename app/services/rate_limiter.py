"""
Rate Limiter - per-user request budget for provider-calling endpoints.

Sliding one-hour window held in memory; the user's own provider account
pays for each call, so the budget protects them as much as us.

Usage:
    from app.services.rate_limiter import ai_rate_limiter

    ai_rate_limiter.check(user.id)     # raises RateLimitExceeded when over budget
"""

import logging
import time
from collections import deque
from typing import Deque, Dict, Optional, Callable

from app.core.config import settings

logger = logging.getLogger("binkeeper.services.rate_limiter")


WINDOW_SECONDS = 60 * 60


class RateLimitExceeded(Exception):
    """The user spent their budget for the current window."""

    def __init__(self, retry_after: float):
        super().__init__("Too many AI requests, please try again later")
        self.retry_after = retry_after


class RateLimiter:
    """
    Counts requests per key over a sliding window.

    Args:
        limit: Requests allowed per window (default: AI_RATE_LIMIT_PER_HOUR)
        window_seconds: Window length
        clock: Time source, injectable for tests
    """

    def __init__(
        self,
        limit: Optional[int] = None,
        window_seconds: int = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit if self._limit is not None else settings.AI_RATE_LIMIT_PER_HOUR

    def _prune(self, key: str, now: float) -> Deque[float]:
        hits = self._hits.get(key, deque())
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        # Idle keys are dropped so the map only holds active users
        if not hits:
            self._hits.pop(key, None)
        return hits

    def check(self, key: str) -> None:
        """
        Record one request for `key`.

        Raises:
            RateLimitExceeded when the window is already full (not recorded)
        """
        now = self._clock()
        hits = self._prune(key, now)
        if len(hits) >= self.limit:
            retry_after = hits[0] + self.window_seconds - now
            logger.info(f"AI rate limit hit for {key} ({self.limit}/window)")
            raise RateLimitExceeded(retry_after)
        hits.append(now)
        self._hits[key] = hits

    def remaining(self, key: str) -> int:
        hits = self._prune(key, self._clock())
        return max(0, self.limit - len(hits))

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._hits.clear()
        else:
            self._hits.pop(key, None)


# Singleton instance
ai_rate_limiter = RateLimiter()
