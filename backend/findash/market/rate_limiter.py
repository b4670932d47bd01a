"""Per-minute request budget for the quota-constrained provider."""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from .errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class RateLimiter:
    """Rolling fixed-window counter shared by every caller of one provider.

    This is advisory local throttling that keeps us under the upstream hard
    quota; the provider remains the authority.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max = max_requests
        self._window = window
        self._clock = clock
        self._count = 0
        self._reset_at = clock()

    def check_and_consume(self) -> None:
        """Consume one request from the budget.

        Raises RateLimitExceeded (carrying the remaining wait in whole
        seconds) when the window's budget is spent.
        """
        now = self._clock()
        if now - self._reset_at > self._window:
            self._count = 0
            self._reset_at = now

        if self._count >= self._max:
            wait = math.ceil(self._window - (now - self._reset_at))
            logger.warning("Local rate limit reached (%d/%d), %ds remaining", self._count, self._max, wait)
            raise RateLimitExceeded(wait)

        self._count += 1

    @property
    def remaining(self) -> int:
        """Requests left in the current window (without resetting it)."""
        if self._clock() - self._reset_at > self._window:
            return self._max
        return max(0, self._max - self._count)
