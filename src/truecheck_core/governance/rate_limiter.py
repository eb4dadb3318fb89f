"""
Per-user request rate limiter (fixed hourly window by plan tier)
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from truecheck_core.detector_config import CostConfig
from truecheck_core.domain.errors import ValidationError
from truecheck_core.domain.value_objects import RateLimitResult

WINDOW_SECONDS = 3600


class RequestRateLimiter:
    """Counts requests per user in hourly windows"""

    def __init__(self, config: CostConfig | None = None, clock: Callable[[], float] = time.time) -> None:
        self.config = config or CostConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._counts: dict[str, tuple[float, int]] = {}
        self._pruned_window: float | None = None

    def _limit(self, plan: str) -> int:
        limit = self.config.plan_request_limits.get(plan)
        if limit is None:
            raise ValidationError(f"Unknown plan tier: {plan}")
        return limit

    def _current(self, user_id: str) -> tuple[float, int]:
        window_start = (self._clock() // WINDOW_SECONDS) * WINDOW_SECONDS
        start, count = self._counts.get(user_id, (window_start, 0))
        if start != window_start:
            return window_start, 0
        return start, count

    def check_user_rate_limit(self, user_id: str, plan: str) -> RateLimitResult:
        """
        Count one request for the user if the plan allows it

        Raises:
            ValidationError: Unknown plan tier
        """
        limit = self._limit(plan)
        with self._lock:
            start, count = self._current(user_id)
            allowed = count < limit
            if allowed:
                count += 1
                self._prune(start)
                self._counts[user_id] = (start, count)
        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, limit - count),
            reset_at=start + WINDOW_SECONDS,
            limit=limit,
        )

    def _prune(self, window_start: float) -> None:
        """Drop counters of past windows (once per window)"""
        if window_start == self._pruned_window:
            return
        self._counts = {
            user: entry for user, entry in self._counts.items() if entry[0] == window_start
        }
        self._pruned_window = window_start

    def status(self, user_id: str, plan: str) -> RateLimitResult:
        """Current window usage without counting a request"""
        limit = self._limit(plan)
        with self._lock:
            start, count = self._current(user_id)
        return RateLimitResult(
            allowed=count < limit,
            remaining=max(0, limit - count),
            reset_at=start + WINDOW_SECONDS,
            limit=limit,
        )

    def reset_user(self, user_id: str) -> None:
        with self._lock:
            self._counts.pop(user_id, None)
