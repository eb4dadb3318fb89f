"""
Cost tracker

Per-user hourly spend budgets by plan tier and the process-wide daily ledger
that drives the alert / emergency-stop tiers.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable

from truecheck_core.detector_config import CostConfig
from truecheck_core.domain.errors import ValidationError
from truecheck_core.domain.value_objects import CostCheckResult

logger = logging.getLogger(__name__)

HOUR_SECONDS = 3600


class CostTracker:
    """
    Spend ledger

    Per-user budgets are kept in fixed hourly windows. The daily total resets
    when the UTC date string changes.
    """

    def __init__(self, config: CostConfig | None = None, clock: Callable[[], float] = time.time) -> None:
        self.config = config or CostConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._user_costs: dict[str, tuple[int, float]] = {}
        self._pruned_window: int | None = None
        self._date = self._today()
        self._daily_total = 0.0
        self._alert_sent = False
        self._emergency_logged = False

    def _today(self) -> str:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc).strftime("%Y-%m-%d")

    def _hour_window(self) -> int:
        return int(self._clock() // HOUR_SECONDS)

    def _plan_limit(self, plan: str) -> float:
        limit = self.config.plan_cost_limits.get(plan)
        if limit is None:
            raise ValidationError(f"Unknown plan tier: {plan}")
        return limit

    def _user_spent(self, user_id: str) -> float:
        window, spent = self._user_costs.get(user_id, (None, 0.0))
        return spent if window == self._hour_window() else 0.0

    def check_cost_rate_limit(self, user_id: str, plan: str, estimated_cost: float) -> CostCheckResult:
        """
        Whether the user may spend estimated_cost more this hour

        Nothing is reserved; record_cost adds the actual cost after the call.

        Raises:
            ValidationError: Unknown plan tier
        """
        limit = self._plan_limit(plan)
        with self._lock:
            spent = self._user_spent(user_id)
        return CostCheckResult(
            allowed=spent + estimated_cost <= limit,
            remaining_cost=max(0.0, limit - spent),
        )

    def record_cost(self, user_id: str, actual_cost: float) -> None:
        with self._lock:
            window = self._hour_window()
            self._prune(window)
            self._user_costs[user_id] = (window, self._user_spent(user_id) + actual_cost)

    def _prune(self, window: int) -> None:
        """Drop per-user entries from past hourly windows (once per window)"""
        if window == self._pruned_window:
            return
        self._user_costs = {
            user: entry for user, entry in self._user_costs.items() if entry[0] == window
        }
        self._pruned_window = window

    def _roll_over(self) -> None:
        today = self._today()
        if today != self._date:
            logger.info("Daily cost ledger reset: %s total was $%.4f", self._date, self._daily_total)
            self._date = today
            self._daily_total = 0.0
            self._alert_sent = False
            self._emergency_logged = False

    def track_daily_cost(self, cost: float) -> bool:
        """
        Add cost to the daily ledger

        Returns:
            False once the emergency-stop threshold is reached (all requests
            must then take the fallback path), True otherwise
        """
        with self._lock:
            self._roll_over()
            self._daily_total += cost
            total = self._daily_total

            if total >= self.config.emergency_stop_threshold:
                if not self._emergency_logged:
                    logger.error(
                        "Emergency stop: daily LLM cost $%.4f reached $%.2f, forcing fallback",
                        total, self.config.emergency_stop_threshold,
                    )
                    self._emergency_logged = True
                return False

            if total >= self.config.alert_threshold and not self._alert_sent:
                logger.warning(
                    "Daily LLM cost alert: $%.4f of $%.2f",
                    total, self.config.max_daily_cost,
                )
                self._alert_sent = True
            return True

    def is_emergency_stopped(self) -> bool:
        with self._lock:
            self._roll_over()
            return self._daily_total >= self.config.emergency_stop_threshold

    def daily_usage(self) -> dict:
        with self._lock:
            self._roll_over()
            return {
                "date": self._date,
                "total_cost": round(self._daily_total, 6),
                "max_daily_cost": self.config.max_daily_cost,
                "remaining": max(0.0, round(self.config.max_daily_cost - self._daily_total, 6)),
                "alert_threshold": self.config.alert_threshold,
                "emergency_stop_threshold": self.config.emergency_stop_threshold,
                "alert_sent": self._alert_sent,
                "emergency_stopped": self._daily_total >= self.config.emergency_stop_threshold,
            }

    def reset_daily_usage(self) -> None:
        with self._lock:
            self._date = self._today()
            self._daily_total = 0.0
            self._alert_sent = False
            self._emergency_logged = False
