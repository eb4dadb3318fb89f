"""
Analysis metrics

In-process counters for analyses, cache hits, fallbacks, errors and spend.
"""

from __future__ import annotations

import threading


class AnalysisMetrics:
    """Thread-safe metrics collector"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.total_analyses = 0
            self.cache_hits = 0
            self.fallbacks = 0
            self.errors = 0
            self.slow_requests = 0
            self.total_cost = 0.0
            self.total_tokens = 0
            self.total_processing_ms = 0

    def record_analysis(
        self,
        processing_time_ms: int,
        *,
        cached: bool = False,
        using_fallback: bool = False,
        cost: float = 0.0,
        tokens: int = 0,
        slow: bool = False,
    ) -> None:
        with self._lock:
            self.total_analyses += 1
            self.total_processing_ms += processing_time_ms
            self.total_cost += cost
            self.total_tokens += tokens
            if cached:
                self.cache_hits += 1
            if using_fallback:
                self.fallbacks += 1
            if slow:
                self.slow_requests += 1

    def record_error(self) -> None:
        with self._lock:
            self.errors += 1

    def snapshot(self) -> dict:
        """Counters plus averages and rates (0.0 when nothing was recorded)"""
        with self._lock:
            total = self.total_analyses
            return {
                "total_analyses": total,
                "cache_hits": self.cache_hits,
                "fallbacks": self.fallbacks,
                "errors": self.errors,
                "slow_requests": self.slow_requests,
                "total_cost": round(self.total_cost, 6),
                "total_tokens": self.total_tokens,
                "avg_processing_ms": self.total_processing_ms / total if total else 0.0,
                "avg_cost": self.total_cost / total if total else 0.0,
                "cache_hit_rate": self.cache_hits / total if total else 0.0,
                "fallback_rate": self.fallbacks / total if total else 0.0,
                "error_rate": self.errors / (total + self.errors) if (total + self.errors) else 0.0,
            }
