"""
Analysis Orchestration

Entry point of the detector: validation, cache, health and budget gates,
LLM attempt with statistical fallback, ensemble and write-through cache.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import replace
from typing import Callable

from truecheck_core.cache.cache_factory import create_cache_store
from truecheck_core.cache.cache_manager import CacheManager
from truecheck_core.detector_config import DetectorConfig, load_config
from truecheck_core.domain.constants import SUPPORTED_LANGUAGES
from truecheck_core.domain.entities import AnalysisResult
from truecheck_core.domain.errors import (
    AnalysisError,
    BudgetExceededError,
    ProviderError,
    ValidationError,
)
from truecheck_core.domain.value_objects import LLMVerdict
from truecheck_core.governance.cost_tracker import CostTracker
from truecheck_core.governance.rate_limiter import RequestRateLimiter
from truecheck_core.infrastructure.model_clients import create_client
from truecheck_core.monitoring import AnalysisMetrics
from truecheck_core.scoring.ensemble import EnsembleScorer
from truecheck_core.scoring.llm_analyzer import LLMAnalyzer
from truecheck_core.scoring.statistical import StatisticalAnalyzer

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Runs one analysis per analyze_text call

    All shared state (cache, provider health, cost ledger, rate limits,
    metrics) lives in the injected collaborators, so several orchestrators
    never share state unless they are given the same objects.
    """

    def __init__(
        self,
        config: DetectorConfig,
        *,
        llm_analyzer: LLMAnalyzer | None = None,
        statistical_analyzer: StatisticalAnalyzer | None = None,
        ensemble_scorer: EnsembleScorer | None = None,
        cache: CacheManager | None = None,
        cost_tracker: CostTracker | None = None,
        rate_limiter: RequestRateLimiter | None = None,
        metrics: AnalysisMetrics | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """
        Args:
            config: Validated detector configuration
            llm_analyzer: Primary analyzer; None runs statistical-only
            statistical_analyzer: Fallback analyzer (built from config if omitted)
            ensemble_scorer: Score combiner (built from config if omitted)
            cache: Result cache and provider health flag
            cost_tracker: Per-user and daily spend ledger
            rate_limiter: Per-user request limiter
            metrics: Metrics collector
            clock: Monotonic clock used for processing times
        """
        self.config = config
        self.llm_analyzer = llm_analyzer
        self.statistical_analyzer = statistical_analyzer or StatisticalAnalyzer(config.statistical)
        self.ensemble_scorer = ensemble_scorer or EnsembleScorer(config.weights, config.thresholds)
        self.cache = cache or CacheManager(config.cache)
        self.cost_tracker = cost_tracker or CostTracker(config.cost)
        self.rate_limiter = rate_limiter or RequestRateLimiter(config.cost)
        self.metrics = metrics or AnalysisMetrics()
        self._clock = clock
        self._inflight: dict[str, Future] = {}
        self._inflight_lock = threading.Lock()

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)

    def validate(self, text: str, language: str, plan: str = "FREE") -> None:
        """
        Reject inputs that must not be analysed

        Raises:
            ValidationError: Non-string or out-of-bounds text, unsupported
                language or unknown plan tier
        """
        if not isinstance(text, str):
            raise ValidationError("Text must be a string")
        thresholds = self.config.thresholds
        if len(text.strip()) < thresholds.min_text_length:
            raise ValidationError(
                f"Text too short: minimum {thresholds.min_text_length} characters"
            )
        if len(text) > thresholds.max_text_length:
            raise ValidationError(
                f"Text too long: maximum {thresholds.max_text_length} characters"
            )
        if language not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language '{language}' (available: {list(SUPPORTED_LANGUAGES)})"
            )
        if plan not in self.config.cost.plan_cost_limits:
            raise ValidationError(f"Unknown plan tier: {plan}")

    def analyze_text(
        self,
        text: str,
        language: str = "pt",
        *,
        user_id: str | None = None,
        plan: str = "FREE",
    ) -> AnalysisResult:
        """
        Analyse a text

        Provider failures and exhausted budgets never fail the call: the
        statistical fallback answers instead, with using_fallback=True and LOW
        confidence.

        Args:
            text: Input text
            language: "pt" or "en"
            user_id: Caller identity for per-user budgets (None skips them)
            plan: Plan tier of the caller (FREE / PRO / ENTERPRISE)

        Returns:
            AnalysisResult

        Raises:
            ValidationError: Invalid input (no analysis attempted, no cost)
            AnalysisError: The statistical analyzer itself failed
        """
        start = self._clock()
        self.validate(text, language, plan)

        hit = self.cache.get(text, language)
        if hit is not None:
            return self._finish_cached(hit, start)

        key = self.cache.key_for(text, language)
        with self._inflight_lock:
            pending = self._inflight.get(key)
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[key] = pending

        if not owner:
            logger.debug("Joining in-flight analysis %s", key[:24])
            return self._finish_cached(pending.result(), start)

        try:
            result = self._analyze_uncached(text, language, user_id, plan, start, key)
        except Exception as e:
            pending.set_exception(e)
            raise
        else:
            pending.set_result(result)
        finally:
            with self._inflight_lock:
                self._inflight.pop(key, None)
        return result

    def _finish_cached(self, result: AnalysisResult, start: float) -> AnalysisResult:
        elapsed = self._elapsed_ms(start)
        self.metrics.record_analysis(elapsed, cached=True, using_fallback=result.using_fallback)
        return replace(result, cached=True, processing_time_ms=elapsed)

    def _analyze_uncached(
        self,
        text: str,
        language: str,
        user_id: str | None,
        plan: str,
        start: float,
        key: str,
    ) -> AnalysisResult:
        if self.config.monitoring.log_content:
            logger.debug("Analysing %s: %r", key[:24], text[:50])

        try:
            statistical = self.statistical_analyzer.analyze(text, language)
        except Exception as e:
            self.metrics.record_error()
            logger.error("Statistical analysis failed for %s: %s", key[:24], type(e).__name__)
            raise AnalysisError(f"Statistical analysis failed: {e}") from e

        verdict = self._attempt_llm(text, language, user_id, plan, key)
        result = self.ensemble_scorer.combine(
            verdict,
            statistical,
            language=language,
            processing_time_ms=self._elapsed_ms(start),
            version=self.config.cache.version,
        )
        self.cache.set(text, language, result)

        elapsed = self._elapsed_ms(start)
        slow = elapsed > self.config.monitoring.slow_request_ms
        if slow:
            logger.warning("Slow analysis %s: %dms", key[:24], elapsed)
        self.metrics.record_analysis(
            elapsed,
            using_fallback=result.using_fallback,
            cost=result.estimated_cost_usd,
            tokens=result.tokens_used,
            slow=slow,
        )
        logger.info(
            "Analysis %s: len=%d score=%d confidence=%s fallback=%s cost=$%.6f time=%dms",
            key[:24], len(text), result.ai_score, result.confidence.value,
            result.using_fallback, result.estimated_cost_usd, elapsed,
        )
        return replace(result, processing_time_ms=elapsed)

    def _attempt_llm(
        self,
        text: str,
        language: str,
        user_id: str | None,
        plan: str,
        key: str,
    ) -> LLMVerdict | None:
        """Health gate, cost gate and the LLM call; None means fall back"""
        if self.llm_analyzer is None:
            return None

        if self.cache.get_provider_health() is False:
            logger.info("Provider marked unhealthy, using fallback for %s", key[:24])
            return None

        try:
            self._check_budget(text, language, user_id, plan)
        except BudgetExceededError as e:
            logger.info("Budget gate closed for %s: %s", key[:24], e)
            return None

        try:
            verdict = self.llm_analyzer.analyze(text, language)
        except ProviderError as e:
            self.cache.set_provider_health(False)
            logger.warning("LLM analysis failed for %s, using fallback: %s", key[:24], e)
            return None

        self.cache.set_provider_health(True)
        if user_id is not None:
            self.cost_tracker.record_cost(user_id, verdict.estimated_cost_usd)
        self.cost_tracker.track_daily_cost(verdict.estimated_cost_usd)
        return verdict

    def _check_budget(self, text: str, language: str, user_id: str | None, plan: str) -> None:
        """
        Raises:
            BudgetExceededError: Daily emergency stop, request limit or
                per-user cost budget reached
        """
        if self.cost_tracker.is_emergency_stopped():
            raise BudgetExceededError("daily emergency stop threshold reached")
        if user_id is None:
            return

        estimate = self.llm_analyzer.estimate_cost(text, language)
        check = self.cost_tracker.check_cost_rate_limit(user_id, plan, estimate)
        if not check.allowed:
            raise BudgetExceededError(
                f"hourly cost budget exhausted (remaining ${check.remaining_cost:.4f})"
            )

        # Counted last; requests refused by the cost budget are not counted
        rate = self.rate_limiter.check_user_rate_limit(user_id, plan)
        if not rate.allowed:
            raise BudgetExceededError(f"hourly request limit of {rate.limit} reached")


def create_orchestrator(config: DetectorConfig | None = None) -> AnalysisOrchestrator:
    """
    Wire an orchestrator from configuration

    Args:
        config: Detector configuration (loaded from the environment if omitted)

    Returns:
        AnalysisOrchestrator with the configured cache backend and LLM client
    """
    config = config or load_config()
    cache = CacheManager(config.cache, store=create_cache_store(config.cache))
    llm_analyzer = None
    if config.llm.enabled:
        llm_analyzer = LLMAnalyzer(create_client(config.llm), config.llm)
    return AnalysisOrchestrator(config, llm_analyzer=llm_analyzer, cache=cache)

