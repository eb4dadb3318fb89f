"""
Health Check

Probes the LLM provider, the cache and the configuration of an orchestrator.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from truecheck_core.domain.entities import AnalysisResult, HealthReport
from truecheck_core.domain.errors import ConfigurationError
from truecheck_core.domain.value_objects import Confidence

if TYPE_CHECKING:
    from truecheck_core.use_cases.analysis import AnalysisOrchestrator

logger = logging.getLogger(__name__)

# JSON response mode requires the word "JSON" in the prompt
HEALTH_CHECK_PROMPT = 'Return only the JSON object {"status": "ok"}.'

_PROBE_TEXT = "health check probe"


def check_llm(orchestrator: AnalysisOrchestrator) -> tuple[bool, str | None]:
    """
    Send a tiny prompt to the provider

    Returns:
        (success, error_message); a disabled LLM counts as a failure
    """
    analyzer = orchestrator.llm_analyzer
    if analyzer is None:
        return False, "LLM disabled"
    try:
        response = analyzer.client.generate(HEALTH_CHECK_PROMPT)
        if not response.output:
            return False, "empty response"
        orchestrator.cache.set_provider_health(True)
        return True, None
    except Exception as e:
        orchestrator.cache.set_provider_health(False)
        return False, f"{type(e).__name__}: {str(e)[:200]}"


def check_cache(orchestrator: AnalysisOrchestrator) -> tuple[bool, str | None]:
    """Set/get round trip on the cache, then remove the probe entry"""
    cache = orchestrator.cache
    if not cache.config.enabled:
        return True, None
    probe = AnalysisResult(
        ai_score=0,
        confidence=Confidence.LOW,
        is_ai_generated=False,
        indicators=(),
        explanation="Health check",
        suspicious_parts=(),
        processing_time_ms=0,
        word_count=0,
        char_count=0,
        language="en",
        version=cache.config.version,
    )
    try:
        cache.set(_PROBE_TEXT, "en", probe)
        ok = cache.get(_PROBE_TEXT, "en") is not None
        cache.invalidate_text(_PROBE_TEXT, "en")
    except Exception as e:
        return False, f"{type(e).__name__}: {str(e)[:200]}"
    return ok, None if ok else "cache round trip returned nothing"


def check_config(orchestrator: AnalysisOrchestrator) -> tuple[bool, str | None]:
    try:
        orchestrator.config.validate()
    except ConfigurationError as e:
        return False, "; ".join(e.errors)
    return True, None


def run_health_check(orchestrator: AnalysisOrchestrator) -> HealthReport:
    """
    Execute all checks (never raises)

    Status:
        healthy:  every check passed
        degraded: the detector still answers (statistical fallback) but the
                  LLM, the cache or the daily budget is unavailable
        down:     the configuration is invalid

    Args:
        orchestrator: Orchestrator to probe

    Returns:
        HealthReport
    """
    checks: dict[str, bool] = {}
    errors: dict[str, str] = {}

    for name, check in (
        ("config", check_config),
        ("llm", check_llm),
        ("cache", check_cache),
    ):
        ok, error = check(orchestrator)
        checks[name] = ok
        if error:
            errors[name] = error

    cost = orchestrator.cost_tracker.daily_usage()
    checks["budget"] = not cost["emergency_stopped"]
    if not checks["budget"]:
        errors["budget"] = "daily emergency stop threshold reached"

    if not checks["config"]:
        status = "down"
    elif all(checks.values()):
        status = "healthy"
    else:
        status = "degraded"

    if status != "healthy":
        logger.warning("Health check %s: %s", status, errors)

    return HealthReport(
        status=status,
        checks=checks,
        metrics=orchestrator.metrics.snapshot(),
        cost=cost,
        timestamp=datetime.now(timezone.utc).isoformat(),
        errors=errors,
    )
