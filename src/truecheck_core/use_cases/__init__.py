"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from truecheck_core.use_cases.analysis import (
    AnalysisOrchestrator,
    create_orchestrator,
)
from truecheck_core.use_cases.consistency import (
    run_consistency_check,
    run_consistency_suite,
    runs_to_dataframe,
    summarize_runs,
    suite_totals,
)
from truecheck_core.use_cases.health_check import (
    HEALTH_CHECK_PROMPT,
    check_cache,
    check_config,
    check_llm,
    run_health_check,
)

__all__ = [
    # analysis
    "AnalysisOrchestrator",
    "create_orchestrator",
    # consistency
    "run_consistency_check",
    "run_consistency_suite",
    "runs_to_dataframe",
    "summarize_runs",
    "suite_totals",
    # health_check
    "HEALTH_CHECK_PROMPT",
    "check_cache",
    "check_config",
    "check_llm",
    "run_health_check",
]
