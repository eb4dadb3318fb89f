"""
Consistency Check

Analyses each sample repeatedly and verifies that identical input yields
identical scores, with and without the cache.
"""

from dataclasses import asdict
from datetime import datetime

import pandas as pd

from truecheck_core.domain.entities import AnalysisRun, ConsistencyResult
from truecheck_core.domain.errors import DetectorError
from truecheck_core.sample_loader import Sample
from truecheck_core.use_cases.analysis import AnalysisOrchestrator

# Scores are integers; any difference at all is an inconsistency
MAX_CONSISTENT_DIFFERENCE = 0.01


def _score_stats(scores: list[int]) -> tuple[float, float, float]:
    """(mean, population variance, max - min)"""
    mean = sum(scores) / len(scores)
    variance = sum((s - mean) ** 2 for s in scores) / len(scores)
    return mean, variance, float(max(scores) - min(scores))


def run_consistency_check(
    orchestrator: AnalysisOrchestrator,
    sample: Sample,
    iterations: int = 5,
    run_id: str | None = None,
) -> ConsistencyResult:
    """
    Analyse one sample several times.

    The sample's cache entry is invalidated half-way so both cached and
    freshly computed results are compared.

    Args:
        orchestrator: Orchestrator under test
        sample: Sample to analyse
        iterations: Number of analyses (at least 1)
        run_id: Run ID (generated if not specified)

    Returns:
        ConsistencyResult: Per-sample statistics and all runs
    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1.")
    run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")

    runs: list[AnalysisRun] = []
    errors: list[str] = []

    for i in range(iterations):
        if i == iterations // 2:
            orchestrator.cache.invalidate_text(sample.text, sample.language)
        try:
            result = orchestrator.analyze_text(sample.text, sample.language)
        except DetectorError as e:
            errors.append(f"Iteration {i + 1}: {e}")
            runs.append(AnalysisRun(
                run_id=run_id,
                sample_id=sample.sample_id,
                language=sample.language,
                iteration=i + 1,
                ai_score=None,
                confidence=None,
                cached=False,
                using_fallback=False,
                processing_time_ms=0,
                tokens_used=0,
                estimated_cost_usd=0.0,
                timestamp=datetime.now().isoformat(),
                error=str(e),
            ))
            continue
        runs.append(AnalysisRun(
            run_id=run_id,
            sample_id=sample.sample_id,
            language=sample.language,
            iteration=i + 1,
            ai_score=result.ai_score,
            confidence=result.confidence.value,
            cached=result.cached,
            using_fallback=result.using_fallback,
            processing_time_ms=result.processing_time_ms,
            tokens_used=result.tokens_used,
            estimated_cost_usd=result.estimated_cost_usd,
            timestamp=datetime.now().isoformat(),
        ))

    successful = [r for r in runs if r.error is None]
    if not successful:
        return ConsistencyResult(
            sample_id=sample.sample_id,
            description=sample.description,
            runs=runs,
            average_score=0.0,
            score_variance=0.0,
            max_difference=0.0,
            is_consistent=False,
            average_processing_time_ms=0.0,
            errors=errors,
        )

    average, variance, max_difference = _score_stats([r.ai_score for r in successful])
    if sample.expected_range and not sample.expected_range.contains(average):
        errors.append(
            f"Average score {average:.2f} outside expected range "
            f"[{sample.expected_range.min}-{sample.expected_range.max}]"
        )

    return ConsistencyResult(
        sample_id=sample.sample_id,
        description=sample.description,
        runs=runs,
        average_score=average,
        score_variance=variance,
        max_difference=max_difference,
        is_consistent=max_difference <= MAX_CONSISTENT_DIFFERENCE,
        average_processing_time_ms=sum(r.processing_time_ms for r in successful) / len(successful),
        errors=errors,
    )


def run_consistency_suite(
    orchestrator: AnalysisOrchestrator,
    samples: list[Sample],
    iterations: int = 5,
) -> list[ConsistencyResult]:
    """
    Run the consistency check for every sample (sequentially, since each
    check invalidates its own cache entry mid-way).

    Args:
        orchestrator: Orchestrator under test
        samples: Samples to check
        iterations: Analyses per sample

    Returns:
        list[ConsistencyResult]
    """
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    results = []
    for index, sample in enumerate(samples, start=1):
        print(f"[{index}/{len(samples)}] {sample.sample_id} | {sample.language} | {iterations} iterations")
        result = run_consistency_check(orchestrator, sample, iterations, run_id=run_id)
        status = "OK" if result.passed else "FAILED"
        print(
            f"  {status} | avg={result.average_score:.2f} "
            f"maxDiff={result.max_difference:.4f} time={result.average_processing_time_ms:.0f}ms"
        )
        for error in result.errors:
            print(f"    Error: {error[:100]}")
        results.append(result)
    return results


def runs_to_dataframe(results: list[ConsistencyResult]) -> pd.DataFrame:
    """One row per analysis iteration"""
    return pd.DataFrame([asdict(run) for result in results for run in result.runs])


def summarize_runs(results: list[ConsistencyResult]) -> pd.DataFrame:
    """
    One row per sample.

    Args:
        results: Consistency results

    Returns:
        pd.DataFrame: Per-sample summary (score statistics, cache and
        fallback counts, tokens, cost, pass flag)
    """
    rows = []
    for result in results:
        successful = [r for r in result.runs if r.error is None]
        rows.append({
            "sample_id": result.sample_id,
            "description": result.description,
            "iterations": len(result.runs),
            "average_score": result.average_score,
            "score_variance": result.score_variance,
            "max_difference": result.max_difference,
            "is_consistent": result.is_consistent,
            "passed": result.passed,
            "cache_hits": sum(1 for r in successful if r.cached),
            "fallbacks": sum(1 for r in successful if r.using_fallback),
            "avg_processing_time_ms": result.average_processing_time_ms,
            "total_tokens": sum(r.tokens_used for r in successful if not r.cached),
            "total_cost_usd": sum(r.estimated_cost_usd for r in successful if not r.cached),
            "errors": "; ".join(result.errors),
        })
    return pd.DataFrame(rows)


def suite_totals(results: list[ConsistencyResult]) -> dict:
    """
    Suite-level totals.

    Returns:
        dict: total, passed, failed, consistency_rate (%), average processing
        time, cache_hit_rate (%), total tokens and cost
    """
    if not results:
        return {
            "total": 0, "passed": 0, "failed": 0, "consistency_rate": 0.0,
            "avg_processing_time_ms": 0.0, "cache_hit_rate": 0.0,
            "total_tokens": 0, "total_cost_usd": 0.0,
        }

    summary = summarize_runs(results)
    passed = int(summary["passed"].sum())
    analyses = sum(1 for r in results for run in r.runs if run.error is None)
    cache_hits = int(summary["cache_hits"].sum())
    return {
        "total": len(results),
        "passed": passed,
        "failed": len(results) - passed,
        "consistency_rate": passed / len(results) * 100,
        "avg_processing_time_ms": float(summary["avg_processing_time_ms"].mean()),
        "cache_hit_rate": cache_hits / analyses * 100 if analyses else 0.0,
        "total_tokens": int(summary["total_tokens"].sum()),
        "total_cost_usd": float(summary["total_cost_usd"].sum()),
    }
