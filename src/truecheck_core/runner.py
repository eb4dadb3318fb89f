"""
truecheck-core CLI Runner

Minimal CLI around the detection pipeline.

Usage:
    python -m truecheck_core.runner analyze --file essay.txt --language en
    python -m truecheck_core.runner consistency --samples samples/consistency_pack.json --iterations 5
    python -m truecheck_core.runner health
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from truecheck_core.detector_config import load_config
from truecheck_core.domain.errors import ConfigurationError, ValidationError
from truecheck_core.logging_config import configure_logging
from truecheck_core.sample_loader import load_sample_pack
from truecheck_core.use_cases.analysis import AnalysisOrchestrator, create_orchestrator
from truecheck_core.use_cases.consistency import (
    run_consistency_suite,
    runs_to_dataframe,
    summarize_runs,
    suite_totals,
)
from truecheck_core.use_cases.health_check import run_health_check

EXIT_VALIDATION_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="truecheck-core: AI-generated text detection",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyse one text and print the JSON result")
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Path to a UTF-8 text file")
    source.add_argument("--text", help="Text to analyse")
    analyze.add_argument(
        "--language",
        default="pt",
        help="Language of the text: pt or en (default: pt)",
    )
    analyze.add_argument("--user-id", default=None, help="User ID for per-user budgets")
    analyze.add_argument("--plan", default="FREE", help="Plan tier (default: FREE)")

    consistency = subparsers.add_parser("consistency", help="Run the consistency check on a sample pack")
    consistency.add_argument(
        "--samples",
        required=True,
        help="Path to the sample pack JSON file",
    )
    consistency.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Analyses per sample (default: 5)",
    )
    consistency.add_argument(
        "--output-dir",
        default="results",
        help="Directory for output CSV files (default: results)",
    )

    subparsers.add_parser("health", help="Probe the LLM provider, cache and configuration")
    return parser.parse_args(argv)


def _cmd_analyze(orchestrator: AnalysisOrchestrator, args: argparse.Namespace) -> int:
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = args.text
    result = orchestrator.analyze_text(text, args.language, user_id=args.user_id, plan=args.plan)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


def _cmd_consistency(orchestrator: AnalysisOrchestrator, args: argparse.Namespace) -> int:
    print(f"\n=== Loading sample pack: {args.samples} ===\n")
    pack = load_sample_pack(args.samples)
    print(f"  Pack: {pack.pack_name}")
    print(f"  Samples: {len(pack.samples)}")
    print(f"  Iterations: {args.iterations}")
    print()

    print("=== Health Check ===\n")
    report = run_health_check(orchestrator)
    print(f"  Status: {report.status} {report.checks}\n")

    print(f"=== Running Consistency Check ===\n")
    results = run_consistency_suite(orchestrator, pack.samples, args.iterations)

    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    raw_path = output_dir / f"consistency_raw_{run_id}.csv"
    summary_path = output_dir / f"consistency_summary_{run_id}.csv"
    runs_to_dataframe(results).to_csv(raw_path, index=False)
    summarize_runs(results).to_csv(summary_path, index=False)

    totals = suite_totals(results)
    print(f"\n=== Summary ===\n")
    print(f"  Passed: {totals['passed']}/{totals['total']}")
    print(f"  Consistency rate: {totals['consistency_rate']:.1f}%")
    print(f"  Average processing time: {totals['avg_processing_time_ms']:.0f}ms")
    print(f"  Cache hit rate: {totals['cache_hit_rate']:.1f}%")
    print(f"  Total tokens: {totals['total_tokens']}")
    print(f"  Total estimated cost: ${totals['total_cost_usd']:.4f}")
    print()
    print(f"=== Output ===\n")
    print(f"  Raw results: {raw_path}")
    print(f"  Summary:     {summary_path}")
    print()
    return 0


def _cmd_health(orchestrator: AnalysisOrchestrator, args: argparse.Namespace) -> int:
    report = run_health_check(orchestrator)
    print(json.dumps(asdict(report), ensure_ascii=False, indent=2))
    return 0 if report.status != "down" else 1


_COMMANDS = {
    "analyze": _cmd_analyze,
    "consistency": _cmd_consistency,
    "health": _cmd_health,
}


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    configure_logging(config.monitoring)
    orchestrator = create_orchestrator(config)

    try:
        return _COMMANDS[args.command](orchestrator, args)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    sys.exit(main())
