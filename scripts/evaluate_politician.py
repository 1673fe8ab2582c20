"""
Evaluate one or more politicians and print their scorecards.

Subjects are read from a JSON file holding a list of objects with the
Subject fields (id, name, party, state, position, start_date, ...).

Usage:
    uv run python scripts/evaluate_politician.py subjects.json
    uv run python scripts/evaluate_politician.py subjects.json --days 730
    uv run python scripts/evaluate_politician.py subjects.json --no-cache --no-bias
    uv run python scripts/evaluate_politician.py subjects.json --json > reports.json
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from scorecard.config.settings import load_settings
from scorecard.database import close_async_client
from scorecard.models import EvaluationReport, Subject, TimeRange
from scorecard.orchestration import build_orchestrator


def print_report(report: EvaluationReport) -> None:
    score = report.score
    print("\n" + "=" * 60)
    print(f"📊 {report.politician}")
    print("=" * 60)
    print(f"Overall Score: {score.overall_score:.2f}/100")
    print(f"Confidence: {score.confidence * 100:.1f}%")
    print(f"Data Points Analyzed: {score.data_points}")
    print(f"Bias Detected: {'Yes' if score.bias_detected else 'No'}")
    print(f"Promise Fulfillment Rate: {report.promise_fulfillment_rate * 100:.1f}%")
    print(f"Sources: {', '.join(report.data_sources) or 'none'}")

    print("\n📋 Category Breakdown:")
    for category in score.category_scores:
        label = category.category.value.replace("_", " ").upper()
        print(f"  {label}: {category.score:.1f}/100 ({category.confidence * 100:.0f}% confidence)")

    if score.bias_mitigation_applied:
        print("\n⚖️  Mitigations:")
        for mitigation in score.bias_mitigation_applied:
            print(f"  - {mitigation}")


async def main(args: argparse.Namespace) -> int:
    overrides = {}
    if args.no_cache:
        overrides["CACHE_ENABLED"] = False
    if args.no_bias:
        overrides["BIAS_DETECTION_ENABLED"] = False
    settings = load_settings(**overrides)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL,
        format=settings.LOG_FORMAT,
    )

    raw_subjects = json.loads(Path(args.subjects_file).read_text())
    subjects = [Subject.model_validate(item) for item in raw_subjects]
    time_range = TimeRange.last_days(args.days)

    orchestrator = build_orchestrator(settings)
    try:
        result = await orchestrator.evaluate_batch(subjects, time_range)
    finally:
        await orchestrator.aclose()
        if settings.MONGODB_URI:
            await close_async_client()

    if args.json:
        print(json.dumps([report.model_dump(mode="json") for report in result.reports], indent=2))
    else:
        for report in result.reports:
            print_report(report)
        for failure in result.failures:
            print(f"\n❌ {failure.subject_id}: {failure.error_type}: {failure.error}")

        print("\n🔧 System Status:")
        status = orchestrator.status()
        for name, source in status["per_source_availability"].items():
            print(f"  - {name}: {source['status']}")
        print(f"  - cache: {status['cache_stats']}")

    print(f"\n✅ {result.success_count}/{result.total} evaluations succeeded", file=sys.stderr)
    return 0 if result.success_count == result.total else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Evaluate politicians across policy categories")
    parser.add_argument("subjects_file", help="JSON file with a list of subjects")
    parser.add_argument("--days", type=int, default=365, help="Evaluation window in days (default: 365)")
    parser.add_argument("--no-cache", action="store_true", help="Disable the response cache")
    parser.add_argument("--no-bias", action="store_true", help="Skip bias detection")
    parser.add_argument("--json", action="store_true", help="Print reports as JSON")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    sys.exit(asyncio.run(main(parser.parse_args())))
