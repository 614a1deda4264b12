"""Validate the tri-source store and write a dated JSON report.

Usage:
    python -m macro_pipeline.validation.run
    python -m macro_pipeline.validation.run --output reports/latest.json --no-archive
    python -m macro_pipeline.validation.run --fail-below 70

Record-count baselines come from the most recent report in REPORTS_DIR,
then from EXPECTED_COUNT_{WB,OECD,IMF}; without either the count check
reports "no baseline".
"""

import argparse
import glob
import json
import os
import sys
from datetime import date
from typing import Dict, Optional

import duckdb

from macro_pipeline import config
from macro_pipeline.database import connect
from macro_pipeline.exceptions import PipelineBaseError
from macro_pipeline.logging_config import create_logger, log_exception
from macro_pipeline.s3 import archive_report
from macro_pipeline.validation.engine import (
    ValidationEngine,
    ValidationResult,
    export_report_json,
)

logger = create_logger(__name__)

REPORT_PATTERN = "validation-report-*.json"


def default_report_path(reports_dir: str = None) -> str:
    reports_dir = reports_dir or config.REPORTS_DIR
    return os.path.join(reports_dir, f"validation-report-{date.today().isoformat()}.json")


def previous_counts(reports_dir: str = None) -> Optional[Dict[str, int]]:
    """Actual per-source counts recorded by the latest saved report."""
    reports = sorted(glob.glob(os.path.join(reports_dir or config.REPORTS_DIR, REPORT_PATTERN)))
    if not reports:
        return None
    latest = reports[-1]
    try:
        with open(latest) as f:
            report = json.load(f)
        counts = {
            check["source"]: int(check["actual"]) for check in report.get("record_counts", [])
        }
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"⚠️  Ignoring unreadable previous report {latest}: {e}")
        return None
    logger.info(f"📎 Using baselines from {os.path.basename(latest)}")
    return counts or None


def resolve_baselines(reports_dir: str = None) -> Dict[str, int]:
    counts = previous_counts(reports_dir)
    if counts:
        return counts
    if config.EXPECTED_COUNTS:
        logger.info("📎 Using configured EXPECTED_COUNT_* baselines")
        return dict(config.EXPECTED_COUNTS)
    logger.info("📎 No record-count baselines available")
    return {}


def print_summary(result: ValidationResult) -> None:
    """Print a console summary of a validation run."""
    coverage = result.coverage
    metrics = result.metrics

    print("\n" + "=" * 80)
    print("TRI-SOURCE DATA VALIDATION SUMMARY")
    print("=" * 80)
    print(f"\nOverall Quality Score: {result.quality_score:.2f}/100 ({result.status})\n")

    print("Data Overview:")
    print(f"  Total Records: {result.total_records:,}")
    print(f"  Valid Records: {result.valid_records:,}")
    print(f"  Invalid Records: {result.invalid_records:,}")
    for check in result.record_counts:
        baseline = f"{check.expected:,}" if check.expected is not None else "no baseline"
        print(f"  {check.source}: {check.actual:,} (baseline: {baseline})")

    print("\nCoverage Analysis:")
    print(f"  Total Countries: {coverage.total_countries}")
    print(f"  Tri-source Countries: {coverage.tri_source_countries}")
    print(f"  Dual-source Countries: {coverage.dual_source_countries}")
    print(f"  Single-source Countries: {coverage.single_source_countries}")
    if coverage.missing_industries:
        print(f"  Missing Industries: {', '.join(coverage.missing_industries)}")

    print("\nValidation Results:")
    print(f"  Cross-source Comparisons: {result.comparisons:,}")
    print(f"  Cross-source Inconsistencies: {len(result.inconsistencies):,}")
    print(f"  Anomalies Detected: {len(result.anomalies):,}")
    print(f"  Warnings Issued: {len(result.warnings):,}")

    if result.anomalies:
        print("\nTop Anomalies:")
        for anomaly in result.anomalies[:5]:
            print(
                f"  - {anomaly.country} {anomaly.indicator} ({anomaly.year}): "
                f"{anomaly.value} ({anomaly.issue})"
            )

    print("\nQuality Metrics:")
    print(f"  Completeness: {metrics.completeness:.1f}%")
    print(f"  Consistency: {metrics.consistency:.1f}%")
    print(f"  Coverage: {metrics.coverage:.1f}%")
    print(f"  Accuracy: {metrics.accuracy:.1f}%")

    if result.recommendations:
        print("\nRecommendations:")
        for recommendation in result.recommendations:
            print(f"  - {recommendation}")
    print("=" * 80 + "\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate World Bank, OECD and IMF indicator data"
    )
    parser.add_argument(
        "--output",
        help="Report path (default: REPORTS_DIR/validation-report-YYYY-MM-DD.json)",
    )
    parser.add_argument(
        "--no-archive",
        action="store_true",
        help="Skip S3 archival even when ENABLE_S3_UPLOAD is set",
    )
    parser.add_argument(
        "--fail-below",
        type=float,
        help="Exit with status 1 when the quality score is below this value",
    )
    args = parser.parse_args(argv)

    try:
        config.validate_config()
        baselines = resolve_baselines()
        con = connect()
        try:
            result = ValidationEngine(con, expected_counts=baselines).run()
        finally:
            con.close()

        output = export_report_json(result, args.output or default_report_path())
        if config.ENABLE_S3_UPLOAD and not args.no_archive:
            archive_report(output)
    except (PipelineBaseError, duckdb.Error, OSError) as e:
        log_exception(logger, e, {"operation": "validation"})
        logger.error("❌ Validation failed")
        return 1

    print_summary(result)

    if args.fail_below is not None and result.quality_score < args.fail_below:
        logger.error(
            f"❌ Quality score {result.quality_score:.2f} is below the "
            f"required {args.fail_below:.2f}"
        )
        return 1
    logger.info("✅ Validation complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
