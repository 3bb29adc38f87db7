#!/usr/bin/env python3
"""Detect strand mismatches and magnitude conflicts between two annotation sources.

Exits 1 when any strand mismatch is found, 0 on a clean pass and 2 when the
first source cannot be loaded.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from varianthub import AuditThresholds, VariantHubError, load_dataset, validate  # noqa: E402
from varianthub.publishers import AuditReportPublisher  # noqa: E402

PREVIEW_LIMIT = 20


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--first", required=True, help="First (curated) source JSON; rewritten by --fix")
    parser.add_argument("--second", required=True, help="Second (reference) source JSON, streamed")
    parser.add_argument("--fix", action="store_true", help="Swap strand-mismatched entries in --first")
    parser.add_argument("--output", help="Write the full JSON report to this path")
    parser.add_argument("--strand-high", type=float, default=AuditThresholds.strand_high)
    parser.add_argument("--conflict-delta", type=float, default=AuditThresholds.magnitude_conflict_delta)
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("varianthub.audit.cli")

    try:
        first = load_dataset(args.first, source_name="first")
    except VariantHubError as exc:
        logger.error("Cannot load first source: %s", exc)
        return 2

    try:
        second = load_dataset(args.second, source_name="second", streaming=True)
    except VariantHubError as exc:
        logger.warning("Second source unavailable, comparing against nothing: %s", exc)
        second = {}

    thresholds = AuditThresholds(
        strand_high=args.strand_high,
        magnitude_conflict_delta=args.conflict_delta,
    )
    report = validate(
        first,
        second,
        fix=args.fix,
        target_path=args.first if args.fix else None,
        thresholds=thresholds,
    )

    for issue in report.strand_mismatches[:PREVIEW_LIMIT]:
        logger.info("  %s: %s", issue.identifier, issue.suggested_fix)
    if len(report.strand_mismatches) > PREVIEW_LIMIT:
        logger.info("  ... and %d more", len(report.strand_mismatches) - PREVIEW_LIMIT)

    if args.output:
        AuditReportPublisher(output_path=args.output).publish(report)
        logger.info("Full report saved to %s", args.output)

    payload = {
        "passed": report.passed,
        "summary": report.summary(),
        "fixed_count": report.fixed_count,
        "backup_path": report.backup_path,
    }
    print(json.dumps(payload, indent=2))
    return 0 if report.passed else 1


if __name__ == "__main__":
    raise SystemExit(main())
