#!/usr/bin/env python3
"""Match a JSON list of user variants against a freshly built store."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from varianthub import IngestionConfig, MatcherConfig, VariantHubError, build_store, match  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Match user variants against the VariantHub store")
    parser.add_argument("--config", required=True, help="Path to ingestion JSON config")
    parser.add_argument("--variants", required=True, help="JSON array of {rsid, chrom, pos, genotype}")
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--gwas-risk-alleles", action="store_true", help="Score GWAS-only risk alleles")
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
    logger = logging.getLogger("varianthub.match.cli")

    variants = json.loads(Path(args.variants).read_text())
    if not isinstance(variants, list):
        logger.error("Variants file must contain a JSON array")
        return 2

    try:
        built = build_store(IngestionConfig.load(args.config))
    except VariantHubError as exc:
        logger.error("Store build failed: %s", exc)
        return 2

    result = match(
        built.store,
        variants,
        MatcherConfig(workers=args.workers, score_gwas_risk_alleles=args.gwas_risk_alleles),
    )
    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
