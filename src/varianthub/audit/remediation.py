"""Rewrite a first-source dataset so strand-mismatched allele pairs agree."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Sequence

from varianthub.audit.issues import StrandMismatch
from varianthub.errors import RemediationPreconditionFailed
from varianthub.genotype import normalize_identifier, to_allele_pair
from varianthub.models import GenotypeEffect, VariantRecord

logger = logging.getLogger("varianthub.audit")

BACKUP_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%f"


@dataclass(frozen=True)
class RemediationResult:
    records: dict[str, VariantRecord]
    fixed_count: int
    backup_path: Path | None


def swap_strand_mismatches(
    first: Mapping[str, VariantRecord],
    second: Mapping[str, VariantRecord],
    mismatches: Sequence[StrandMismatch],
) -> tuple[dict[str, VariantRecord], int]:
    """Return a corrected copy of ``first`` and the number of pairs rewritten.

    For each ``(identifier, genotype pair)`` exactly once: the first-source key
    takes the second source's entry for its complement, and the complement key
    takes the second source's entry for the original key when there is one,
    otherwise the first source's own original entry.
    """

    if not mismatches:
        raise RemediationPreconditionFailed("No strand mismatches detected; nothing to remediate")

    corrected = dict(first.items())
    processed: set[tuple[str, str, str]] = set()
    fixed = 0

    for issue in mismatches:
        if issue.pair_key in processed:
            continue
        processed.add(issue.pair_key)

        record = corrected.get(issue.identifier)
        reference = second.get(issue.identifier)
        if record is None or reference is None:
            continue

        key, complement = issue.first_genotype, issue.second_genotype
        old_key = record.genotypes.get(key)
        old_complement = record.genotypes.get(complement)
        incoming = reference.genotypes.get(complement)
        if old_key is None or incoming is None:
            continue

        genotypes = dict(record.genotypes)
        genotypes[key] = _rewrite(incoming, old_key, "strand_mismatch", complement)
        genotypes[complement] = _rewrite(
            reference.genotypes.get(key) or old_key,
            old_complement,
            "strand_swap",
            key,
        )
        corrected[issue.identifier] = replace(record, genotypes=genotypes)
        fixed += 1
        logger.info("Swapped %s <-> %s for %s", key, complement, issue.identifier)

    return corrected, fixed


def changed_entries(
    original: Mapping[str, VariantRecord],
    corrected: Mapping[str, VariantRecord],
) -> dict[str, dict[str, GenotypeEffect]]:
    """Collect the genotype entries that differ between two datasets."""

    changes: dict[str, dict[str, GenotypeEffect]] = {}
    for identifier, record in corrected.items():
        before = original.get(identifier)
        if before is record:
            continue
        previous = before.genotypes if before is not None else {}
        entries = {
            genotype: effect
            for genotype, effect in record.genotypes.items()
            if previous.get(genotype) != effect
        }
        if entries:
            changes[identifier] = entries
    return changes


def write_with_backup(
    changes: Mapping[str, Mapping[str, GenotypeEffect]],
    target_path: str | Path,
    *,
    records: Mapping[str, VariantRecord] | None = None,
) -> Path | None:
    """Patch rewritten genotype entries into ``target_path`` after backing it up.

    The target is decoded as raw JSON and only the listed genotype entries
    are replaced; every other entry and field is written back as read. A
    missing target is seeded from ``records`` instead.
    """

    target = Path(target_path)
    backup: Path | None = None
    if target.exists():
        with target.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        stamp = datetime.now(timezone.utc).strftime(BACKUP_TIMESTAMP_FORMAT)
        backup = target.with_name(f"{target.name}.backup.{stamp}")
        shutil.copy2(target, backup)
        logger.info("Backup created: %s", backup)
    else:
        raw = {
            identifier: record.to_payload()
            for identifier, record in (records or {}).items()
            if identifier in changes
        }

    keys_by_identifier: dict[str, str] = {}
    for key in raw:
        keys_by_identifier.setdefault(normalize_identifier(key), key)
    for identifier, entries in changes.items():
        entry = raw.get(keys_by_identifier.get(identifier, identifier))
        if not isinstance(entry, dict) or not isinstance(entry.get("genotypes"), dict):
            logger.warning("No %s entry with genotypes in %s; not patched", identifier, target)
            continue
        genotypes = entry["genotypes"]
        raw_keys: dict[str, str] = {}
        for key in genotypes:
            raw_keys.setdefault(to_allele_pair(key), key)
        for genotype, effect in entries.items():
            genotypes[raw_keys.get(genotype, genotype)] = effect.to_payload()

    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(raw, handle)
    logger.info("Wrote %d corrected entries to %s", len(changes), target)
    return backup


def remediate(
    first: Mapping[str, VariantRecord],
    second: Mapping[str, VariantRecord],
    mismatches: Sequence[StrandMismatch],
    *,
    target_path: str | Path,
) -> RemediationResult:
    records, fixed = swap_strand_mismatches(first, second, mismatches)
    backup = write_with_backup(changed_entries(first, records), target_path, records=records)
    return RemediationResult(records=records, fixed_count=fixed, backup_path=backup)

def _rewrite(
    effect: GenotypeEffect,
    previous: GenotypeEffect | None,
    reason: str,
    swapped_with: str,
) -> GenotypeEffect:
    return replace(
        effect,
        fixed_from=reason,
        original_magnitude=previous.magnitude if previous else None,
        original_summary=previous.summary if previous else None,
        swapped_with=swapped_with,
        correction_reason=None,
    )
