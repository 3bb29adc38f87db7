"""Merge-if-absent rules applied while later sources fold into the store."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Mapping

from varianthub.config import DEFAULT_AUDIT_THRESHOLDS, AuditThresholds
from varianthub.genotype import reverse_complement
from varianthub.models import GenotypeEffect, GwasAssociation, Repute, VariantRecord


@dataclass(frozen=True)
class StrandConflict:
    """Existing and incoming genotypes that only agree after a strand flip."""

    identifier: str
    existing_genotype: str
    existing_magnitude: float
    incoming_genotype: str
    incoming_magnitude: float


@dataclass(frozen=True)
class MergeOutcome:
    """New record value produced by one merge step."""

    record: VariantRecord
    added_genotypes: tuple[str, ...] = ()
    strand_conflicts: tuple[StrandConflict, ...] = field(default_factory=tuple)


def merge_missing_genotypes(
    existing: VariantRecord,
    incoming: Mapping[str, GenotypeEffect],
    *,
    thresholds: AuditThresholds = DEFAULT_AUDIT_THRESHOLDS,
) -> MergeOutcome:
    """Add incoming genotype entries the existing record does not cover.

    A key is covered when the record holds it directly or holds its reverse
    complement. Existing entries are never replaced. Strand-equivalent pairs
    whose magnitudes point in opposite directions are reported back.
    """

    merged = dict(existing.genotypes)
    added: list[str] = []
    conflicts: list[StrandConflict] = []

    for genotype, effect in incoming.items():
        if genotype in merged:
            continue

        flipped = reverse_complement(genotype)
        if flipped in merged:
            current = merged[flipped]
            if thresholds.is_strand_conflict(current.magnitude, effect.magnitude):
                conflicts.append(
                    StrandConflict(
                        identifier=existing.identifier,
                        existing_genotype=flipped,
                        existing_magnitude=current.magnitude,
                        incoming_genotype=genotype,
                        incoming_magnitude=effect.magnitude,
                    )
                )
            continue

        merged[genotype] = effect
        added.append(genotype)

    if not added:
        return MergeOutcome(record=existing, strand_conflicts=tuple(conflicts))

    return MergeOutcome(
        record=replace(existing, genotypes=merged),
        added_genotypes=tuple(added),
        strand_conflicts=tuple(conflicts),
    )


def append_gwas_association(record: VariantRecord, association: GwasAssociation) -> VariantRecord:
    return replace(record, gwas_associations=(*record.gwas_associations, association))


def apply_correction(
    record: VariantRecord,
    genotypes: Mapping[str, GenotypeEffect],
    reason: str | None,
) -> VariantRecord:
    """Replace named genotype entries with curated values, keeping provenance."""

    corrected = dict(record.genotypes)
    for genotype, effect in genotypes.items():
        previous = corrected.get(genotype)
        corrected[genotype] = replace(
            effect,
            fixed_from="manual_correction",
            original_magnitude=previous.magnitude if previous else None,
            original_summary=previous.summary if previous else None,
            correction_reason=reason or "No reason provided",
        )
    return replace(record, genotypes=corrected)


_BENIGN_COUNT_RE = re.compile(r"benign\s*\((\d+)\)", re.IGNORECASE)
_PATHOGENIC_COUNT_RE = re.compile(r"pathogenic\s*\((\d+)\)", re.IGNORECASE)
_UNCERTAIN_COUNT_RE = re.compile(r"uncertain\s*(?:significance)?\s*\((\d+)\)", re.IGNORECASE)
_VUS_RE = re.compile(r"\bvus\b")


def adjust_for_clinical_significance(effect: GenotypeEffect) -> GenotypeEffect:
    """Cap magnitudes of entries whose summary states a non-pathogenic call.

    Clinical-significance sources tend to attach a flat magnitude to every
    submitted genotype; the summary text carries the actual classification.
    """

    summary = effect.summary.lower()
    if not summary:
        return effect

    magnitude = effect.magnitude
    repute = effect.repute

    if "conflicting" in summary:
        ceiling, resolved = _resolve_conflicting(summary)
        magnitude = min(magnitude, ceiling)
        repute = resolved or repute
    elif "likely benign" in summary:
        magnitude = min(magnitude, 0.5)
        repute = Repute.GOOD
    elif "benign" in summary and "pathogenic" not in summary:
        magnitude = 0.0
        repute = Repute.GOOD
    elif "uncertain significance" in summary or _VUS_RE.search(summary):
        magnitude = min(magnitude, 1.0)
        repute = Repute.NEUTRAL
    elif ("not provided" in summary or "not specified" in summary) and "pathogenic" not in summary:
        magnitude = min(magnitude, 1.0)
        repute = Repute.NEUTRAL

    if magnitude == effect.magnitude and repute is effect.repute:
        return effect
    return replace(effect, magnitude=magnitude, repute=repute)


def _resolve_conflicting(summary: str) -> tuple[float, Repute | None]:
    benign = _count(_BENIGN_COUNT_RE, summary)
    pathogenic = _count(_PATHOGENIC_COUNT_RE, summary)
    uncertain = _count(_UNCERTAIN_COUNT_RE, summary)

    if benign + pathogenic + uncertain == 0:
        return 1.5, Repute.NEUTRAL
    if benign > pathogenic and benign >= uncertain:
        return 1.0, Repute.NEUTRAL
    if pathogenic > benign and pathogenic > uncertain:
        return 3.0, None
    return 1.5, Repute.NEUTRAL


def _count(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0
