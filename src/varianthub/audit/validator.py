"""Read-only comparison of two annotation datasets keyed by identifier."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from varianthub.audit.issues import (
    AuditReport,
    MagnitudeConflict,
    StrandMismatch,
    UnverifiedHighMagnitude,
)
from varianthub.audit.remediation import remediate
from varianthub.config import DEFAULT_AUDIT_THRESHOLDS, AuditThresholds
from varianthub.errors import RemediationPreconditionFailed
from varianthub.genotype import reverse_complement
from varianthub.models import VariantRecord

logger = logging.getLogger("varianthub.audit")


class CrossSourceValidator:
    """Detect magnitude conflicts and strand mismatches between two sources.

    ``first`` and ``second`` are mappings of identifier to ``VariantRecord``;
    a sealed ``RecordStore`` qualifies. Neither is mutated. Remediation patches
    only the swapped genotype entries into the JSON file at ``target_path``.
    """

    def __init__(
        self,
        thresholds: AuditThresholds = DEFAULT_AUDIT_THRESHOLDS,
        *,
        progress_every: int = 100_000,
    ) -> None:
        self.thresholds = thresholds
        self.progress_every = progress_every

    def validate(
        self,
        first: Mapping[str, VariantRecord],
        second: Mapping[str, VariantRecord],
        *,
        fix: bool = False,
        target_path: str | Path | None = None,
    ) -> AuditReport:
        if fix and target_path is None:
            raise ValueError("target_path is required when fix=True")

        report = AuditReport()
        for identifier, record in first.items():
            report.analyzed += 1
            if report.analyzed % self.progress_every == 0:
                logger.info("  Analyzed %d variants...", report.analyzed)
            self._check_record(identifier, record, second.get(identifier), report)

        logger.info(
            "Audit complete: strand_mismatches=%d magnitude_conflicts=%d unverified_high=%d",
            len(report.strand_mismatches),
            len(report.magnitude_conflicts),
            len(report.unverified_high_magnitude),
        )
        for issue in report.strand_mismatches:
            logger.warning(
                "Strand mismatch %s: %s=%s vs %s=%s",
                issue.identifier,
                issue.first_genotype,
                issue.first_magnitude,
                issue.second_genotype,
                issue.second_magnitude,
            )

        if fix:
            self._remediate(first, second, report, Path(target_path))
        return report

    def _check_record(
        self,
        identifier: str,
        record: VariantRecord,
        other: VariantRecord | None,
        report: AuditReport,
    ) -> None:
        thresholds = self.thresholds
        if other is None:
            top = record.max_magnitude()
            if top >= thresholds.unverified_high:
                report.unverified_high_magnitude.append(
                    UnverifiedHighMagnitude(identifier=identifier, magnitude=top)
                )
            return

        if not record.genotypes or not other.genotypes:
            return

        for genotype, effect in record.genotypes.items():
            direct = other.genotypes.get(genotype)
            if direct is not None:
                delta = abs(effect.magnitude - direct.magnitude)
                if delta >= thresholds.magnitude_conflict_delta and (
                    max(effect.magnitude, direct.magnitude) >= thresholds.magnitude_conflict_floor
                ):
                    report.magnitude_conflicts.append(
                        MagnitudeConflict(
                            identifier=identifier,
                            genotype=genotype,
                            first_magnitude=effect.magnitude,
                            second_magnitude=direct.magnitude,
                            first_summary=effect.summary,
                            second_summary=direct.summary,
                        )
                    )
                continue

            flipped_key = reverse_complement(genotype)
            flipped = other.genotypes.get(flipped_key)
            if flipped is None:
                continue
            if thresholds.is_strand_conflict(effect.magnitude, flipped.magnitude):
                report.strand_mismatches.append(
                    StrandMismatch(
                        identifier=identifier,
                        first_genotype=genotype,
                        first_magnitude=effect.magnitude,
                        first_summary=effect.summary,
                        second_genotype=flipped_key,
                        second_magnitude=flipped.magnitude,
                        second_summary=flipped.summary,
                    )
                )

    def _remediate(
        self,
        first: Mapping[str, VariantRecord],
        second: Mapping[str, VariantRecord],
        report: AuditReport,
        target_path: Path,
    ) -> None:
        try:
            result = remediate(first, second, report.strand_mismatches, target_path=target_path)
        except RemediationPreconditionFailed as exc:
            report.fixed_count = 0
            report.remediation_error = str(exc)
            logger.warning("Remediation skipped: %s", exc)
            return

        report.fixed_count = result.fixed_count
        report.backup_path = str(result.backup_path) if result.backup_path else None
        logger.info("Fixed %d strand mismatches", result.fixed_count)
