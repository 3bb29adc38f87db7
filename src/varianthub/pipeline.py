"""Ingestion pipeline that folds every annotation source into one store."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from varianthub.adapters import Correction, GwasRow
from varianthub.categories import classify
from varianthub.config import DEFAULT_AUDIT_THRESHOLDS, AuditThresholds, IngestionConfig, SourceConfig
from varianthub.enrichment import (
    StrandConflict,
    append_gwas_association,
    apply_correction,
    merge_missing_genotypes,
)
from varianthub.errors import MalformedInputRecord, MissingRequiredSource, SourceDecodeError
from varianthub.models import SourceKind, VariantRecord
from varianthub.registry import AdapterRegistry, build_default_adapter_registry
from varianthub.store import RecordStore

logger = logging.getLogger("varianthub.ingest")


@dataclass
class SourcePassReport:
    """Counters for one source pass."""

    source: str
    path: str | None = None
    status: str = "pending"
    seen: int = 0
    added: int = 0
    merged: int = 0
    skipped: int = 0
    malformed: int = 0
    strand_conflicts: int = 0
    error: SourceDecodeError | None = None

    @property
    def completed(self) -> bool:
        return self.status == "loaded"

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "path": self.path,
            "status": self.status,
            "seen": self.seen,
            "added": self.added,
            "merged": self.merged,
            "skipped": self.skipped,
            "malformed": self.malformed,
            "strand_conflicts": self.strand_conflicts,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class IngestionReport:
    """Execution summary for a store build."""

    passes: list[SourcePassReport] = field(default_factory=list)
    total_records: int = 0
    coordinate_index_size: int = 0
    elapsed_seconds: float = 0.0
    strand_conflicts: list[StrandConflict] = field(default_factory=list)

    def pass_for(self, source: str) -> SourcePassReport:
        for report in self.passes:
            if report.source == source:
                return report
        raise KeyError(source)

    @property
    def errors(self) -> list[SourceDecodeError]:
        return [report.error for report in self.passes if report.error is not None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "sources": {report.source: report.to_dict() for report in self.passes},
            "total_records": self.total_records,
            "coordinate_index_size": self.coordinate_index_size,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "strand_conflicts": len(self.strand_conflicts),
        }


@dataclass
class BuildResult:
    """A sealed store together with the report of the run that built it."""

    store: RecordStore
    report: IngestionReport


class IngestionPipeline:
    """Load primary, secondary, tertiary and correction sources in order.

    Passes run strictly one after another because each later pass reads the
    partially built store to decide between creating and merging.
    """

    def __init__(
        self,
        *,
        config: IngestionConfig,
        adapter_registry: AdapterRegistry | None = None,
        thresholds: AuditThresholds = DEFAULT_AUDIT_THRESHOLDS,
    ) -> None:
        self.config = config
        self.adapter_registry = adapter_registry or build_default_adapter_registry()
        self.thresholds = thresholds

    def run(self) -> BuildResult:
        started = time.perf_counter()
        store = RecordStore()
        report = IngestionReport()

        primary = self._start_pass(report, "primary", self.config.primary)
        if not self.config.primary.path.exists():
            primary.status = "missing"
            raise MissingRequiredSource("primary", str(self.config.primary.path))
        self._consume(self._records(store, primary, SourceKind.PRIMARY), primary)
        logger.info("Loaded %d primary entries (%d malformed)", primary.added, primary.malformed)

        secondary = self._start_pass(report, "secondary", self.config.secondary)
        if self._available(secondary, self.config.secondary):
            self._run_optional(
                self._records(store, secondary, SourceKind.SECONDARY, report.strand_conflicts),
                secondary,
            )
            logger.info(
                "Secondary: seen=%d added=%d merged=%d strand_conflicts=%d",
                secondary.seen,
                secondary.added,
                secondary.merged,
                secondary.strand_conflicts,
            )
            if secondary.strand_conflicts:
                logger.warning(
                    "Detected %d potential strand mismatches while merging secondary source",
                    secondary.strand_conflicts,
                )

        tertiary = self._start_pass(report, "tertiary", self.config.tertiary)
        if self._available(tertiary, self.config.tertiary):
            self._run_optional(self._associations(store, tertiary), tertiary)
            logger.info(
                "Tertiary: seen=%d added=%d overlaid=%d",
                tertiary.seen,
                tertiary.added,
                tertiary.merged,
            )

        corrections = self._start_pass(report, "corrections", self.config.corrections)
        if self._available(corrections, self.config.corrections):
            self._run_optional(self._corrections(store, corrections), corrections)
            logger.info(
                "Corrections: applied=%d skipped=%d invalid=%d",
                corrections.merged,
                corrections.skipped,
                corrections.malformed,
            )

        store.seal()
        report.total_records = len(store)
        report.coordinate_index_size = store.coordinate_count
        report.elapsed_seconds = time.perf_counter() - started
        logger.info(
            "Store built: records=%d coordinate_index=%d elapsed=%.1fs",
            report.total_records,
            report.coordinate_index_size,
            report.elapsed_seconds,
        )
        return BuildResult(store=store, report=report)

    def _start_pass(
        self,
        report: IngestionReport,
        slot: str,
        source: SourceConfig | None,
    ) -> SourcePassReport:
        pass_report = SourcePassReport(source=slot, path=str(source.path) if source else None)
        report.passes.append(pass_report)
        return pass_report

    @staticmethod
    def _available(pass_report: SourcePassReport, source: SourceConfig | None) -> bool:
        if source is None:
            pass_report.status = "skipped"
            logger.warning("No %s source configured; continuing without it", pass_report.source)
            return False
        if not source.path.exists():
            pass_report.status = "missing"
            logger.warning(
                "%s source not found at %s; continuing without it",
                pass_report.source.capitalize(),
                source.path,
            )
            return False
        return True

    def _run_optional(self, steps: Iterable[None], pass_report: SourcePassReport) -> None:
        try:
            self._consume(steps, pass_report)
        except SourceDecodeError as exc:
            pass_report.status = "failed"
            pass_report.error = exc
            logger.error(
                "Aborted %s pass after %d entries: %s",
                pass_report.source,
                pass_report.seen,
                exc,
            )

    def _consume(self, steps: Iterable[None], pass_report: SourcePassReport) -> None:
        every = self.config.progress_every
        for _ in steps:
            if pass_report.seen % every == 0:
                logger.info("  Processed %d %s entries...", pass_report.seen, pass_report.source)
        pass_report.status = "loaded"

    def _records(
        self,
        store: RecordStore,
        pass_report: SourcePassReport,
        kind: SourceKind,
        conflicts: list[StrandConflict] | None = None,
    ) -> Iterable[None]:
        source = self.config.primary if kind is SourceKind.PRIMARY else self.config.secondary
        adapter = self.adapter_registry.create_for_source(pass_report.source, source)

        for item in adapter.read():
            pass_report.seen += 1
            if isinstance(item, MalformedInputRecord):
                pass_report.malformed += 1
                logger.debug("Skipping malformed entry: %s", item)
                yield None
                continue

            existing = store.get(item.identifier)
            if existing is None:
                store.put(item)
                pass_report.added += 1
                if item.has_coordinates:
                    store.register_coordinate(item.chromosome, item.position, item.identifier)
                yield None
                continue

            outcome = merge_missing_genotypes(existing, item.genotypes, thresholds=self.thresholds)
            if outcome.added_genotypes:
                store.put(outcome.record)
                pass_report.merged += 1
            if outcome.strand_conflicts:
                pass_report.strand_conflicts += len(outcome.strand_conflicts)
                if conflicts is not None:
                    conflicts.extend(outcome.strand_conflicts)
            yield None

    def _associations(self, store: RecordStore, pass_report: SourcePassReport) -> Iterable[None]:
        adapter = self.adapter_registry.create_for_source(
            pass_report.source,
            self.config.tertiary,
        )

        for item in adapter.read():
            pass_report.seen += 1
            if not isinstance(item, GwasRow):
                pass_report.malformed += 1
                yield None
                continue

            existing = store.get(item.identifier)
            if existing is not None:
                store.put(append_gwas_association(existing, item.association))
                pass_report.merged += 1
                yield None
                continue

            store.put(
                VariantRecord(
                    identifier=item.identifier,
                    source=SourceKind.TERTIARY,
                    chromosome=item.chromosome,
                    position=item.position,
                    category=classify(item.association.trait),
                    gwas_associations=(item.association,),
                )
            )
            pass_report.added += 1
            if item.chromosome and item.position is not None:
                store.register_coordinate(item.chromosome, item.position, item.identifier)
            yield None

    def _corrections(self, store: RecordStore, pass_report: SourcePassReport) -> Iterable[None]:
        adapter = self.adapter_registry.create_for_source(
            pass_report.source,
            self.config.corrections,
        )

        for item in adapter.read():
            pass_report.seen += 1
            if not isinstance(item, Correction):
                pass_report.malformed += 1
                logger.warning("Skipping invalid correction: %s", item)
                yield None
                continue

            existing = store.get(item.identifier)
            if existing is None:
                pass_report.skipped += 1
                logger.warning("Skipping correction for unknown identifier %s", item.identifier)
                yield None
                continue

            store.put(apply_correction(existing, item.genotypes, item.reason))
            pass_report.merged += 1
            yield None
