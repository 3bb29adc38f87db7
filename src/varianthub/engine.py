"""Operations the engine exposes to its callers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from varianthub.adapters import PrimaryJsonAdapter, StreamingJsonAdapter
from varianthub.audit import AuditReport, CrossSourceValidator
from varianthub.config import DEFAULT_AUDIT_THRESHOLDS, AuditThresholds, IngestionConfig, MatcherConfig
from varianthub.errors import MalformedInputRecord, MissingRequiredSource
from varianthub.matcher import Matcher, MatchResult, VariantQuery
from varianthub.models import SourceKind, VariantRecord
from varianthub.pipeline import BuildResult, IngestionPipeline
from varianthub.registry import AdapterRegistry
from varianthub.store import RecordStore

logger = logging.getLogger("varianthub.ingest")


def build_store(
    config: IngestionConfig,
    *,
    adapter_registry: AdapterRegistry | None = None,
    thresholds: AuditThresholds = DEFAULT_AUDIT_THRESHOLDS,
) -> BuildResult:
    """Run the full ingestion pipeline.

    Raises ``MissingRequiredSource`` or ``SourceDecodeError`` only when the
    primary source is absent or unreadable; optional source failures are
    recorded on the returned report.
    """

    pipeline = IngestionPipeline(
        config=config,
        adapter_registry=adapter_registry,
        thresholds=thresholds,
    )
    return pipeline.run()


def lookup_by_identifier(store: RecordStore, identifier: str) -> VariantRecord | None:
    return store.get(identifier)


def lookup_by_coordinate(store: RecordStore, chromosome: Any, position: Any) -> VariantRecord | None:
    return store.get_by_coordinate(chromosome, position)


def match(
    store: RecordStore,
    variants: Iterable[VariantQuery | Mapping[str, Any]],
    config: MatcherConfig | None = None,
) -> MatchResult:
    return Matcher(store, config).match(variants)


def validate(
    first: Mapping[str, VariantRecord] | RecordStore,
    second: Mapping[str, VariantRecord] | RecordStore,
    fix: bool = False,
    target_path: str | Path | None = None,
    thresholds: AuditThresholds | None = None,
) -> AuditReport:
    validator = CrossSourceValidator(thresholds or DEFAULT_AUDIT_THRESHOLDS)
    return validator.validate(first, second, fix=fix, target_path=target_path)


def load_dataset(
    path: str | Path,
    *,
    source_name: str,
    streaming: bool = False,
) -> dict[str, VariantRecord]:
    """Decode one primary-format JSON file into an audit dataset.

    Malformed entries are skipped. ``streaming`` reads entries incrementally
    for sources too large for a bulk decode.
    """

    dataset_path = Path(path)
    if not dataset_path.exists():
        raise MissingRequiredSource(source_name, str(dataset_path))

    if streaming:
        adapter = StreamingJsonAdapter(
            path=dataset_path,
            source_name=source_name,
            source_kind=SourceKind.SECONDARY,
        )
    else:
        adapter = PrimaryJsonAdapter(path=dataset_path, source_name=source_name)

    dataset: dict[str, VariantRecord] = {}
    skipped = 0
    for item in adapter.read():
        if isinstance(item, MalformedInputRecord):
            skipped += 1
            continue
        dataset.setdefault(item.identifier, item)

    logger.info("Loaded %d %s entries (%d skipped)", len(dataset), source_name, skipped)
    return dataset
