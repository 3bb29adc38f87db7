"""Core VariantHub reference engine primitives.

This package provides the building blocks for merging genomic variant
annotation sources into one store, matching user variants against it and
auditing disagreements between sources.
"""

from .audit import AuditReport, CrossSourceValidator
from .categories import CategoryClassifier, classify
from .config import (
    DEFAULT_AUDIT_THRESHOLDS,
    AuditThresholds,
    IngestionConfig,
    MatcherConfig,
    SourceConfig,
)
from .engine import (
    build_store,
    load_dataset,
    lookup_by_coordinate,
    lookup_by_identifier,
    match,
    validate,
)
from .errors import (
    InvalidVariantQuery,
    MalformedInputRecord,
    MissingRequiredSource,
    RemediationPreconditionFailed,
    SourceDecodeError,
    VariantHubError,
)
from .matcher import Finding, Matcher, MatchResult, MatchStats, VariantQuery
from .models import Category, GenotypeEffect, GwasAssociation, Repute, SourceKind, VariantRecord
from .pipeline import BuildResult, IngestionPipeline, IngestionReport, SourcePassReport
from .registry import AdapterPluginSpec, AdapterRegistry, build_default_adapter_registry
from .store import RecordStore

__all__ = [
    "AdapterPluginSpec",
    "AdapterRegistry",
    "AuditReport",
    "AuditThresholds",
    "BuildResult",
    "Category",
    "CategoryClassifier",
    "CrossSourceValidator",
    "DEFAULT_AUDIT_THRESHOLDS",
    "Finding",
    "GenotypeEffect",
    "GwasAssociation",
    "IngestionConfig",
    "IngestionPipeline",
    "IngestionReport",
    "InvalidVariantQuery",
    "MalformedInputRecord",
    "MatchResult",
    "MatchStats",
    "Matcher",
    "MatcherConfig",
    "MissingRequiredSource",
    "RecordStore",
    "RemediationPreconditionFailed",
    "Repute",
    "SourceConfig",
    "SourceDecodeError",
    "SourceKind",
    "SourcePassReport",
    "VariantHubError",
    "VariantQuery",
    "VariantRecord",
    "build_default_adapter_registry",
    "build_store",
    "classify",
    "load_dataset",
    "lookup_by_coordinate",
    "lookup_by_identifier",
    "match",
    "validate",
]
