"""Configuration contracts for VariantHub ingestion, matching and audits."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


@dataclass(frozen=True)
class SourceConfig:
    """Location and adapter defaults for one annotation source."""

    path: Path
    required: bool = False
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(
        cls,
        value: str | Path | Mapping[str, Any] | None,
        *,
        required: bool = False,
        base_dir: Path | None = None,
    ) -> "SourceConfig | None":
        if value is None:
            return None

        if isinstance(value, Mapping):
            raw_path = value.get("path")
            params = dict(value.get("params", {}))
        else:
            raw_path = value
            params = {}

        if raw_path is None or not str(raw_path).strip():
            raise ValueError("Source config requires a non-empty 'path'")

        path = Path(str(raw_path)).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path

        return cls(path=path, required=required, params=params)


@dataclass(frozen=True)
class IngestionConfig:
    """Sources for one store build, loaded in fixed priority order.

    Only ``primary`` is required; the remaining sources are skipped with a
    warning when unset or absent on disk.
    """

    primary: SourceConfig
    secondary: SourceConfig | None = None
    tertiary: SourceConfig | None = None
    corrections: SourceConfig | None = None
    progress_every: int = 500_000

    @classmethod
    def from_paths(
        cls,
        primary: str | Path,
        *,
        secondary: str | Path | None = None,
        tertiary: str | Path | None = None,
        corrections: str | Path | None = None,
        progress_every: int = 500_000,
    ) -> "IngestionConfig":
        return cls(
            primary=SourceConfig(path=Path(primary), required=True),
            secondary=SourceConfig.from_value(secondary),
            tertiary=SourceConfig.from_value(tertiary),
            corrections=SourceConfig.from_value(corrections),
            progress_every=progress_every,
        )

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any],
        *,
        base_dir: str | Path | None = None,
    ) -> "IngestionConfig":
        """Build from a JSON-style mapping.

        Expected shape::

            {"sources": {"primary": "snpedia.json",
                         "secondary": {"path": "clinvar.json", "params": {...}},
                         "tertiary": "gwas.tsv"},
             "progress_every": 100000}
        """

        root = Path(base_dir) if base_dir is not None else None
        sources = payload.get("sources", {})
        if not isinstance(sources, Mapping):
            raise ValueError("Ingestion config 'sources' must be an object")

        primary = SourceConfig.from_value(sources.get("primary"), required=True, base_dir=root)
        if primary is None:
            raise ValueError("Ingestion config must define sources.primary")

        progress_every = int(payload.get("progress_every", 500_000))
        if progress_every < 1:
            raise ValueError("progress_every must be >= 1")

        return cls(
            primary=primary,
            secondary=SourceConfig.from_value(sources.get("secondary"), base_dir=root),
            tertiary=SourceConfig.from_value(sources.get("tertiary"), base_dir=root),
            corrections=SourceConfig.from_value(sources.get("corrections"), base_dir=root),
            progress_every=progress_every,
        )

    @classmethod
    def load(cls, path: str | Path) -> "IngestionConfig":
        config_path = Path(path)
        payload = json.loads(config_path.read_text())
        return cls.from_mapping(payload, base_dir=config_path.resolve().parent)


@dataclass(frozen=True)
class MatcherConfig:
    """Matcher behavior switches."""

    score_gwas_risk_alleles: bool = False
    workers: int = 1
    single_risk_allele_magnitude: float = 0.5
    double_risk_allele_magnitude: float = 1.5


@dataclass(frozen=True)
class AuditThresholds:
    """Heuristic thresholds for cross-source audits.

    The values mirror the long-standing defaults of the validation tooling;
    they have no documented derivation, so they stay overridable.
    """

    magnitude_conflict_delta: float = 2.0
    magnitude_conflict_floor: float = 2.0
    strand_high: float = 3.0
    strand_low: float = 0.0
    unverified_high: float = 4.0

    def is_strand_conflict(self, first: float, second: float) -> bool:
        """Return True when one side is high-severity and the other is benign."""

        return (first >= self.strand_high and second == self.strand_low) or (
            second >= self.strand_high and first == self.strand_low
        )


DEFAULT_AUDIT_THRESHOLDS = AuditThresholds()
