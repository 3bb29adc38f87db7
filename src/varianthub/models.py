"""Canonical in-memory data models used by VariantHub."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Category(str, Enum):
    """Finding category derived from annotation text."""

    HEALTH = "health"
    TRAITS = "traits"
    ANCESTRY = "ancestry"
    PHARMACOGENOMICS = "pharmacogenomics"
    CARRIER = "carrier"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "Category | None":
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class Repute(str, Enum):
    """Qualitative direction of a genotype's effect."""

    GOOD = "good"
    BAD = "bad"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, value: Any) -> "Repute":
        if value is None:
            return cls.NEUTRAL
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NEUTRAL


class SourceKind(str, Enum):
    """Ingestion pass that created a record."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


@dataclass(frozen=True)
class GenotypeEffect:
    """Annotation attached to one allele pair of a variant.

    The optional provenance fields are only set when an entry was rewritten by
    strand remediation or by a manual correction.
    """

    magnitude: float = 0.0
    repute: Repute = Repute.NEUTRAL
    summary: str = ""
    fixed_from: str | None = None
    original_magnitude: float | None = None
    original_summary: str | None = None
    swapped_with: str | None = None
    correction_reason: str | None = None

    @property
    def rewritten(self) -> bool:
        return self.fixed_from is not None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "magnitude": self.magnitude,
            "repute": self.repute.value,
            "summary": self.summary,
        }
        if self.fixed_from is not None:
            payload["fixed_from"] = self.fixed_from
            payload["original_magnitude"] = self.original_magnitude
            payload["original_summary"] = self.original_summary
        if self.swapped_with is not None:
            payload["swapped_with"] = self.swapped_with
        if self.correction_reason is not None:
            payload["correction_reason"] = self.correction_reason
        return payload


@dataclass(frozen=True)
class GwasAssociation:
    """One reported GWAS association between a variant and a trait."""

    trait: str
    p_value: float | None = None
    odds_ratio_or_beta: float | None = None
    risk_allele: str | None = None
    pubmed_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "trait": self.trait,
            "p_value": self.p_value,
            "odds_ratio_or_beta": self.odds_ratio_or_beta,
            "risk_allele": self.risk_allele,
            "pubmed_id": self.pubmed_id,
        }


@dataclass(frozen=True)
class VariantRecord:
    """Single merged reference entry keyed by lowercase identifier.

    Records are treated as immutable values: merge steps build a new record
    with ``dataclasses.replace`` instead of mutating ``genotypes`` in place.
    """

    identifier: str
    source: SourceKind
    chromosome: str | None = None
    position: int | None = None
    summary: str = ""
    category: Category = Category.OTHER
    genotypes: Mapping[str, GenotypeEffect] = field(default_factory=dict)
    gwas_associations: tuple[GwasAssociation, ...] = ()

    @property
    def has_coordinates(self) -> bool:
        return bool(self.chromosome) and self.position is not None

    def max_magnitude(self) -> float:
        return max((effect.magnitude for effect in self.genotypes.values()), default=0.0)

    def to_payload(self) -> dict[str, Any]:
        """Serialize into the primary-source JSON entry shape."""

        payload: dict[str, Any] = {
            "chrom": self.chromosome,
            "pos": self.position,
            "summary": self.summary,
            "category": self.category.value,
            "genotypes": {
                genotype: effect.to_payload()
                for genotype, effect in self.genotypes.items()
            },
        }
        if self.gwas_associations:
            payload["gwas_associations"] = [
                association.to_payload() for association in self.gwas_associations
            ]
        return payload

    def to_rows(self) -> list[dict[str, Any]]:
        """Flatten into one row per genotype for tabular storage backends."""

        base = {
            "identifier": self.identifier,
            "source": self.source.value,
            "chromosome": self.chromosome,
            "position": self.position,
            "category": self.category.value,
            "record_summary": self.summary,
            "gwas_association_count": len(self.gwas_associations),
        }
        if not self.genotypes:
            return [
                {
                    **base,
                    "genotype": None,
                    "magnitude": None,
                    "repute": None,
                    "genotype_summary": None,
                }
            ]

        return [
            {
                **base,
                "genotype": genotype,
                "magnitude": effect.magnitude,
                "repute": effect.repute.value,
                "genotype_summary": effect.summary,
            }
            for genotype, effect in sorted(self.genotypes.items())
        ]
