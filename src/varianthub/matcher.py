"""Resolve batches of user-observed variants to reference findings."""

from __future__ import annotations

import logging
import re
from concurrent import futures
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from varianthub.categories import resolve_category
from varianthub.config import MatcherConfig
from varianthub.errors import InvalidVariantQuery
from varianthub.genotype import normalize_chromosome, reverse_complement, to_allele_pair
from varianthub.models import Category, GwasAssociation, Repute, VariantRecord
from varianthub.store import RecordStore

logger = logging.getLogger("varianthub.match")

_RISK_ALLELE_RE = re.compile(r"-([ACGT])$", re.IGNORECASE)


@dataclass(frozen=True)
class VariantQuery:
    """One user-observed variant."""

    observed_genotype: str
    identifier: str | None = None
    chromosome: str | None = None
    position: int | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "VariantQuery":
        identifier = payload.get("identifier", payload.get("rsid"))
        chromosome = payload.get("chromosome", payload.get("chrom"))
        position = payload.get("position", payload.get("pos"))
        genotype = payload.get("observed_genotype", payload.get("genotype"))
        return cls(
            observed_genotype="" if genotype is None else str(genotype),
            identifier=str(identifier).strip() if identifier else None,
            chromosome=normalize_chromosome(chromosome),
            position=_to_position(position),
        )

    @property
    def has_coordinates(self) -> bool:
        return bool(self.chromosome) and self.position is not None


@dataclass(frozen=True)
class Finding:
    identifier: str
    observed_genotype: str
    magnitude: float
    repute: Repute
    summary: str
    chromosome: str | None
    position: int | None
    category: Category
    source: str
    match_method: str = "identifier"
    strand_flipped: bool = False
    gwas_associations: tuple[GwasAssociation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "observed_genotype": self.observed_genotype,
            "magnitude": self.magnitude,
            "repute": self.repute.value,
            "summary": self.summary,
            "chromosome": self.chromosome,
            "position": self.position,
            "category": self.category.value,
            "source": self.source,
            "match_method": self.match_method,
            "strand_flipped": self.strand_flipped,
            "gwas_associations": [a.to_payload() for a in self.gwas_associations],
        }


@dataclass
class MatchStats:
    total_variants: int = 0
    identifier_lookups: int = 0
    identifier_hits: int = 0
    coordinate_lookups: int = 0
    coordinate_hits: int = 0
    genotype_misses: int = 0
    invalid_variants: int = 0
    total_findings: int = 0

    def to_dict(self) -> dict[str, int]:
        return dict(self.__dict__)


@dataclass
class MatchResult:
    findings: list[Finding] = field(default_factory=list)
    stats: MatchStats = field(default_factory=MatchStats)
    errors: list[InvalidVariantQuery] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "findings": [finding.to_dict() for finding in self.findings],
            "stats": self.stats.to_dict(),
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class _Resolution:
    """Outcome of resolving one variant, merged into the batch afterwards."""

    index: int
    finding: Finding | None = None
    error: InvalidVariantQuery | None = None
    identifier_lookup: bool = False
    identifier_hit: bool = False
    coordinate_lookup: bool = False
    coordinate_hit: bool = False
    genotype_miss: bool = False


class Matcher:
    """Read-only matcher over a sealed ``RecordStore``.

    Each variant is resolved independently; batch ordering comes only from
    the final deduplicate-and-sort step, so resolution may run on a thread
    pool without changing the output.
    """

    def __init__(self, store: RecordStore, config: MatcherConfig | None = None) -> None:
        self.store = store
        self.config = config or MatcherConfig()

    def match(self, variants: Iterable[VariantQuery | Mapping[str, Any]]) -> MatchResult:
        items = list(variants)
        if self.config.workers > 1 and len(items) > 1:
            with futures.ThreadPoolExecutor(max_workers=self.config.workers) as ex:
                resolutions = list(ex.map(self._resolve, range(len(items)), items))
        else:
            resolutions = [self._resolve(index, item) for index, item in enumerate(items)]

        result = MatchResult()
        stats = result.stats
        stats.total_variants = len(items)
        findings: list[Finding] = []
        for resolution in resolutions:
            stats.identifier_lookups += resolution.identifier_lookup
            stats.identifier_hits += resolution.identifier_hit
            stats.coordinate_lookups += resolution.coordinate_lookup
            stats.coordinate_hits += resolution.coordinate_hit
            stats.genotype_misses += resolution.genotype_miss
            if resolution.error is not None:
                stats.invalid_variants += 1
                result.errors.append(resolution.error)
            if resolution.finding is not None:
                findings.append(resolution.finding)

        result.findings = deduplicate_findings(findings)
        stats.total_findings = len(result.findings)
        logger.info(
            "Matched %d variants: findings=%d identifier_hits=%d coordinate_hits=%d "
            "genotype_misses=%d invalid=%d",
            stats.total_variants,
            stats.total_findings,
            stats.identifier_hits,
            stats.coordinate_hits,
            stats.genotype_misses,
            stats.invalid_variants,
        )
        return result

    def _resolve(self, index: int, item: VariantQuery | Mapping[str, Any]) -> _Resolution:
        resolution = _Resolution(index=index)
        try:
            query = item if isinstance(item, VariantQuery) else VariantQuery.from_mapping(item)
        except (AttributeError, TypeError) as exc:
            resolution.error = InvalidVariantQuery(index, f"unreadable variant: {exc}")
            return resolution

        observed = to_allele_pair(query.observed_genotype)
        if not query.identifier and not query.has_coordinates:
            resolution.error = InvalidVariantQuery(index, "missing identifier and coordinates")
            return resolution
        if not observed:
            resolution.error = InvalidVariantQuery(index, "empty observed genotype")
            return resolution

        record: VariantRecord | None = None
        method = "identifier"
        if query.identifier:
            resolution.identifier_lookup = True
            record = self.store.get(query.identifier)
            resolution.identifier_hit = record is not None

        if record is None and query.has_coordinates:
            resolution.coordinate_lookup = True
            record = self.store.get_by_coordinate(query.chromosome, query.position)
            resolution.coordinate_hit = record is not None
            method = "coordinate"

        if record is None:
            return resolution

        resolution.finding = self._genotype_finding(record, query, observed, method)
        if resolution.finding is None and self.config.score_gwas_risk_alleles:
            resolution.finding = self._risk_allele_finding(record, query, observed, method)
        resolution.genotype_miss = resolution.finding is None
        return resolution

    def _genotype_finding(
        self,
        record: VariantRecord,
        query: VariantQuery,
        observed: str,
        method: str,
    ) -> Finding | None:
        flipped = False
        effect = record.genotypes.get(observed)
        if effect is None:
            effect = record.genotypes.get(reverse_complement(observed))
            flipped = effect is not None
        if effect is None:
            return None

        return Finding(
            identifier=record.identifier,
            observed_genotype=observed,
            magnitude=effect.magnitude,
            repute=effect.repute,
            summary=effect.summary,
            chromosome=record.chromosome or query.chromosome,
            position=record.position if record.position is not None else query.position,
            category=resolve_category(record.category, effect.summary),
            source=record.source.value,
            match_method=method,
            strand_flipped=flipped,
            gwas_associations=record.gwas_associations,
        )

    def _risk_allele_finding(
        self,
        record: VariantRecord,
        query: VariantQuery,
        observed: str,
        method: str,
    ) -> Finding | None:
        relevant: list[GwasAssociation] = []
        max_copies = 0
        for association in record.gwas_associations:
            copies = count_risk_alleles(observed, association.risk_allele)
            if copies:
                relevant.append(association)
                max_copies = max(max_copies, copies)

        if not relevant:
            return None

        trait = relevant[0].trait
        magnitude = (
            self.config.double_risk_allele_magnitude
            if max_copies >= 2
            else self.config.single_risk_allele_magnitude
        )
        plural = "s" if max_copies > 1 else ""
        return Finding(
            identifier=record.identifier,
            observed_genotype=observed,
            magnitude=magnitude,
            repute=Repute.BAD,
            summary=f"{trait} ({max_copies} risk allele{plural})",
            chromosome=record.chromosome or query.chromosome,
            position=record.position if record.position is not None else query.position,
            category=resolve_category(record.category, trait),
            source="gwas",
            match_method=method,
            gwas_associations=tuple(relevant),
        )


def count_risk_alleles(genotype: str, risk_allele: str | None) -> int:
    """Count copies of the base named by a ``rsNNN-A`` risk-allele label."""

    if not risk_allele:
        return 0
    match = _RISK_ALLELE_RE.search(risk_allele.strip())
    if match is None:
        return 0
    allele = match.group(1).upper()
    return sum(1 for base in genotype.upper() if base == allele)


def deduplicate_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Keep the highest-magnitude finding per identifier, sorted descending.

    Ties keep the earliest finding, and the sort is stable.
    """

    best: dict[str, Finding] = {}
    for finding in findings:
        current = best.get(finding.identifier)
        if current is None or finding.magnitude > current.magnitude:
            best[finding.identifier] = finding
    return sorted(best.values(), key=lambda finding: finding.magnitude, reverse=True)


def _to_position(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
