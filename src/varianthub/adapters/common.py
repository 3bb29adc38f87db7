"""Shared payload conversions for JSON and tabular source adapters."""

from __future__ import annotations

from typing import Any, Mapping

import pandas as pd

from varianthub.categories import classify
from varianthub.errors import MalformedInputRecord
from varianthub.genotype import normalize_chromosome, normalize_identifier, to_allele_pair
from varianthub.models import (
    Category,
    GenotypeEffect,
    GwasAssociation,
    Repute,
    SourceKind,
    VariantRecord,
)
from varianthub.quality import RecordPayloadValidator


class TabularAdapterMixin:
    """Common scalar conversions for decoded source values."""

    @staticmethod
    def _to_string(value: Any) -> str | None:
        if value is None or pd.isna(value):
            return None

        cleaned = str(value).strip()
        if not cleaned or cleaned.lower() in {"nan", "none", "null", "na"}:
            return None

        return cleaned

    @staticmethod
    def _to_float(value: Any) -> float | None:
        if value is None or isinstance(value, bool) or pd.isna(value):
            return None

        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _to_int(value: Any) -> int | None:
        as_float = TabularAdapterMixin._to_float(value)
        if as_float is None:
            return None
        try:
            return int(as_float)
        except (TypeError, ValueError, OverflowError):
            return None


class RecordPayloadMixin(TabularAdapterMixin):
    """Convert primary-format JSON entries into ``VariantRecord`` values."""

    source_name: str
    payload_validator: RecordPayloadValidator

    def _build_record(
        self,
        identifier: Any,
        payload: Any,
        source: SourceKind,
    ) -> VariantRecord | MalformedInputRecord:
        if not isinstance(identifier, str) or not identifier.strip():
            return MalformedInputRecord(self.source_name, None, "empty identifier")

        issue = self.payload_validator.first_issue(payload)
        if issue is not None:
            return MalformedInputRecord(
                self.source_name,
                identifier,
                f"{issue.path}: {issue.message}",
            )

        genotypes = self._parse_genotypes(payload.get("genotypes") or {})
        if not genotypes:
            return MalformedInputRecord(
                self.source_name,
                identifier,
                "no usable genotype entries",
            )

        summary = self._to_string(payload.get("summary")) or ""
        explicit = Category.parse(payload.get("category"))

        return VariantRecord(
            identifier=normalize_identifier(identifier),
            source=source,
            chromosome=normalize_chromosome(payload.get("chrom")),
            position=self._to_int(payload.get("pos")),
            summary=summary,
            category=explicit if explicit is not None else classify(summary),
            genotypes=genotypes,
            gwas_associations=self._parse_associations(payload.get("gwas_associations")),
        )

    def _parse_genotypes(self, raw: Mapping[str, Any]) -> dict[str, GenotypeEffect]:
        genotypes: dict[str, GenotypeEffect] = {}
        for raw_key, details in raw.items():
            key = to_allele_pair(raw_key)
            if len(key) != 2 or key in genotypes:
                continue
            genotypes[key] = self._parse_effect(details)
        return genotypes

    def _parse_effect(self, details: Mapping[str, Any]) -> GenotypeEffect:
        swapped_with = self._to_string(details.get("swapped_with"))
        return GenotypeEffect(
            magnitude=self._to_float(details.get("magnitude")) or 0.0,
            repute=Repute.parse(details.get("repute")),
            summary=self._to_string(details.get("summary")) or "",
            fixed_from=self._to_string(details.get("fixed_from")),
            original_magnitude=self._to_float(details.get("original_magnitude")),
            original_summary=self._to_string(details.get("original_summary")),
            swapped_with=to_allele_pair(swapped_with) if swapped_with else None,
            correction_reason=self._to_string(details.get("correction_reason")),
        )

    def _parse_associations(self, raw: Any) -> tuple[GwasAssociation, ...]:
        if not isinstance(raw, list):
            return ()

        associations: list[GwasAssociation] = []
        for item in raw:
            if not isinstance(item, Mapping):
                continue
            associations.append(
                GwasAssociation(
                    trait=self._to_string(item.get("trait")) or "",
                    p_value=self._to_float(item.get("p_value")),
                    odds_ratio_or_beta=self._to_float(item.get("odds_ratio_or_beta")),
                    risk_allele=self._to_string(item.get("risk_allele")),
                    pubmed_id=self._to_string(item.get("pubmed_id")),
                )
            )
        return tuple(associations)
