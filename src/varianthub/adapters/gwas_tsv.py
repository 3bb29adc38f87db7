"""Adapter for GWAS Catalog style tab-separated association exports."""

from __future__ import annotations

import csv
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from varianthub.adapters.base import SourceAdapter
from varianthub.adapters.common import TabularAdapterMixin
from varianthub.errors import SourceDecodeError
from varianthub.genotype import is_rsid, normalize_chromosome, normalize_identifier
from varianthub.models import GwasAssociation

DEFAULT_GWAS_COLUMNS: dict[str, str] = {
    "identifier": "SNPS",
    "chromosome": "CHR_ID",
    "position": "CHR_POS",
    "trait": "DISEASE/TRAIT",
    "mapped_trait": "MAPPED_TRAIT",
    "p_value": "P-VALUE",
    "effect_size": "OR or BETA",
    "risk_allele": "STRONGEST SNP-RISK ALLELE",
    "pubmed_id": "PUBMEDID",
}


@dataclass(frozen=True)
class GwasRow:
    """One association row keyed by a normalized identifier."""

    identifier: str
    chromosome: str | None
    position: int | None
    association: GwasAssociation


class GwasCatalogAdapter(SourceAdapter, TabularAdapterMixin):
    """Stream association rows from a TSV whose header names the columns.

    Columns are looked up by name, so reordered exports load unchanged. Rows
    whose identifier column is not a single ``rs<digits>`` identifier are not
    considered.
    """

    name = "gwas_tsv"

    def __init__(
        self,
        *,
        path: str | Path,
        source_name: str = "tertiary",
        columns: Mapping[str, str] | None = None,
        chunksize: int = 100_000,
    ) -> None:
        self.path = Path(path)
        self.source_name = source_name
        self.columns = {**DEFAULT_GWAS_COLUMNS, **(columns or {})}
        self.chunksize = chunksize

    def read(self) -> Iterator[GwasRow]:
        wanted = set(self.columns.values())
        header = self._read_header()
        if self.columns["identifier"] not in header:
            raise SourceDecodeError(
                self.source_name,
                f"missing required column '{self.columns['identifier']}'",
            )

        try:
            frame_iter = pd.read_csv(
                self.path,
                sep="\t",
                dtype=str,
                keep_default_na=False,
                quoting=csv.QUOTE_NONE,
                usecols=lambda col: col in wanted,
                chunksize=self.chunksize,
            )
            for frame in frame_iter:
                for row in frame.to_dict(orient="records"):
                    item = self._to_row(row)
                    if item is not None:
                        yield item
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
            raise SourceDecodeError(
                self.source_name,
                f"{exc.__class__.__name__}: {exc}",
            ) from exc

    def _read_header(self) -> list[str]:
        try:
            return list(
                pd.read_csv(self.path, sep="\t", nrows=0, quoting=csv.QUOTE_NONE).columns
            )
        except pd.errors.EmptyDataError as exc:
            raise SourceDecodeError(self.source_name, "source has no header row") from exc
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
            raise SourceDecodeError(
                self.source_name,
                f"{exc.__class__.__name__}: {exc}",
            ) from exc

    def _to_row(self, row: dict[str, Any]) -> GwasRow | None:
        raw_identifier = self._to_string(row.get(self.columns["identifier"]))
        if not is_rsid(raw_identifier):
            return None

        trait = self._to_string(row.get(self.columns["trait"])) or self._to_string(
            row.get(self.columns["mapped_trait"])
        )

        return GwasRow(
            identifier=normalize_identifier(raw_identifier),
            chromosome=normalize_chromosome(self._to_string(row.get(self.columns["chromosome"]))),
            position=self._to_int(row.get(self.columns["position"])),
            association=GwasAssociation(
                trait=trait or "",
                p_value=self._to_float(row.get(self.columns["p_value"])),
                odds_ratio_or_beta=self._to_float(row.get(self.columns["effect_size"])),
                risk_allele=self._to_string(row.get(self.columns["risk_allele"])),
                pubmed_id=self._to_string(row.get(self.columns["pubmed_id"])),
            ),
        )
