"""Adapter for curated manual genotype corrections."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from varianthub.adapters.base import SourceAdapter
from varianthub.adapters.common import RecordPayloadMixin
from varianthub.errors import MalformedInputRecord, SourceDecodeError
from varianthub.genotype import normalize_identifier
from varianthub.models import GenotypeEffect


@dataclass(frozen=True)
class Correction:
    """Curated replacement values for some genotypes of one identifier."""

    identifier: str
    genotypes: Mapping[str, GenotypeEffect] = field(default_factory=dict)
    reason: str | None = None


class CorrectionsAdapter(SourceAdapter, RecordPayloadMixin):
    """Read ``{"corrections": [{"rsid", "reason", "genotypes"}, ...]}``."""

    name = "corrections_json"

    def __init__(self, *, path: str | Path, source_name: str = "corrections") -> None:
        self.path = Path(path)
        self.source_name = source_name

    def read(self) -> Iterator[Correction | MalformedInputRecord]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SourceDecodeError(
                self.source_name,
                f"JSON parse error: {exc.msg} (line {exc.lineno}, col {exc.colno})",
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceDecodeError(
                self.source_name,
                f"{exc.__class__.__name__}: {exc}",
            ) from exc

        entries = payload.get("corrections") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise SourceDecodeError(self.source_name, "expected a 'corrections' list")

        for index, entry in enumerate(entries, start=1):
            yield self._to_correction(index, entry)

    def _to_correction(self, index: int, entry: Any) -> Correction | MalformedInputRecord:
        if not isinstance(entry, dict):
            return MalformedInputRecord(self.source_name, None, f"correction #{index} is not an object")

        rsid = entry.get("rsid")
        if not isinstance(rsid, str) or not rsid.strip():
            return MalformedInputRecord(self.source_name, None, f"correction #{index} has no rsid")

        raw_genotypes = entry.get("genotypes")
        if not isinstance(raw_genotypes, dict):
            return MalformedInputRecord(self.source_name, rsid, "missing or invalid 'genotypes'")

        valid = {key: value for key, value in raw_genotypes.items() if isinstance(value, dict)}
        genotypes = self._parse_genotypes(valid)
        if not genotypes:
            return MalformedInputRecord(self.source_name, rsid, "no valid genotypes")

        return Correction(
            identifier=normalize_identifier(rsid),
            genotypes=genotypes,
            reason=self._to_string(entry.get("reason")),
        )
