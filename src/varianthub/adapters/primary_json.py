"""Adapter for the primary annotation store (one bulk-decoded JSON object)."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

from varianthub.adapters.base import SourceAdapter
from varianthub.adapters.common import RecordPayloadMixin
from varianthub.errors import MalformedInputRecord, SourceDecodeError
from varianthub.models import SourceKind, VariantRecord
from varianthub.quality import RecordPayloadValidator


class PrimaryJsonAdapter(SourceAdapter, RecordPayloadMixin):
    """Read ``{identifier: {chrom, pos, summary, category, genotypes}}``.

    The primary source is expected to fit comfortably in memory, so it is
    parsed with a single ``json.load`` before entries are yielded.
    """

    name = "primary_json"

    def __init__(
        self,
        *,
        path: str | Path,
        source_name: str = "primary",
        payload_validator: RecordPayloadValidator | None = None,
    ) -> None:
        self.path = Path(path)
        self.source_name = source_name
        self.payload_validator = payload_validator or RecordPayloadValidator()

    def read(self) -> Iterator[VariantRecord | MalformedInputRecord]:
        try:
            with self.path.open("r", encoding="utf-8") as stream:
                payload = json.load(stream)
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

        if not isinstance(payload, dict):
            raise SourceDecodeError(self.source_name, "top-level JSON value must be an object")

        for identifier, entry in payload.items():
            yield self._build_record(identifier, entry, SourceKind.PRIMARY)
