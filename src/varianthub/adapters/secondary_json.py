"""Streaming adapter for the large secondary annotation store."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace
from pathlib import Path

import ijson

from varianthub.adapters.base import SourceAdapter
from varianthub.adapters.common import RecordPayloadMixin
from varianthub.enrichment import adjust_for_clinical_significance
from varianthub.errors import MalformedInputRecord, SourceDecodeError
from varianthub.models import SourceKind, VariantRecord
from varianthub.quality import RecordPayloadValidator


class StreamingJsonAdapter(SourceAdapter, RecordPayloadMixin):
    """Decode a top-level JSON object one key/value entry at a time.

    The file is never materialized as a single structure: ``ijson`` pulls
    one entry per iteration step, so memory tracks the consumer, not the
    file size.
    """

    name = "streaming_json"

    def __init__(
        self,
        *,
        path: str | Path,
        source_name: str = "secondary",
        source_kind: SourceKind = SourceKind.SECONDARY,
        adjust_clinical_significance: bool = False,
        payload_validator: RecordPayloadValidator | None = None,
    ) -> None:
        self.path = Path(path)
        self.source_name = source_name
        self.source_kind = source_kind
        self.adjust_clinical_significance = adjust_clinical_significance
        self.payload_validator = payload_validator or RecordPayloadValidator()

    def read(self) -> Iterator[VariantRecord | MalformedInputRecord]:
        try:
            with self.path.open("rb") as stream:
                self._expect_object(stream)
                stream.seek(0)
                for identifier, entry in ijson.kvitems(stream, "", use_float=True):
                    item = self._build_record(identifier, entry, self.source_kind)
                    if self.adjust_clinical_significance and isinstance(item, VariantRecord):
                        item = self._adjust(item)
                    yield item
        except ijson.JSONError as exc:
            raise SourceDecodeError(self.source_name, f"JSON parse error: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceDecodeError(
                self.source_name,
                f"{exc.__class__.__name__}: {exc}",
            ) from exc

    def _expect_object(self, stream) -> None:
        for _, event, _ in ijson.parse(stream):
            if event != "start_map":
                raise SourceDecodeError(
                    self.source_name,
                    "top-level JSON value must be an object",
                )
            return
        raise SourceDecodeError(self.source_name, "source is empty")

    @staticmethod
    def _adjust(record: VariantRecord) -> VariantRecord:
        return replace(
            record,
            genotypes={
                genotype: adjust_for_clinical_significance(effect)
                for genotype, effect in record.genotypes.items()
            },
        )
