"""Unified in-memory table of variant records plus a coordinate index."""

from __future__ import annotations

from collections.abc import Iterator

from varianthub.genotype import normalize_chromosome, normalize_identifier
from varianthub.models import VariantRecord


class RecordStore:
    """Records keyed by lowercase identifier, with a ``(chrom, pos)`` index.

    A store is filled by exactly one ingestion run and then sealed. Once
    sealed it is never written again, so any number of matchers may read it
    concurrently without locking.
    """

    def __init__(self) -> None:
        self._records: dict[str, VariantRecord] = {}
        self._coordinates: dict[tuple[str, int], str] = {}
        self._sealed = False

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, str):
            return False
        return normalize_identifier(identifier) in self._records

    def __getitem__(self, identifier: str) -> VariantRecord:
        return self._records[normalize_identifier(identifier)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def keys(self):
        return self._records.keys()

    def items(self):
        return self._records.items()

    def values(self):
        return self._records.values()

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def coordinate_count(self) -> int:
        return len(self._coordinates)

    def seal(self) -> None:
        self._sealed = True

    def get(self, identifier: str | None) -> VariantRecord | None:
        if not identifier:
            return None
        return self._records.get(normalize_identifier(identifier))

    def get_by_coordinate(self, chromosome: object, position: object) -> VariantRecord | None:
        owner = self.owner_of(chromosome, position)
        return self._records.get(owner) if owner else None

    def owner_of(self, chromosome: object, position: object) -> str | None:
        """Return the identifier registered for a coordinate, if any."""

        key = self._coordinate_key(chromosome, position)
        return self._coordinates.get(key) if key else None

    def put(self, record: VariantRecord) -> None:
        """Insert or replace the record stored under its identifier."""

        self._ensure_writable()
        identifier = normalize_identifier(record.identifier)
        if identifier != record.identifier:
            raise ValueError(f"Record identifier must be normalized: {record.identifier!r}")
        self._records[identifier] = record

    def register_coordinate(self, chromosome: object, position: object, identifier: str) -> bool:
        """Register ``identifier`` at a coordinate unless the slot is taken."""

        self._ensure_writable()
        key = self._coordinate_key(chromosome, position)
        if key is None or key in self._coordinates:
            return False
        self._coordinates[key] = normalize_identifier(identifier)
        return True

    def search(self, query: str, limit: int = 50) -> list[VariantRecord]:
        """Find records by identifier, record summary or genotype summary."""

        needle = query.strip().lower()
        if not needle or limit <= 0:
            return []

        results: list[VariantRecord] = []
        for identifier, record in self._records.items():
            if len(results) >= limit:
                break
            if needle in identifier or needle in record.summary.lower():
                results.append(record)
                continue
            if any(needle in effect.summary.lower() for effect in record.genotypes.values()):
                results.append(record)

        return results

    def _ensure_writable(self) -> None:
        if self._sealed:
            raise RuntimeError("RecordStore is sealed; build a new store instead")

    @staticmethod
    def _coordinate_key(chromosome: object, position: object) -> tuple[str, int] | None:
        chrom = normalize_chromosome(chromosome)
        if chrom is None or position is None:
            return None
        try:
            pos = int(position)
        except (TypeError, ValueError):
            return None
        return (chrom, pos)
