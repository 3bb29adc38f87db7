"""Base class for record store snapshot backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from varianthub.models import VariantRecord


class SnapshotStorage(ABC):
    """Persists a built store for offline inspection."""

    @abstractmethod
    def persist(self, records: Iterable[VariantRecord]) -> int:
        """Persist records in backend-specific format and return the row count."""
