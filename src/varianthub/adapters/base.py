"""Base interface for all VariantHub source adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any


class SourceAdapter(ABC):
    """Adapter that decodes one annotation source into a lazy item sequence.

    ``read()`` returns a finite, non-restartable iterator. Entries that fail
    payload checks are yielded inline as ``MalformedInputRecord`` values so
    the consumer can count and skip them; a source that cannot be decoded at
    all raises ``SourceDecodeError`` from the iterator.
    """

    name: str

    @abstractmethod
    def read(self) -> Iterator[Any]:
        """Yield decoded items from the adapter source."""
