"""Publisher interface for VariantHub outputs."""

from __future__ import annotations

from abc import ABC, abstractmethod

from varianthub.audit.issues import AuditReport


class Publisher(ABC):
    """Publishes audit results into consumer-facing artifacts."""

    @abstractmethod
    def publish(self, report: AuditReport) -> None:
        """Publish a report into output targets."""
