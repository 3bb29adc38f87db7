"""VariantHub output publishers."""

from .audit_report import AuditReportPublisher
from .base import Publisher

__all__ = ["AuditReportPublisher", "Publisher"]
