"""Cross-source audits and strand remediation."""

from .issues import AuditReport, MagnitudeConflict, StrandMismatch, UnverifiedHighMagnitude
from .remediation import (
    RemediationResult,
    changed_entries,
    remediate,
    swap_strand_mismatches,
    write_with_backup,
)
from .validator import CrossSourceValidator

__all__ = [
    "AuditReport",
    "CrossSourceValidator",
    "MagnitudeConflict",
    "RemediationResult",
    "StrandMismatch",
    "UnverifiedHighMagnitude",
    "changed_entries",
    "remediate",
    "swap_strand_mismatches",
    "write_with_backup",
]
