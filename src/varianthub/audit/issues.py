"""Issue records produced by cross-source audits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MagnitudeConflict:
    """Both sources annotate the same allele pair with distant magnitudes."""

    identifier: str
    genotype: str
    first_magnitude: float
    second_magnitude: float
    first_summary: str
    second_summary: str

    @property
    def delta(self) -> float:
        return abs(self.first_magnitude - self.second_magnitude)

    @property
    def recommendation(self) -> str:
        if self.second_magnitude < self.first_magnitude:
            return "first source may overstate risk"
        return "first source may understate risk"

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "genotype": self.genotype,
            "first_magnitude": self.first_magnitude,
            "second_magnitude": self.second_magnitude,
            "first_summary": self.first_summary,
            "second_summary": self.second_summary,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class StrandMismatch:
    """The sources only agree on a locus after complementing one side."""

    identifier: str
    first_genotype: str
    first_magnitude: float
    first_summary: str
    second_genotype: str
    second_magnitude: float
    second_summary: str

    @property
    def pair_key(self) -> tuple[str, str, str]:
        low, high = sorted((self.first_genotype, self.second_genotype))
        return (self.identifier, low, high)

    @property
    def suggested_fix(self) -> str:
        return (
            f"Swap {self.first_genotype} and {self.second_genotype} "
            "interpretations in the first source"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "first_genotype": self.first_genotype,
            "first_magnitude": self.first_magnitude,
            "first_summary": self.first_summary,
            "second_genotype": self.second_genotype,
            "second_magnitude": self.second_magnitude,
            "second_summary": self.second_summary,
            "suggested_fix": self.suggested_fix,
        }


@dataclass(frozen=True)
class UnverifiedHighMagnitude:
    """High-severity first-source entry that the second source never covers."""

    identifier: str
    magnitude: float
    reason: str = "No second-source record to validate against"

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "magnitude": self.magnitude,
            "reason": self.reason,
        }


@dataclass
class AuditReport:
    """Issues grouped by category plus remediation outcome."""

    strand_mismatches: list[StrandMismatch] = field(default_factory=list)
    magnitude_conflicts: list[MagnitudeConflict] = field(default_factory=list)
    unverified_high_magnitude: list[UnverifiedHighMagnitude] = field(default_factory=list)
    analyzed: int = 0
    fixed_count: int | None = None
    backup_path: str | None = None
    remediation_error: str | None = None

    @property
    def passed(self) -> bool:
        return not self.strand_mismatches

    @property
    def issues(self) -> list[Any]:
        return [
            *self.strand_mismatches,
            *self.magnitude_conflicts,
            *self.unverified_high_magnitude,
        ]

    def summary(self) -> dict[str, int]:
        return {
            "analyzed": self.analyzed,
            "strand_mismatches": len(self.strand_mismatches),
            "magnitude_conflicts": len(self.magnitude_conflicts),
            "unverified_high_magnitude": len(self.unverified_high_magnitude),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "summary": self.summary(),
            "issues": {
                "strand_mismatches": [issue.to_dict() for issue in self.strand_mismatches],
                "magnitude_conflicts": [issue.to_dict() for issue in self.magnitude_conflicts],
                "unverified_high_magnitude": [
                    issue.to_dict() for issue in self.unverified_high_magnitude
                ],
            },
            "fixed_count": self.fixed_count,
            "backup_path": self.backup_path,
            "remediation_error": self.remediation_error,
        }
