"""Error taxonomy for the variant reference engine."""

from __future__ import annotations


class VariantHubError(Exception):
    """Base class for all VariantHub errors."""


class MissingRequiredSource(VariantHubError):
    """The required primary source could not be found."""

    def __init__(self, source: str, path: str) -> None:
        super().__init__(f"Required source '{source}' not found at {path}")
        self.source = source
        self.path = path


class SourceDecodeError(VariantHubError):
    """A source could not be decoded; aborts only that source's pass."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"type": "decode", "source": self.source, "message": self.message}


class MalformedInputRecord(VariantHubError):
    """A single source entry failed payload checks and was skipped."""

    def __init__(self, source: str, identifier: str | None, message: str) -> None:
        super().__init__(f"{source}:{identifier or '?'}: {message}")
        self.source = source
        self.identifier = identifier
        self.message = message


class InvalidVariantQuery(VariantHubError):
    """A user variant in a match batch cannot be resolved as given."""

    def __init__(self, index: int, message: str) -> None:
        super().__init__(f"variant #{index}: {message}")
        self.index = index
        self.message = message

    def to_dict(self) -> dict[str, object]:
        return {"index": self.index, "message": self.message}


class RemediationPreconditionFailed(VariantHubError):
    """Remediation was requested but there was nothing to remediate."""
