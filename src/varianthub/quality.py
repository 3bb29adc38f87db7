"""Payload checks for annotation entries read from JSON sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jsonschema import exceptions as jsex
from jsonschema.validators import validator_for

RECORD_PAYLOAD_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "chrom": {"type": ["string", "integer", "null"]},
        "pos": {"type": ["integer", "string", "null"]},
        "summary": {"type": ["string", "null"]},
        "category": {"type": ["string", "null"]},
        "genotypes": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "magnitude": {"type": ["number", "null"], "minimum": 0},
                    "repute": {"type": ["string", "null"]},
                    "summary": {"type": ["string", "null"]},
                },
            },
        },
    },
    "required": ["genotypes"],
}


@dataclass(frozen=True)
class PayloadIssue:
    """Describes why an entry payload was rejected."""

    path: str
    message: str


class RecordPayloadValidator:
    """Validate raw record payloads against a JSON Schema.

    The validator class matching the schema's declared draft is compiled once
    and reused for every entry of a multi-million-entry source.
    """

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        schema = schema or RECORD_PAYLOAD_SCHEMA
        validator_cls = validator_for(schema)
        validator_cls.check_schema(schema)
        self._validator = validator_cls(schema)

    def issues(self, payload: Any) -> list[PayloadIssue]:
        errors = sorted(self._validator.iter_errors(payload), key=lambda err: list(err.path))
        return [self._to_issue(error) for error in errors]

    def first_issue(self, payload: Any) -> PayloadIssue | None:
        error = next(iter(self._validator.iter_errors(payload)), None)
        return self._to_issue(error) if error is not None else None

    @staticmethod
    def _to_issue(error: jsex.ValidationError) -> PayloadIssue:
        return PayloadIssue(
            path="/" + "/".join(str(part) for part in error.path),
            message=error.message,
        )
