"""JSON artifact publisher for cross-source audit reports."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from varianthub.audit.issues import AuditReport
from varianthub.publishers.base import Publisher


class AuditReportPublisher(Publisher):
    """Write the full audit report, including every issue, to one JSON file."""

    def __init__(self, *, output_path: str | Path, indent: int | None = 2) -> None:
        self.output_path = Path(output_path)
        self.indent = indent

    def publish(self, report: AuditReport) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with self.output_path.open("w", encoding="utf-8") as handle:
            json.dump(self.render(report), handle, indent=self.indent)
            handle.write("\n")

    @staticmethod
    def render(report: AuditReport) -> dict[str, Any]:
        payload = report.to_dict()
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            **payload,
        }
