import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from varianthub.config import AuditThresholds, IngestionConfig  # noqa: E402


def test_ingestion_config_resolves_relative_paths(tmp_path: Path) -> None:
    config_path = tmp_path / "conf" / "ingestion.json"
    config_path.parent.mkdir()
    config_path.write_text(
        json.dumps(
            {
                "sources": {
                    "primary": "data/snpedia.json",
                    "secondary": {
                        "path": "/abs/clinvar.json",
                        "params": {"adjust_clinical_significance": True},
                    },
                },
                "progress_every": 10,
            }
        )
    )

    config = IngestionConfig.load(config_path)

    assert config.primary.path == config_path.parent.resolve() / "data" / "snpedia.json"
    assert config.primary.required
    assert config.secondary.path == Path("/abs/clinvar.json")
    assert config.secondary.params == {"adjust_clinical_significance": True}
    assert config.tertiary is None
    assert config.progress_every == 10


def test_ingestion_config_requires_primary() -> None:
    with pytest.raises(ValueError, match="primary"):
        IngestionConfig.from_mapping({"sources": {"secondary": "x.json"}})
    with pytest.raises(ValueError):
        IngestionConfig.from_mapping({"sources": {"primary": "x.json"}, "progress_every": 0})
    with pytest.raises(ValueError):
        IngestionConfig.from_mapping({"sources": {"primary": {"params": {}}}})


def test_audit_thresholds_strand_rule() -> None:
    thresholds = AuditThresholds()

    assert thresholds.is_strand_conflict(4, 0)
    assert thresholds.is_strand_conflict(0, 3)
    assert not thresholds.is_strand_conflict(3, 0.5)
    assert not thresholds.is_strand_conflict(2.9, 0)
