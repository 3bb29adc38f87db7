import json
import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from varianthub.adapters import SourceAdapter  # noqa: E402
from varianthub.config import IngestionConfig, SourceConfig  # noqa: E402
from varianthub.errors import MissingRequiredSource, SourceDecodeError  # noqa: E402
from varianthub.models import GenotypeEffect, SourceKind, VariantRecord  # noqa: E402
from varianthub.pipeline import IngestionPipeline  # noqa: E402
from varianthub.registry import build_default_adapter_registry  # noqa: E402

GWAS_HEADER = ["SNPS", "CHR_ID", "CHR_POS", "DISEASE/TRAIT", "P-VALUE", "STRONGEST SNP-RISK ALLELE"]


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload))
    return path


def _write_gwas(path: Path, rows: list[dict[str, str]]) -> Path:
    lines = ["\t".join(GWAS_HEADER)]
    lines.extend("\t".join(row.get(column, "") for column in GWAS_HEADER) for row in rows)
    path.write_text("\n".join(lines) + "\n")
    return path


def _primary(tmp_path: Path) -> Path:
    return _write_json(
        tmp_path / "primary.json",
        {
            "rs1": {
                "chrom": "1",
                "pos": 100,
                "summary": "Heart health",
                "genotypes": {"AG": {"magnitude": 3, "repute": "bad", "summary": "raised risk"}},
            },
            "rs2": {"chrom": "2", "pos": 200, "genotypes": {"AA": {"magnitude": 4, "summary": "risk"}}},
        },
    )


def _run(config: IngestionConfig):
    return IngestionPipeline(config=config).run()


def test_primary_only_store_supports_both_lookups(tmp_path: Path) -> None:
    result = _run(IngestionConfig.from_paths(_primary(tmp_path)))
    store = result.store

    by_id = store.get("RS1")
    assert by_id is not None
    assert by_id is store.get_by_coordinate("1", 100)
    assert by_id.genotypes["AG"].magnitude == 3
    assert store.sealed
    assert result.report.total_records == 2
    assert result.report.coordinate_index_size == 2
    assert result.report.pass_for("primary").completed


def test_secondary_adds_genotypes_without_overwriting(tmp_path: Path) -> None:
    secondary = _write_json(
        tmp_path / "secondary.json",
        {
            "rs1": {
                "chrom": "1",
                "pos": 100,
                "genotypes": {
                    "AG": {"magnitude": 0, "summary": "benign"},
                    "GG": {"magnitude": 1, "summary": "homozygous"},
                },
            },
            "rs3": {"chrom": "3", "pos": 300, "genotypes": {"CC": {"magnitude": 2}}},
        },
    )

    result = _run(IngestionConfig.from_paths(_primary(tmp_path), secondary=secondary))
    record = result.store.get("rs1")

    assert set(record.genotypes) == {"AG", "GG"}
    assert record.genotypes["AG"].summary == "raised risk"
    assert record.genotypes["AG"].magnitude == 3
    assert record.source is SourceKind.PRIMARY
    assert result.store.get("rs3").source is SourceKind.SECONDARY
    assert result.store.get_by_coordinate("3", 300).identifier == "rs3"

    report = result.report.pass_for("secondary")
    assert (report.seen, report.added, report.merged) == (2, 1, 1)


def test_secondary_strand_equivalent_keys_are_counted_not_merged(tmp_path: Path, caplog) -> None:
    secondary = _write_json(
        tmp_path / "secondary.json",
        {"rs2": {"genotypes": {"TT": {"magnitude": 0, "summary": "normal"}}}},
    )

    with caplog.at_level(logging.WARNING, logger="varianthub.ingest"):
        result = _run(IngestionConfig.from_paths(_primary(tmp_path), secondary=secondary))

    assert set(result.store.get("rs2").genotypes) == {"AA"}
    assert result.report.pass_for("secondary").strand_conflicts == 1
    assert len(result.report.strand_conflicts) == 1
    assert "strand mismatches" in caplog.text


def test_missing_primary_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(MissingRequiredSource):
        _run(IngestionConfig.from_paths(tmp_path / "absent.json"))


def test_undecodable_primary_propagates(tmp_path: Path) -> None:
    primary = tmp_path / "primary.json"
    primary.write_text("not json")

    with pytest.raises(SourceDecodeError):
        _run(IngestionConfig.from_paths(primary))


def test_missing_optional_sources_are_skipped_with_warning(tmp_path: Path, caplog) -> None:
    config = IngestionConfig.from_paths(
        _primary(tmp_path),
        secondary=tmp_path / "missing.json",
        tertiary=tmp_path / "missing.tsv",
    )

    with caplog.at_level(logging.WARNING, logger="varianthub.ingest"):
        result = _run(config)

    secondary = result.report.pass_for("secondary")
    assert secondary.status == "missing"
    assert (secondary.seen, secondary.added) == (0, 0)
    assert result.report.pass_for("tertiary").status == "missing"
    assert result.report.pass_for("corrections").status == "skipped"
    assert "not found" in caplog.text
    assert len(result.store) == 2


def test_secondary_decode_error_aborts_only_that_pass(tmp_path: Path, caplog) -> None:
    secondary = tmp_path / "secondary.json"
    secondary.write_text('{"rs7": {"genotypes": {"CC": {"magnitude": 1}}}, "rs8": {"genot')
    tertiary = _write_gwas(tmp_path / "gwas.tsv", [{"SNPS": "rs9", "DISEASE/TRAIT": "Asthma"}])

    with caplog.at_level(logging.ERROR, logger="varianthub.ingest"):
        result = _run(
            IngestionConfig.from_paths(_primary(tmp_path), secondary=secondary, tertiary=tertiary)
        )

    report = result.report.pass_for("secondary")
    assert not report.completed
    assert report.status == "failed"
    assert isinstance(report.error, SourceDecodeError)
    assert report.to_dict()["error"]["source"] == "secondary"
    assert "rs7" in result.store
    assert "rs9" in result.store
    assert result.report.errors == [report.error]
    assert "Aborted secondary pass" in caplog.text


def test_tertiary_overlays_and_creates_minimal_records(tmp_path: Path) -> None:
    tertiary = _write_gwas(
        tmp_path / "gwas.tsv",
        [
            {"SNPS": "rs1", "CHR_ID": "1", "CHR_POS": "100", "DISEASE/TRAIT": "Coronary artery disease"},
            {"SNPS": "rs1", "CHR_ID": "1", "CHR_POS": "100", "DISEASE/TRAIT": "Hypertension"},
            {"SNPS": "rs50", "CHR_ID": "1", "CHR_POS": "100", "DISEASE/TRAIT": "Body height"},
            {"SNPS": "rs51", "CHR_ID": "23", "CHR_POS": "900", "DISEASE/TRAIT": "Type 2 diabetes"},
        ],
    )

    result = _run(IngestionConfig.from_paths(_primary(tmp_path), tertiary=tertiary))
    store = result.store

    rs1 = store.get("rs1")
    assert [a.trait for a in rs1.gwas_associations] == ["Coronary artery disease", "Hypertension"]
    assert rs1.summary == "Heart health"
    assert rs1.genotypes["AG"].magnitude == 3

    rs50 = store.get("rs50")
    assert rs50.source is SourceKind.TERTIARY
    assert dict(rs50.genotypes) == {}
    assert store.get_by_coordinate("1", 100).identifier == "rs1"
    assert store.get_by_coordinate("X", 900).identifier == "rs51"

    report = result.report.pass_for("tertiary")
    assert (report.seen, report.added, report.merged) == (4, 2, 2)


def test_tertiary_without_identifier_column_records_error(tmp_path: Path) -> None:
    tertiary = tmp_path / "gwas.tsv"
    tertiary.write_text("CHR_ID\tCHR_POS\n1\t5\n")

    result = _run(IngestionConfig.from_paths(_primary(tmp_path), tertiary=tertiary))

    assert result.report.pass_for("tertiary").status == "failed"
    assert len(result.store) == 2


def test_corrections_apply_to_existing_records_only(tmp_path: Path) -> None:
    corrections = _write_json(
        tmp_path / "corrections.json",
        {
            "corrections": [
                {
                    "rsid": "rs2",
                    "reason": "strand reviewed",
                    "genotypes": {"AA": {"magnitude": 1, "summary": "minor"}},
                },
                {"rsid": "rs404", "genotypes": {"AA": {"magnitude": 1}}},
                {"rsid": "rs1"},
            ]
        },
    )

    result = _run(IngestionConfig.from_paths(_primary(tmp_path), corrections=corrections))

    entry = result.store.get("rs2").genotypes["AA"]
    assert entry.magnitude == 1
    assert entry.fixed_from == "manual_correction"
    assert entry.original_magnitude == 4
    report = result.report.pass_for("corrections")
    assert (report.merged, report.skipped, report.malformed) == (1, 1, 1)
    assert result.store.get("rs404") is None


def test_malformed_entries_are_counted_and_skipped(tmp_path: Path) -> None:
    primary = _write_json(
        tmp_path / "primary.json",
        {
            "rs1": {"genotypes": {"AG": {"magnitude": 1}}},
            "rs2": {"genotypes": {"AG": {"magnitude": "severe"}}},
            "rs3": {"summary": "no genotypes"},
        },
    )

    result = _run(IngestionConfig.from_paths(primary))

    report = result.report.pass_for("primary")
    assert (report.seen, report.added, report.malformed) == (3, 1, 2)
    assert list(result.store) == ["rs1"]


def test_progress_is_logged_every_n_entries(tmp_path: Path, caplog) -> None:
    primary = _write_json(
        tmp_path / "primary.json",
        {f"rs{i}": {"genotypes": {"AA": {"magnitude": 1}}} for i in range(5)},
    )

    with caplog.at_level(logging.INFO, logger="varianthub.ingest"):
        _run(IngestionConfig.from_paths(primary, progress_every=2))

    progress = [r.getMessage() for r in caplog.records if "Processed" in r.getMessage()]
    assert progress == ["  Processed 2 primary entries...", "  Processed 4 primary entries..."]


class _InlineSecondary(SourceAdapter):
    name = "inline_secondary"

    def __init__(self, *, path, source_name, extra_identifier="rs77"):
        self.path = path
        self.source_name = source_name
        self.extra_identifier = extra_identifier

    def read(self):
        yield VariantRecord(
            identifier=self.extra_identifier,
            source=SourceKind.SECONDARY,
            genotypes={"GG": GenotypeEffect(magnitude=1)},
        )


def test_source_params_can_select_registered_adapter(tmp_path: Path) -> None:
    registry = build_default_adapter_registry()
    registry.register(_InlineSecondary.name, _InlineSecondary)
    marker = _write_json(tmp_path / "marker.json", {})
    config = IngestionConfig(
        primary=SourceConfig(path=_primary(tmp_path), required=True),
        secondary=SourceConfig(
            path=marker,
            params={"adapter": "inline_secondary", "extra_identifier": "rs88"},
        ),
    )

    result = IngestionPipeline(config=config, adapter_registry=registry).run()

    assert result.store.get("rs88").source is SourceKind.SECONDARY
