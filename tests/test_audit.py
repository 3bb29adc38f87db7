import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from varianthub.adapters import PrimaryJsonAdapter  # noqa: E402
from varianthub.audit import CrossSourceValidator, swap_strand_mismatches  # noqa: E402
from varianthub.config import AuditThresholds  # noqa: E402
from varianthub.errors import RemediationPreconditionFailed  # noqa: E402
from varianthub.models import GenotypeEffect, Repute, SourceKind, VariantRecord  # noqa: E402
from varianthub.publishers import AuditReportPublisher  # noqa: E402


def _record(identifier: str, source: SourceKind = SourceKind.PRIMARY, **genotypes) -> VariantRecord:
    return VariantRecord(identifier=identifier, source=source, genotypes=genotypes)


def _scenario() -> tuple[dict[str, VariantRecord], dict[str, VariantRecord]]:
    first = {"rs2": _record("rs2", AA=GenotypeEffect(magnitude=4, repute=Repute.BAD, summary="risk"))}
    second = {
        "rs2": _record(
            "rs2",
            SourceKind.SECONDARY,
            TT=GenotypeEffect(magnitude=0, repute=Repute.GOOD, summary="normal"),
        )
    }
    return first, second


def _write_dataset(path: Path, dataset: dict[str, VariantRecord]) -> None:
    path.write_text(json.dumps({key: record.to_payload() for key, record in dataset.items()}))


def test_strand_mismatch_reported_without_magnitude_conflict() -> None:
    first, second = _scenario()

    report = CrossSourceValidator().validate(first, second)

    (issue,) = report.strand_mismatches
    assert (issue.first_genotype, issue.second_genotype) == ("AA", "TT")
    assert issue.suggested_fix == "Swap AA and TT interpretations in the first source"
    assert report.magnitude_conflicts == []
    assert not report.passed
    assert report.fixed_count is None
    assert first["rs2"].genotypes["AA"].magnitude == 4


def test_magnitude_conflicts_and_recommendations() -> None:
    first = {
        "rs1": _record("rs1", AG=GenotypeEffect(magnitude=4), GG=GenotypeEffect(magnitude=1)),
        "rs3": _record("rs3", CC=GenotypeEffect(magnitude=0.5)),
    }
    second = {
        "rs1": _record("rs1", AG=GenotypeEffect(magnitude=1), GG=GenotypeEffect(magnitude=2)),
        "rs3": _record("rs3", CC=GenotypeEffect(magnitude=3)),
    }

    report = CrossSourceValidator().validate(first, second)

    conflicts = {(c.identifier, c.genotype): c for c in report.magnitude_conflicts}
    assert set(conflicts) == {("rs1", "AG"), ("rs3", "CC")}
    assert conflicts[("rs1", "AG")].recommendation == "first source may overstate risk"
    assert conflicts[("rs3", "CC")].recommendation == "first source may understate risk"
    assert report.passed


def test_unverified_high_magnitude_is_informational() -> None:
    first = {
        "rs8": _record("rs8", GG=GenotypeEffect(magnitude=4.5)),
        "rs9": _record("rs9", GG=GenotypeEffect(magnitude=3.9)),
    }

    report = CrossSourceValidator().validate(first, {})

    assert [issue.identifier for issue in report.unverified_high_magnitude] == ["rs8"]
    assert report.passed
    assert report.summary()["unverified_high_magnitude"] == 1


def test_thresholds_are_overridable() -> None:
    first = {"rs2": _record("rs2", AA=GenotypeEffect(magnitude=2))}
    second = {"rs2": _record("rs2", TT=GenotypeEffect(magnitude=0))}

    assert CrossSourceValidator().validate(first, second).passed
    strict = CrossSourceValidator(AuditThresholds(strand_high=2))
    assert not strict.validate(first, second).passed


def test_remediation_swaps_entries_and_backs_up(tmp_path: Path) -> None:
    first, second = _scenario()
    target = tmp_path / "first.json"
    _write_dataset(target, first)
    original_text = target.read_text()

    report = CrossSourceValidator().validate(first, second, fix=True, target_path=target)

    assert report.fixed_count == 1
    backup = Path(report.backup_path)
    assert backup != target
    assert backup.name.startswith("first.json.backup.")
    assert backup.read_text() == original_text

    (fixed,) = list(PrimaryJsonAdapter(path=target).read())
    aa = fixed.genotypes["AA"]
    tt = fixed.genotypes["TT"]
    assert aa.magnitude == 0 and aa.summary == "normal"
    assert aa.fixed_from == "strand_mismatch"
    assert aa.original_magnitude == 4 and aa.original_summary == "risk"
    assert aa.swapped_with == "TT"
    assert tt.magnitude == 4 and tt.summary == "risk"
    assert tt.fixed_from == "strand_swap"
    assert tt.swapped_with == "AA"

    rerun = CrossSourceValidator().validate({"rs2": fixed}, second)
    assert rerun.strand_mismatches == []
    assert rerun.passed


def test_remediation_without_mismatches_touches_nothing(tmp_path: Path) -> None:
    first = {"rs1": _record("rs1", AG=GenotypeEffect(magnitude=1))}
    target = tmp_path / "first.json"
    _write_dataset(target, first)
    before = target.read_text()

    report = CrossSourceValidator().validate(first, first, fix=True, target_path=target)

    assert report.fixed_count == 0
    assert report.remediation_error
    assert report.backup_path is None
    assert target.read_text() == before
    assert list(tmp_path.iterdir()) == [target]


def test_remediation_requires_target_path() -> None:
    first, second = _scenario()

    with pytest.raises(ValueError):
        CrossSourceValidator().validate(first, second, fix=True)


def test_swap_processes_each_pair_once() -> None:
    first = {
        "rs4": _record(
            "rs4",
            AA=GenotypeEffect(magnitude=4, summary="first-aa"),
            TT=GenotypeEffect(magnitude=0, summary="first-tt"),
        )
    }
    second = {
        "rs4": _record(
            "rs4",
            TT=GenotypeEffect(magnitude=0, summary="second-tt"),
            AA=GenotypeEffect(magnitude=5, summary="second-aa"),
        )
    }
    report = CrossSourceValidator().validate(first, second)
    assert report.strand_mismatches == []

    flipped_second = {"rs4": _record("rs4", TT=GenotypeEffect(magnitude=0, summary="second-tt"))}
    mismatches = CrossSourceValidator().validate(
        {"rs4": _record("rs4", AA=GenotypeEffect(magnitude=4, summary="first-aa"))},
        flipped_second,
    ).strand_mismatches

    corrected, fixed = swap_strand_mismatches(first, flipped_second, mismatches * 2)

    assert fixed == 1
    assert corrected["rs4"].genotypes["AA"].summary == "second-tt"
    assert corrected["rs4"].genotypes["TT"].summary == "first-aa"
    assert corrected["rs4"].genotypes["TT"].original_summary == "first-tt"
    assert first["rs4"].genotypes["AA"].summary == "first-aa"


def test_swap_requires_mismatches() -> None:
    first, second = _scenario()

    with pytest.raises(RemediationPreconditionFailed):
        swap_strand_mismatches(first, second, [])


def test_report_publisher_writes_full_report(tmp_path: Path) -> None:
    first, second = _scenario()
    report = CrossSourceValidator().validate(first, second)
    output = tmp_path / "reports" / "audit.json"

    AuditReportPublisher(output_path=output).publish(report)

    payload = json.loads(output.read_text())
    assert payload["generated_at"]
    assert payload["passed"] is False
    assert payload["summary"]["strand_mismatches"] == 1
    assert payload["issues"]["strand_mismatches"][0]["suggested_fix"].startswith("Swap AA and TT")
