import itertools
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from varianthub.genotype import (  # noqa: E402
    is_rsid,
    is_strand_flipped,
    normalize,
    normalize_chromosome,
    normalize_identifier,
    reverse_complement,
    to_allele_pair,
)


def test_reverse_complement_is_self_inverse_for_allele_pairs() -> None:
    for first, second in itertools.product("ACGT", repeat=2):
        genotype = first + second
        assert reverse_complement(reverse_complement(genotype)) == genotype


def test_reverse_complement_maps_bases_in_order() -> None:
    assert reverse_complement("AG") == "TC"
    assert reverse_complement("CC") == "GG"
    assert reverse_complement("A-") == "T-"
    assert is_strand_flipped("AG", "TC")
    assert not is_strand_flipped("AG", "AG")


def test_normalize_uppercases_and_strips_separators() -> None:
    assert normalize("a/g") == "AG"
    assert normalize(" c|t ") == "CT"
    assert normalize("--") == ""
    assert normalize(None) == ""


def test_normalize_resolves_indexed_calls_against_ref_and_alts() -> None:
    assert normalize("0/1", ref="A", alts=["G"]) == "AG"
    assert normalize("1|1", ref="C", alts=["T"]) == "TT"
    assert normalize("./.", ref="C", alts=["T"]) == ""
    assert normalize("0/3", ref="C", alts=["T"]) == "C"


def test_to_allele_pair_doubles_haploid_calls() -> None:
    assert to_allele_pair("g") == "GG"
    assert to_allele_pair("AG") == "AG"
    assert to_allele_pair("") == ""


def test_normalize_chromosome_aliases() -> None:
    assert normalize_chromosome("chr1") == "1"
    assert normalize_chromosome("CHRX") == "X"
    assert normalize_chromosome("23") == "X"
    assert normalize_chromosome(24) == "Y"
    assert normalize_chromosome("chrM") == "MT"
    assert normalize_chromosome("  ") is None
    assert normalize_chromosome(None) is None


def test_identifier_helpers() -> None:
    assert normalize_identifier("  RS123 ") == "rs123"
    assert is_rsid("rs42")
    assert is_rsid("RS42")
    assert not is_rsid("rs42; rs43")
    assert not is_rsid("i4000001")
    assert not is_rsid(None)
