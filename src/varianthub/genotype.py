"""Genotype, chromosome and identifier normalization helpers."""

from __future__ import annotations

import re
from typing import Sequence

_COMPLEMENT = {"A": "T", "T": "A", "C": "G", "G": "C"}
_NON_BASE_RE = re.compile(r"[^ACGT]")
_INDEXED_CALL_RE = re.compile(r"^[0-9.]+([/|][0-9.]+)*$")
_RSID_RE = re.compile(r"^rs\d+$", re.IGNORECASE)

_CHROMOSOME_ALIASES = {
    "23": "X",
    "24": "Y",
    "25": "MT",
    "M": "MT",
}


def normalize(
    genotype: str | None,
    ref: str | None = None,
    alts: Sequence[str] | None = None,
) -> str:
    """Normalize an allele-pair call into an uppercase string over ``ACGT``.

    When ``ref`` is supplied and ``genotype`` is a VCF-style indexed call such
    as ``0/1`` or ``1|1``, indices are resolved against ``[ref, *alts]`` first.
    Missing (``.``) or out-of-range indices are dropped.
    """

    if genotype is None:
        return ""

    text = str(genotype).strip()
    if ref is not None and _INDEXED_CALL_RE.match(text):
        alleles = [ref, *(alts or ())]
        resolved: list[str] = []
        for token in re.split(r"[/|]", text):
            if not token.isdigit():
                continue
            index = int(token)
            if index < len(alleles) and alleles[index]:
                resolved.append(alleles[index])
        text = "".join(resolved)

    return _NON_BASE_RE.sub("", text.upper())


def reverse_complement(genotype: str) -> str:
    """Map each base A<->T and C<->G, leaving other characters untouched."""

    return "".join(_COMPLEMENT.get(base, base) for base in genotype)


def is_strand_flipped(first: str, second: str) -> bool:
    """Return True when ``second`` is the base complement of ``first``."""

    return reverse_complement(first) == second


def normalize_chromosome(value: object) -> str | None:
    """Drop any ``chr`` prefix and map numeric sex/mito chromosomes."""

    if value is None:
        return None

    cleaned = str(value).strip()
    if cleaned.lower().startswith("chr"):
        cleaned = cleaned[3:]
    cleaned = cleaned.upper()
    if not cleaned or cleaned in {"NAN", "NONE", "NULL", "NA"}:
        return None

    return _CHROMOSOME_ALIASES.get(cleaned, cleaned)


def normalize_identifier(value: str) -> str:
    return str(value).strip().lower()


def is_rsid(value: object) -> bool:
    """Return True when ``value`` follows the ``rs<digits>`` naming convention."""

    if value is None:
        return False
    return bool(_RSID_RE.match(str(value).strip()))


def to_allele_pair(genotype: str | None) -> str:
    """Normalize a call into an allele-pair key; haploid calls are doubled."""

    normalized = normalize(genotype)
    if len(normalized) == 1:
        return normalized * 2
    return normalized
