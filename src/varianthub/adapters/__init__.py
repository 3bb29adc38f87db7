"""Source adapters for VariantHub."""

from .base import SourceAdapter
from .corrections import Correction, CorrectionsAdapter
from .gwas_tsv import DEFAULT_GWAS_COLUMNS, GwasCatalogAdapter, GwasRow
from .primary_json import PrimaryJsonAdapter
from .secondary_json import StreamingJsonAdapter

__all__ = [
    "SourceAdapter",
    "PrimaryJsonAdapter",
    "StreamingJsonAdapter",
    "GwasCatalogAdapter",
    "GwasRow",
    "DEFAULT_GWAS_COLUMNS",
    "CorrectionsAdapter",
    "Correction",
]
