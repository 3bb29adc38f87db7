"""Snapshot storage backends for VariantHub."""

from .base import SnapshotStorage
from .duckdb_parquet import DuckDBParquetStorage

__all__ = ["DuckDBParquetStorage", "SnapshotStorage"]
