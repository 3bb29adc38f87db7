"""DuckDB + Parquet snapshot backend for built record stores."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

import duckdb
import pandas as pd

from varianthub.models import VariantRecord
from varianthub.storage.base import SnapshotStorage

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DuckDBParquetStorage(SnapshotStorage):
    """Persist one row per record genotype in a DuckDB table and a Parquet file."""

    def __init__(
        self,
        *,
        db_path: str | Path,
        parquet_path: str | Path,
        table_name: str = "variant_genotypes",
    ) -> None:
        if not _TABLE_RE.match(table_name):
            raise ValueError(f"Unsafe table name: {table_name}")

        self.db_path = Path(db_path)
        self.parquet_path = Path(parquet_path)
        self.table_name = table_name

    def persist(self, records: Iterable[VariantRecord]) -> int:
        rows = [row for record in records for row in record.to_rows()]
        if not rows:
            return 0

        frame = pd.DataFrame(rows)
        frame["position"] = frame["position"].astype("Int64")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.parquet_path.parent.mkdir(parents=True, exist_ok=True)

        connection = duckdb.connect(str(self.db_path))
        try:
            connection.register("variant_frame", frame)
            connection.execute(
                f"CREATE OR REPLACE TABLE {self.table_name} AS SELECT * FROM variant_frame"
            )

            if self.parquet_path.exists():
                self.parquet_path.unlink()

            parquet_target = self.parquet_path.as_posix().replace("'", "''")
            connection.execute(
                f"COPY {self.table_name} TO '{parquet_target}' (FORMAT PARQUET)"
            )
        finally:
            connection.close()

        return len(frame)
