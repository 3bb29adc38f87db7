#!/usr/bin/env python3
"""Build the merged variant reference store from a JSON ingestion config."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from varianthub import (  # noqa: E402
    AdapterPluginSpec,
    IngestionConfig,
    VariantHubError,
    build_default_adapter_registry,
    build_store,
)
from varianthub.storage import DuckDBParquetStorage  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the VariantHub record store from JSON config")
    parser.add_argument("--config", required=True, help="Path to ingestion JSON config")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level.",
    )
    return parser.parse_args(argv)


def load_json(path: str | Path) -> dict[str, Any]:
    return json.loads(Path(path).read_text())


def build_adapter_registry(config: dict[str, Any]) -> Any:
    registry = build_default_adapter_registry()
    for plugin_raw in config.get("plugins", []):
        registry.register_plugin(
            AdapterPluginSpec(
                name=plugin_raw["name"],
                module=plugin_raw["module"],
                class_name=plugin_raw["class_name"],
            )
        )
    return registry


def build_storage(config: dict[str, Any], base_dir: Path) -> Any:
    storage_config = config.get("storage")
    if not storage_config:
        return None

    storage_type = str(storage_config.get("type", "")).strip().lower()
    params = dict(storage_config.get("params", {}))
    for key in ("db_path", "parquet_path"):
        if key in params and not Path(params[key]).is_absolute():
            params[key] = base_dir / params[key]

    if storage_type == "duckdb_parquet":
        return DuckDBParquetStorage(**params)

    raise ValueError(f"Unknown storage type: {storage_type}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("varianthub.build")

    config_path = Path(args.config).resolve()
    raw_config = load_json(config_path)
    ingestion = IngestionConfig.from_mapping(raw_config, base_dir=config_path.parent)
    storage = build_storage(raw_config, config_path.parent)

    try:
        result = build_store(ingestion, adapter_registry=build_adapter_registry(raw_config))
    except VariantHubError as exc:
        logger.error("Store build failed: %s", exc)
        return 2

    payload = result.report.to_dict()
    if storage is not None:
        payload["snapshot_rows"] = storage.persist(result.store.values())
        logger.info("Snapshot written to %s", storage.parquet_path)

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
