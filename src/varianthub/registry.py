"""Adapter registry mapping source slots to decoder implementations."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from varianthub.adapters import (
    CorrectionsAdapter,
    GwasCatalogAdapter,
    PrimaryJsonAdapter,
    SourceAdapter,
    StreamingJsonAdapter,
)
from varianthub.config import SourceConfig

AdapterFactory = Callable[..., SourceAdapter]

# Adapter used for each ingestion slot unless its params name another one.
DEFAULT_SLOT_ADAPTERS: dict[str, str] = {
    "primary": PrimaryJsonAdapter.name,
    "secondary": StreamingJsonAdapter.name,
    "tertiary": GwasCatalogAdapter.name,
    "corrections": CorrectionsAdapter.name,
}


@dataclass(frozen=True)
class AdapterPluginSpec:
    """Adapter class imported at runtime, e.g. from an ingestion config."""

    name: str
    module: str
    class_name: str


class AdapterRegistry:
    """Case-insensitive lookup of adapter constructors by stable name."""

    def __init__(self) -> None:
        self._factories: dict[str, AdapterFactory] = {}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._factories

    def register(self, name: str, factory: AdapterFactory) -> None:
        """Register an adapter factory under a unique name."""

        key = self._key(name)
        if not key:
            raise ValueError("Adapter name cannot be empty")
        if key in self._factories:
            raise ValueError(f"Adapter already registered: {name}")
        self._factories[key] = factory

    def register_plugin(self, plugin: AdapterPluginSpec) -> None:
        """Register an adapter by importing a module/class at runtime."""

        module = importlib.import_module(plugin.module)
        adapter_cls = getattr(module, plugin.class_name)
        if not (isinstance(adapter_cls, type) and issubclass(adapter_cls, SourceAdapter)):
            raise TypeError(
                f"{plugin.module}.{plugin.class_name} is not a SourceAdapter subclass"
            )
        self.register(plugin.name, adapter_cls)

    def create(self, name: str, **kwargs: Any) -> SourceAdapter:
        """Instantiate a registered adapter."""

        key = self._key(name)
        if key not in self._factories:
            raise KeyError(
                f"Unknown adapter '{name}'. Available: {', '.join(self.available())}"
            )
        return self._factories[key](**kwargs)

    def create_for_source(self, slot: str, source: SourceConfig) -> SourceAdapter:
        """Build the adapter for an ingestion slot from its source config.

        An ``adapter`` entry in ``source.params`` overrides the slot default;
        every other param is passed to the adapter constructor.
        """

        params = dict(source.params)
        adapter_name = params.pop("adapter", None) or DEFAULT_SLOT_ADAPTERS[slot]
        params.setdefault("source_name", slot)
        return self.create(adapter_name, path=source.path, **params)

    def available(self) -> list[str]:
        """Return sorted list of known adapter names."""

        return sorted(self._factories)

    @staticmethod
    def _key(name: str) -> str:
        return name.strip().lower()


def build_default_adapter_registry() -> AdapterRegistry:
    """Create a registry preloaded with built-in VariantHub adapters."""

    registry = AdapterRegistry()
    for adapter_cls in (
        PrimaryJsonAdapter,
        StreamingJsonAdapter,
        GwasCatalogAdapter,
        CorrectionsAdapter,
    ):
        registry.register(adapter_cls.name, adapter_cls)
    return registry
