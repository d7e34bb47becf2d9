"""Entry-point discovery for pool factories."""

from __future__ import annotations

import importlib.metadata as metadata
import inspect
import logging
from dataclasses import dataclass

from mysqlpool import __version__ as CORE_VERSION

from .registry import PoolFactoryRegistry
from .types import PluginCompatibilityError, PluginError, PoolFactoryDescriptor

LOG = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "mysqlpool.pool_factories"


def _parse_version(value: str) -> tuple[int, int, int]:
    """Parse a dotted string into a comparable tuple."""

    parts = value.split(".")
    ints: list[int] = []
    for chunk in parts[:3]:
        try:
            ints.append(int(chunk))
        except ValueError:
            ints.append(0)
    while len(ints) < 3:
        ints.append(0)
    return ints[0], ints[1], ints[2]


@dataclass(slots=True, frozen=True)
class DiscoveredFactory:
    """Metadata captured from entry point discovery."""

    datasource: str
    version: str
    min_core: str
    entry_point: metadata.EntryPoint
    descriptor: PoolFactoryDescriptor


class PoolFactoryLoader:
    """Discovers pool factories exposed via entry points and registers them."""

    def __init__(
        self,
        registry: PoolFactoryRegistry,
        *,
        core_version: str = CORE_VERSION,
        entry_point_group: str = ENTRY_POINT_GROUP,
    ) -> None:
        self._registry = registry
        self._core_version = core_version
        self._entry_point_group = entry_point_group

    def discover(self) -> list[DiscoveredFactory]:
        """Enumerate factory descriptors from entry points."""

        group = metadata.entry_points().select(group=self._entry_point_group)
        discovered: dict[str, DiscoveredFactory] = {}
        for entry_point in sorted(group, key=lambda ep: ep.name):
            descriptor = self._load_descriptor(entry_point)
            datasource = getattr(descriptor, "datasource", entry_point.name)
            if datasource in discovered:
                raise PluginError(f"More than one pool factory advertised for data source '{datasource}'")
            discovered[datasource] = DiscoveredFactory(
                datasource=datasource,
                version=getattr(descriptor, "version", "0.0.0"),
                min_core=getattr(descriptor, "min_core", "0.0.0"),
                entry_point=entry_point,
                descriptor=descriptor,
            )
        return list(discovered.values())

    def load(self) -> list[DiscoveredFactory]:
        """Register every compatible factory whose data source has none yet."""

        loaded: list[DiscoveredFactory] = []
        for factory in self.discover():
            if factory.datasource in self._registry:
                LOG.debug("Keeping explicitly registered pool factory", extra={"datasource": factory.datasource})
                continue
            try:
                self._ensure_compatible(factory)
            except PluginCompatibilityError as exc:
                LOG.warning(
                    "Skipping pool factory due to min_core mismatch",
                    extra={"datasource": factory.datasource, "min_core": factory.min_core},
                )
                LOG.debug(str(exc))
                continue
            self._registry.register(factory.descriptor, factory.datasource)
            loaded.append(factory)
        return loaded

    def _ensure_compatible(self, factory: DiscoveredFactory) -> None:
        core = _parse_version(self._core_version)
        minimum = _parse_version(factory.min_core)
        if core < minimum:
            raise PluginCompatibilityError(
                f"Pool factory for '{factory.datasource}' requires core>={factory.min_core}, "
                f"found {self._core_version}"
            )

    def _load_descriptor(self, entry_point: metadata.EntryPoint) -> PoolFactoryDescriptor:
        obj = entry_point.load()
        if inspect.isclass(obj):
            return obj()  # type: ignore[call-arg]
        return obj  # type: ignore[return-value]


def discover_pool_factories(registry: PoolFactoryRegistry | None = None) -> PoolFactoryRegistry:
    """Populate ``registry`` (or a new one) from installed entry points."""

    registry = registry if registry is not None else PoolFactoryRegistry()
    PoolFactoryLoader(registry).load()
    return registry


__all__ = ["DiscoveredFactory", "ENTRY_POINT_GROUP", "PoolFactoryLoader", "discover_pool_factories"]
