"""Pool factory extension exports."""

from .loader import DiscoveredFactory, PoolFactoryLoader, discover_pool_factories
from .registry import PoolFactoryRegistry
from .types import (
    ExtensionConstructionError,
    PluginCompatibilityError,
    PluginError,
    PoolCreationInput,
    PoolFactory,
    PoolFactoryDescriptor,
    PoolFactoryLike,
)

__all__ = [
    "DiscoveredFactory",
    "ExtensionConstructionError",
    "PluginCompatibilityError",
    "PluginError",
    "PoolCreationInput",
    "PoolFactory",
    "PoolFactoryDescriptor",
    "PoolFactoryLike",
    "PoolFactoryLoader",
    "PoolFactoryRegistry",
    "discover_pool_factories",
]
