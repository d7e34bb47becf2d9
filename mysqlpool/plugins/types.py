"""Pool factory contract shared between the dispatcher and extensions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from mysqlpool.models import ConnectOptions, ExtensionConstructionError, MySQLPoolError, PoolOptions

if TYPE_CHECKING:
    from mysqlpool.runtime import Runtime


@dataclass(frozen=True, slots=True)
class PoolCreationInput:
    """Everything a custom factory needs to build a pool."""

    runtime: "Runtime"
    pool_options: PoolOptions
    connect_options: ConnectOptions


@runtime_checkable
class PoolFactory(Protocol):
    """Custom pool construction hook registered for a data source."""

    def create(self, input: PoolCreationInput) -> Any: ...


PoolFactoryCallable = Callable[[PoolCreationInput], Any]
PoolFactoryLike = PoolFactory | PoolFactoryCallable


class PoolFactoryDescriptor(Protocol):
    """Contract for factories advertised through entry points."""

    datasource: str
    version: str
    min_core: str

    def create(self, input: PoolCreationInput) -> Any: ...


class PluginError(MySQLPoolError):
    """Base error for factory discovery failures."""


class PluginCompatibilityError(PluginError):
    """Raised when a factory does not satisfy the minimum core version."""


__all__ = [
    "ExtensionConstructionError",
    "PluginCompatibilityError",
    "PluginError",
    "PoolCreationInput",
    "PoolFactory",
    "PoolFactoryCallable",
    "PoolFactoryDescriptor",
    "PoolFactoryLike",
]
