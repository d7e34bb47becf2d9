"""Per-data-source bootstrap: resolve options, build the pool, register shutdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .config import AppConfig, DataSourceSettings
from .credentials import CredentialsProviderRegistry
from .lifecycle import ShutdownContext, register_pool_close
from .models import ConfigurationError, ConnectOptions, PoolOptions
from .plugins import PoolFactoryRegistry
from .pool import PoolFactoryDispatcher
from .resolver import resolve_connect_options, resolve_pool_options
from .runtime import Runtime

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedDataSource:
    """Both resolved option sets for one data source."""

    name: str
    pool_options: PoolOptions
    connect_options: ConnectOptions


def resolve_datasource(
    name: str,
    settings: DataSourceSettings,
    *,
    default_event_loop_count: int | None = None,
    credentials: CredentialsProviderRegistry | None = None,
) -> ResolvedDataSource:
    """Resolve pool and connect options without building anything."""

    return ResolvedDataSource(
        name=name,
        pool_options=resolve_pool_options(settings.reactive, settings.mysql, default_event_loop_count),
        connect_options=resolve_connect_options(
            name,
            settings.datasource,
            settings.reactive,
            settings.mysql,
            credentials=credentials,
        ),
    )


class PoolBootstrapper:
    """Builds one pool per data-source name and registers its shutdown."""

    def __init__(
        self,
        runtime: Runtime,
        shutdown: ShutdownContext,
        *,
        factories: PoolFactoryRegistry | None = None,
        credentials: CredentialsProviderRegistry | None = None,
    ) -> None:
        self._runtime = runtime
        self._shutdown = shutdown
        self._dispatcher = PoolFactoryDispatcher(factories)
        self._credentials = credentials if credentials is not None else CredentialsProviderRegistry()
        self._pools: dict[str, Any] = {}

    @property
    def pools(self) -> Mapping[str, Any]:
        """Pools built so far keyed by data-source name."""

        return dict(self._pools)

    def configure(self, name: str, settings: DataSourceSettings) -> Any:
        """Resolve, build and register the pool for ``name``."""

        if name in self._pools:
            raise ConfigurationError(f"Data source '{name}' is already configured")
        resolved = resolve_datasource(
            name,
            settings,
            default_event_loop_count=self._runtime.event_loop_count,
            credentials=self._credentials,
        )
        pool = self._dispatcher.create(
            self._runtime,
            name,
            resolved.pool_options,
            resolved.connect_options,
        )
        register_pool_close(self._shutdown, self._runtime, pool, datasource=name)
        self._pools[name] = pool
        LOG.info("Configured MySQL pool", extra={"datasource": name, "max_size": resolved.pool_options.max_size})
        return pool

    def configure_all(self, config: AppConfig) -> dict[str, Any]:
        """Configure every data source in ``config``."""

        return {name: self.configure(name, settings) for name, settings in config.datasources.items()}


def configure_mysql_pool(
    runtime: Runtime,
    name: str,
    settings: DataSourceSettings,
    shutdown: ShutdownContext,
    *,
    factories: PoolFactoryRegistry | None = None,
    credentials: CredentialsProviderRegistry | None = None,
) -> Any:
    """Single data-source shortcut around :class:`PoolBootstrapper`."""

    bootstrapper = PoolBootstrapper(runtime, shutdown, factories=factories, credentials=credentials)
    return bootstrapper.configure(name, settings)


__all__ = ["PoolBootstrapper", "ResolvedDataSource", "configure_mysql_pool", "resolve_datasource"]
