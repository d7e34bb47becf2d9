"""Configuration resolution and bootstrap for MySQL connection pools."""

__version__ = "0.1.0"

from .bootstrap import PoolBootstrapper, ResolvedDataSource, configure_mysql_pool, resolve_datasource
from .config import AppConfig, DataSourceConfig, DataSourceSettings, DriverSpecificConfig, ReactivePoolConfig, load_config
from .credentials import CredentialsProvider, CredentialsProviderRegistry
from .lifecycle import ShutdownContext, register_pool_close
from .models import (
    DEFAULT_DATASOURCE_NAME,
    ConfigurationError,
    ConnectOptions,
    ExtensionConstructionError,
    MySQLPoolError,
    PoolOptions,
    ProviderNotFound,
    SslMode,
)
from .plugins import PoolCreationInput, PoolFactoryRegistry
from .pool import PoolFactoryDispatcher
from .runtime import Runtime

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "ConnectOptions",
    "CredentialsProvider",
    "CredentialsProviderRegistry",
    "DEFAULT_DATASOURCE_NAME",
    "DataSourceConfig",
    "DataSourceSettings",
    "DriverSpecificConfig",
    "ExtensionConstructionError",
    "MySQLPoolError",
    "PoolBootstrapper",
    "PoolCreationInput",
    "PoolFactoryDispatcher",
    "PoolFactoryRegistry",
    "PoolOptions",
    "ProviderNotFound",
    "ReactivePoolConfig",
    "ResolvedDataSource",
    "Runtime",
    "ShutdownContext",
    "SslMode",
    "__version__",
    "configure_mysql_pool",
    "load_config",
    "register_pool_close",
    "resolve_datasource",
]
