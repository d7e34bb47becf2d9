"""Shared dataclasses and errors used across the resolution modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

DEFAULT_DATASOURCE_NAME = "<default>"


class MySQLPoolError(RuntimeError):
    """Base error for pool bootstrap failures."""


class ConfigurationError(MySQLPoolError, ValueError):
    """Raised when data-source configuration is invalid or inconsistent."""


class ProviderNotFound(MySQLPoolError, LookupError):
    """Raised when a named credentials provider cannot be resolved."""


class ExtensionConstructionError(MySQLPoolError):
    """Base error for custom pool factories that fail while building a pool."""


class SslMode(str, Enum):
    """Transport security negotiation levels supported by MySQL."""

    DISABLED = "disabled"
    PREFERRED = "preferred"
    REQUIRED = "required"
    VERIFY_CA = "verify-ca"
    VERIFY_IDENTITY = "verify-identity"


class TimeUnit(str, Enum):
    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"


@dataclass(frozen=True, slots=True)
class PemTrustOptions:
    """PEM encoded CA certificates used to verify the server."""

    cert_paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PemKeyCertOptions:
    """PEM encoded client keys paired with their certificates."""

    key_paths: tuple[str, ...] = ()
    cert_paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class JksOptions:
    """Java keystore reference."""

    path: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class PfxOptions:
    """PKCS#12 store reference."""

    path: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class PoolOptions:
    """Resolved pool behaviour for one data source."""

    max_size: int
    idle_timeout: int | None = None
    idle_timeout_unit: TimeUnit | None = None
    shared: bool = False
    name: str | None = None
    event_loop_size: int | None = None
    connection_timeout: int | None = None
    connection_timeout_unit: TimeUnit | None = None


@dataclass(frozen=True, slots=True)
class ConnectOptions:
    """Resolved connection and security behaviour for one data source."""

    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = field(default="", repr=False)
    database: str | None = None
    cache_prepared_statements: bool = False
    charset: str | None = None
    collation: str | None = None
    pipelining_limit: int | None = None
    use_affected_rows: bool | None = None
    ssl_mode: SslMode | None = None
    trust_all: bool = False
    pem_trust: PemTrustOptions | None = None
    jks_trust: JksOptions | None = None
    pfx_trust: PfxOptions | None = None
    pem_key_cert: PemKeyCertOptions | None = None
    jks_key_cert: JksOptions | None = None
    pfx_key_cert: PfxOptions | None = None
    reconnect_attempts: int = 0
    reconnect_interval: int = 1000
    hostname_verification_algorithm: str | None = None
    authentication_plugin: str | None = None
    properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    metrics_name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.properties, MappingProxyType):
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))


__all__ = [
    "ConfigurationError",
    "ConnectOptions",
    "DEFAULT_DATASOURCE_NAME",
    "ExtensionConstructionError",
    "JksOptions",
    "MySQLPoolError",
    "PemKeyCertOptions",
    "PemTrustOptions",
    "PfxOptions",
    "PoolOptions",
    "ProviderNotFound",
    "SslMode",
    "TimeUnit",
]
