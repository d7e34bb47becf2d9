"""Data-source configuration layers and TOML loading helpers."""

from __future__ import annotations

import re
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any, Mapping

import tomllib

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .models import DEFAULT_DATASOURCE_NAME, ConfigurationError, SslMode

CONFIG_FILE = Path.home() / ".config" / "mysqlpool" / "config.toml"

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def _parse_duration(value: object) -> object:
    """Accept short forms like ``500ms`` or ``2s``; leave the rest to pydantic."""

    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return timedelta(seconds=int(text))
        match = _DURATION_PATTERN.match(text)
        if match:
            amount, unit = match.groups()
            return int(amount) * _DURATION_UNITS[unit.lower()]
    return value


Duration = Annotated[timedelta, BeforeValidator(_parse_duration)]


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class _ConfigLayer(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=_kebab,
        extra="forbid",
    )


class PemTrustCertConfig(_ConfigLayer):
    """PEM trust store: CA certificate files."""

    enabled: bool = True
    certs: tuple[str, ...] = ()


class PemKeyCertConfig(_ConfigLayer):
    """PEM key/cert store: client key files and their certificates."""

    enabled: bool = True
    keys: tuple[str, ...] = ()
    certs: tuple[str, ...] = ()


class JksConfig(_ConfigLayer):
    enabled: bool = True
    path: str | None = None
    password: str | None = Field(default=None, repr=False)


class PfxConfig(_ConfigLayer):
    enabled: bool = True
    path: str | None = None
    password: str | None = Field(default=None, repr=False)


class DataSourceConfig(_ConfigLayer):
    """Generic per-data-source settings."""

    username: str | None = None
    password: str | None = Field(default=None, repr=False)
    credentials_provider: str | None = None
    credentials_provider_name: str | None = None


class ReactivePoolConfig(_ConfigLayer):
    """Generic reactive pool settings shared by every reactive driver."""

    url: str | None = None
    max_size: int
    idle_timeout: Duration | None = None
    shared: bool = False
    name: str | None = None
    event_loop_size: int | None = None
    thread_local: bool | None = None
    cache_prepared_statements: bool = False
    trust_all: bool = False
    trust_certificate_pem: PemTrustCertConfig | None = None
    trust_certificate_jks: JksConfig | None = None
    trust_certificate_pfx: PfxConfig | None = None
    key_certificate_pem: PemKeyCertConfig | None = None
    key_certificate_jks: JksConfig | None = None
    key_certificate_pfx: PfxConfig | None = None
    reconnect_attempts: int = 0
    reconnect_interval: Duration = timedelta(seconds=1)
    hostname_verification_algorithm: str | None = None
    additional_properties: dict[str, str] = Field(default_factory=dict)


class DriverSpecificConfig(_ConfigLayer):
    """MySQL specific overrides (``reactive.mysql.*``)."""

    connection_timeout: int | None = None
    cache_prepared_statements: bool | None = None
    charset: str | None = None
    collation: str | None = None
    pipelining_limit: int | None = None
    use_affected_rows: bool | None = None
    ssl_mode: SslMode | None = None
    authentication_plugin: str | None = None


class DataSourceSettings(BaseModel):
    """All three configuration layers for a single data source."""

    model_config = ConfigDict(frozen=True)

    datasource: DataSourceConfig = Field(default_factory=DataSourceConfig)
    reactive: ReactivePoolConfig
    mysql: DriverSpecificConfig = Field(default_factory=DriverSpecificConfig)


class AppConfig(BaseModel):
    """Every configured data source keyed by name."""

    model_config = ConfigDict(frozen=True)

    datasources: dict[str, DataSourceSettings] = Field(default_factory=dict)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.datasources)

    def settings_for(self, name: str = DEFAULT_DATASOURCE_NAME) -> DataSourceSettings:
        try:
            return self.datasources[name]
        except KeyError:
            raise ConfigurationError(f"Data source '{name}' is not configured") from None


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk; an absent file means no data sources."""

    config_path = path or CONFIG_FILE
    try:
        with config_path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return AppConfig()
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {config_path}: {exc}") from exc
    return parse_config(raw)


def parse_config(raw: Mapping[str, Any]) -> AppConfig:
    """Build an :class:`AppConfig` from a ``[datasource]``/``[datasources.*]`` mapping."""

    tables: dict[str, Mapping[str, Any]] = {}
    default = raw.get("datasource")
    if isinstance(default, Mapping):
        tables[DEFAULT_DATASOURCE_NAME] = default
    named = raw.get("datasources")
    if isinstance(named, Mapping):
        for name, table in named.items():
            if not isinstance(table, Mapping):
                raise ConfigurationError(f"Data source '{name}' must be a table")
            tables[str(name)] = table

    datasources: dict[str, DataSourceSettings] = {}
    for name, table in tables.items():
        datasources[name] = parse_datasource(name, table)
    return AppConfig(datasources=datasources)


def parse_datasource(name: str, table: Mapping[str, Any]) -> DataSourceSettings:
    """Split one data-source table into its three layers."""

    generic = dict(table)
    reactive = dict(generic.pop("reactive", None) or {})
    mysql = dict(reactive.pop("mysql", None) or {})
    try:
        return DataSourceSettings(
            datasource=DataSourceConfig.model_validate(generic),
            reactive=ReactivePoolConfig.model_validate(reactive),
            mysql=DriverSpecificConfig.model_validate(mysql),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration for data source '{name}': {exc}") from exc


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "DataSourceConfig",
    "DataSourceSettings",
    "DriverSpecificConfig",
    "Duration",
    "JksConfig",
    "PemKeyCertConfig",
    "PemTrustCertConfig",
    "PfxConfig",
    "ReactivePoolConfig",
    "load_config",
    "parse_config",
    "parse_datasource",
]
