"""Tests for configuration layers and TOML loading."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from mysqlpool import config as config_module
from mysqlpool.config import (
    AppConfig,
    DriverSpecificConfig,
    ReactivePoolConfig,
    load_config,
    parse_config,
)
from mysqlpool.models import DEFAULT_DATASOURCE_NAME, ConfigurationError, SslMode


def test_reactive_defaults() -> None:
    config = ReactivePoolConfig(max_size=5)

    assert config.shared is False
    assert config.trust_all is False
    assert config.cache_prepared_statements is False
    assert config.reconnect_attempts == 0
    assert config.reconnect_interval == timedelta(seconds=1)
    assert config.additional_properties == {}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2s", timedelta(seconds=2)),
        ("500ms", timedelta(milliseconds=500)),
        ("5m", timedelta(minutes=5)),
        ("1h", timedelta(hours=1)),
        ("30", timedelta(seconds=30)),
        ("PT2S", timedelta(seconds=2)),
        (3, timedelta(seconds=3)),
    ],
)
def test_durations_accept_short_and_iso_forms(raw: object, expected: timedelta) -> None:
    config = ReactivePoolConfig.model_validate({"max-size": 1, "reconnect-interval": raw})

    assert config.reconnect_interval == expected


def test_kebab_case_keys_are_accepted() -> None:
    config = DriverSpecificConfig.model_validate({"ssl-mode": "verify-ca", "use-affected-rows": True})

    assert config.ssl_mode is SslMode.VERIFY_CA
    assert config.use_affected_rows is True


def test_config_layers_are_frozen() -> None:
    config = ReactivePoolConfig(max_size=5)

    with pytest.raises(ValidationError):
        config.max_size = 10  # type: ignore[misc]


def test_load_config_returns_empty_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    assert load_config() == AppConfig()


def test_load_config_reads_default_and_named_datasources(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
[datasource]
username = "app"
password = "secret"

[datasource.reactive]
url = "vertx-reactive:mysql://db:3306/app"
max-size = 20
idle-timeout = "30s"
additional-properties = { program_name = "billing" }

[datasource.reactive.trust-certificate-pem]
certs = ["/etc/ssl/ca.pem"]

[datasource.reactive.mysql]
ssl-mode = "required"
charset = "utf8mb4"

[datasources.orders]
credentials-provider = "orders-db"

[datasources.orders.reactive]
max-size = 5
shared = true
name = "pool-A"
"""
    )

    result = load_config(config_path)

    assert result.names == (DEFAULT_DATASOURCE_NAME, "orders")
    default = result.settings_for()
    assert default.datasource.username == "app"
    assert default.reactive.max_size == 20
    assert default.reactive.idle_timeout == timedelta(seconds=30)
    assert default.reactive.additional_properties == {"program_name": "billing"}
    assert default.reactive.trust_certificate_pem is not None
    assert default.reactive.trust_certificate_pem.certs == ("/etc/ssl/ca.pem",)
    assert default.mysql.ssl_mode is SslMode.REQUIRED
    orders = result.settings_for("orders")
    assert orders.datasource.credentials_provider == "orders-db"
    assert orders.reactive.shared is True
    assert orders.reactive.name == "pool-A"


def test_load_config_rejects_invalid_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("datasource = [unterminated")

    with pytest.raises(ConfigurationError):
        load_config(config_path)


def test_missing_max_size_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="orders"):
        parse_config({"datasources": {"orders": {"reactive": {"shared": True}}}})


def test_unknown_keys_are_rejected() -> None:
    with pytest.raises(ConfigurationError):
        parse_config({"datasource": {"reactive": {"max-size": 1, "max-sise": 2}}})


def test_settings_for_unknown_datasource() -> None:
    with pytest.raises(ConfigurationError):
        AppConfig().settings_for("missing")
