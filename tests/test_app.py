"""Tests for the diagnostic command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from mysqlpool.app import main

CONFIG = """
[datasource]
username = "app"
password = "secret"

[datasource.reactive]
url = "mysql://db:3306/app"
max-size = 10

[datasources.orders.reactive]
max-size = 2

[datasources.orders.reactive.mysql]
ssl-mode = "verify-identity"
"""


def test_main_prints_resolved_options(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(CONFIG)

    exit_code = main(["--config", str(config_path), "--datasource", "<default>"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "[<default>]" in out
    assert "pool.max_size = 10" in out
    assert "connect.host = db" in out
    assert "connect.password = ***" in out
    assert "secret" not in out
    assert "connect.metrics_name = mysql|<default>" in out


def test_main_reports_configuration_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(CONFIG)

    exit_code = main(["--config", str(config_path)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "hostname-verification-algorithm" in captured.err


def test_main_with_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--config", str(tmp_path / "absent.toml")])

    assert exit_code == 0
    assert capsys.readouterr().out == ""
