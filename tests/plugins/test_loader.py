"""Tests for entry-point discovery of pool factories."""

from __future__ import annotations

import importlib.metadata as metadata

import pytest

from examples.plugins.recording_pool import RecordingPoolFactory
from mysqlpool.plugins import PluginError, PoolFactoryLoader, PoolFactoryRegistry, discover_pool_factories

ENTRY_POINT = metadata.EntryPoint(
    name="orders",
    value="examples.plugins.recording_pool:RecordingPoolFactory",
    group="mysqlpool.pool_factories",
)


@pytest.fixture(autouse=True)
def fake_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    """Force discovery to use the sample factory."""

    def _entry_points() -> metadata.EntryPoints:
        return metadata.EntryPoints((ENTRY_POINT,))

    monkeypatch.setattr(metadata, "entry_points", _entry_points)


def test_discover_returns_factory_metadata() -> None:
    discovered = PoolFactoryLoader(PoolFactoryRegistry()).discover()

    assert len(discovered) == 1
    assert discovered[0].datasource == RecordingPoolFactory.datasource
    assert discovered[0].version == RecordingPoolFactory.version
    assert isinstance(discovered[0].descriptor, RecordingPoolFactory)


def test_load_registers_factory() -> None:
    registry = discover_pool_factories()

    assert "orders" in registry
    assert isinstance(registry.lookup("orders"), RecordingPoolFactory)


def test_explicit_registration_is_kept() -> None:
    explicit = lambda _input: "explicit"  # noqa: E731
    registry = PoolFactoryRegistry({"orders": explicit})

    loaded = PoolFactoryLoader(registry).load()

    assert loaded == []
    assert registry.lookup("orders") is explicit


def test_incompatible_factory_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(RecordingPoolFactory, "min_core", "9.9.9")
    registry = PoolFactoryRegistry()

    loaded = PoolFactoryLoader(registry, core_version="0.1.0").load()

    assert loaded == []
    assert "orders" not in registry


def test_duplicate_datasource_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    duplicate = metadata.EntryPoint(
        name="orders-copy",
        value="examples.plugins.recording_pool:RecordingPoolFactory",
        group="mysqlpool.pool_factories",
    )
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints((ENTRY_POINT, duplicate)))

    with pytest.raises(PluginError):
        PoolFactoryLoader(PoolFactoryRegistry()).discover()
