"""Unit tests for the pool factory registry."""

from __future__ import annotations

import pytest

from mysqlpool.models import DEFAULT_DATASOURCE_NAME, ConnectOptions, PoolOptions
from mysqlpool.plugins import PoolCreationInput, PoolFactoryRegistry


def _input() -> PoolCreationInput:
    return PoolCreationInput(runtime=None, pool_options=PoolOptions(max_size=1), connect_options=ConnectOptions())  # type: ignore[arg-type]


def test_register_and_lookup() -> None:
    registry = PoolFactoryRegistry()
    factory = lambda _input: "pool"  # noqa: E731
    registry.register(factory, "orders")

    assert "orders" in registry
    assert registry.lookup("orders") is factory
    assert registry.lookup("billing") is None
    assert len(registry) == 1


def test_default_name_maps_to_unqualified_entry() -> None:
    registry = PoolFactoryRegistry()
    registry.register(lambda _input: "default")

    assert None in registry
    assert DEFAULT_DATASOURCE_NAME in registry
    assert registry.create(DEFAULT_DATASOURCE_NAME, _input()) == "default"


def test_register_rejects_non_callables() -> None:
    registry = PoolFactoryRegistry()

    with pytest.raises(TypeError):
        registry.register("not a factory", "orders")  # type: ignore[arg-type]


def test_create_prefers_create_method() -> None:
    class _Factory:
        def __init__(self) -> None:
            self.inputs: list[PoolCreationInput] = []

        def create(self, input: PoolCreationInput) -> str:
            self.inputs.append(input)
            return "created"

    factory = _Factory()
    registry = PoolFactoryRegistry()
    registry.register_many([("orders", factory)])
    pool_input = _input()

    assert registry.create("orders", pool_input) == "created"
    assert factory.inputs == [pool_input]


def test_create_unknown_datasource_raises() -> None:
    with pytest.raises(KeyError):
        PoolFactoryRegistry().create("orders", _input())
