"""Tests for shutdown registration."""

from __future__ import annotations

import atexit
from typing import Iterator

import pytest

from mysqlpool.lifecycle import ShutdownContext, register_pool_close
from mysqlpool.runtime import Runtime


@pytest.fixture(autouse=True)
def exit_hooks(monkeypatch: pytest.MonkeyPatch) -> list[object]:
    registered: list[object] = []
    monkeypatch.setattr(atexit, "register", registered.append)
    return registered


@pytest.fixture
def runtime() -> Iterator[Runtime]:
    rt = Runtime()
    try:
        yield rt
    finally:
        rt.shutdown()


class _SyncPool:
    def __init__(self) -> None:
        self.closed = 0

    def close(self) -> None:
        self.closed += 1


class _AiomysqlStylePool(_SyncPool):
    def __init__(self) -> None:
        super().__init__()
        self.waited = 0

    async def wait_closed(self) -> None:
        self.waited += 1


class _AsyncClosePool:
    def __init__(self) -> None:
        self.closed = 0

    async def close(self) -> None:
        self.closed += 1


def test_close_runs_once(runtime: Runtime) -> None:
    shutdown = ShutdownContext()
    pool = _SyncPool()
    task = register_pool_close(shutdown, runtime, pool)

    shutdown.run()
    shutdown.run()
    task()

    assert pool.closed == 1
    assert len(shutdown) == 0


def test_close_waits_for_aiomysql_pools(runtime: Runtime) -> None:
    shutdown = ShutdownContext()
    pool = _AiomysqlStylePool()
    register_pool_close(shutdown, runtime, pool)

    shutdown.run()

    assert (pool.closed, pool.waited) == (1, 1)


def test_async_close_is_awaited(runtime: Runtime) -> None:
    shutdown = ShutdownContext()
    pool = _AsyncClosePool()
    register_pool_close(shutdown, runtime, pool)

    shutdown.run()

    assert pool.closed == 1


def test_tasks_run_newest_first_and_survive_failures() -> None:
    shutdown = ShutdownContext()
    calls: list[str] = []

    def _failing() -> None:
        calls.append("failing")
        raise RuntimeError("close failed")

    shutdown.add_shutdown_task(lambda: calls.append("first"))
    shutdown.add_shutdown_task(_failing)
    shutdown.add_shutdown_task(lambda: calls.append("last"))

    shutdown.run()

    assert calls == ["last", "failing", "first"]


def test_install_registers_once(exit_hooks: list[object]) -> None:
    shutdown = ShutdownContext()

    shutdown.install()
    shutdown.install()

    assert exit_hooks == [shutdown.run]


def test_registering_a_close_installs_exit_hook_once(runtime: Runtime, exit_hooks: list[object]) -> None:
    shutdown = ShutdownContext()

    register_pool_close(shutdown, runtime, _SyncPool())
    register_pool_close(shutdown, runtime, _SyncPool())

    assert exit_hooks == [shutdown.run]
    assert len(shutdown) == 2


def test_close_after_runtime_stopped() -> None:
    rt = Runtime()
    rt.shutdown()
    shutdown = ShutdownContext()
    pool = _SyncPool()
    register_pool_close(shutdown, rt, pool)

    shutdown.run()

    assert pool.closed == 1
