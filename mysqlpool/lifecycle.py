"""Shutdown coordination for pools created at bootstrap."""

from __future__ import annotations

import atexit
import inspect
import logging
import threading
from typing import Any, Callable

from .runtime import Runtime

LOG = logging.getLogger(__name__)

ShutdownTask = Callable[[], object]


class ShutdownContext:
    """Ordered shutdown tasks; each runs at most once, newest first."""

    def __init__(self) -> None:
        self._tasks: list[ShutdownTask] = []
        self._lock = threading.Lock()
        self._installed = False

    def add_shutdown_task(self, task: ShutdownTask) -> None:
        with self._lock:
            self._tasks.append(task)

    def install(self) -> None:
        """Run the tasks when the interpreter exits normally."""

        with self._lock:
            if self._installed:
                return
            self._installed = True
        atexit.register(self.run)

    def run(self) -> None:
        """Invoke pending tasks; a failing task does not stop the others."""

        while True:
            with self._lock:
                if not self._tasks:
                    return
                task = self._tasks.pop()
            try:
                task()
            except Exception:
                LOG.exception("Shutdown task failed", extra={"task": getattr(task, "__qualname__", repr(task))})

    def __len__(self) -> int:
        return len(self._tasks)


async def _close_pool(pool: Any) -> None:
    result = pool.close()
    if inspect.isawaitable(result):
        await result
    wait_closed = getattr(pool, "wait_closed", None)
    if wait_closed is not None:
        waited = wait_closed()
        if inspect.isawaitable(waited):
            await waited


def register_pool_close(shutdown: ShutdownContext, runtime: Runtime, pool: Any, *, datasource: str | None = None) -> ShutdownTask:
    """Register ``pool``'s close operation with ``shutdown``; returns the task.

    The shutdown context is installed as an interpreter exit hook, so the pool
    closes on normal process exit even if the caller never runs it.
    """

    closed = threading.Event()

    def _close() -> None:
        if closed.is_set():
            return
        closed.set()
        LOG.debug("Closing pool", extra={"datasource": datasource})
        if runtime.running:
            runtime.run(_close_pool(pool))
        else:
            pool.close()

    shutdown.add_shutdown_task(_close)
    shutdown.install()
    return _close


__all__ = ["ShutdownContext", "ShutdownTask", "register_pool_close"]
