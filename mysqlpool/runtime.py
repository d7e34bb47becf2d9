"""Runtime handle shared by every pool built during bootstrap."""

from __future__ import annotations

import asyncio
import os
import threading
from typing import Any, Coroutine, TypeVar

T = TypeVar("T")


def default_event_loop_count() -> int:
    """Process-wide default for the number of event loops (twice the CPU count)."""

    return 2 * (os.cpu_count() or 1)


class Runtime:
    """Background asyncio loop that lets synchronous bootstrap code drive async pools."""

    def __init__(self, *, event_loop_count: int | None = None, name: str = "mysqlpool-runtime") -> None:
        self._event_loop_count = event_loop_count if event_loop_count is not None else default_event_loop_count()
        self._loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(
            target=self._loop.run_forever,
            name=name,
            daemon=True,
        )
        self._loop_thread.start()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def event_loop_count(self) -> int:
        """Process-wide default event-loop count for pools without their own size."""

        return self._event_loop_count

    @property
    def running(self) -> bool:
        return self._loop.is_running()

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run ``coro`` on the background loop and block until it completes."""

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def shutdown(self) -> None:
        """Stop the background event loop."""

        if not self._loop.is_running():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._loop_thread.join(timeout=1)


__all__ = ["Runtime", "default_event_loop_count"]
