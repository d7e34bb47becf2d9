"""Sample pool factory implementing the extension contract for tests."""

from __future__ import annotations

from dataclasses import dataclass

from mysqlpool.plugins import PoolCreationInput


@dataclass
class RecordingPool:
    """Stand-in pool that remembers how it was built."""

    input: PoolCreationInput
    closed: int = 0

    def close(self) -> None:
        self.closed += 1


class RecordingPoolFactory:
    """Factory advertised for the ``orders`` data source."""

    datasource = "orders"
    version = "0.0.1"
    min_core = "0.1.0"

    def __init__(self) -> None:
        self.created: list[RecordingPool] = []

    def create(self, input: PoolCreationInput) -> RecordingPool:
        pool = RecordingPool(input)
        self.created.append(pool)
        return pool
