"""Registry mapping data-source names to custom pool factories."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from mysqlpool.models import DEFAULT_DATASOURCE_NAME

from .types import PoolCreationInput, PoolFactory, PoolFactoryLike


class PoolFactoryRegistry:
    """Collects pool factories populated at application composition time.

    The default data source is registered under the unqualified key ``None``.
    """

    def __init__(self, factories: Mapping[str | None, PoolFactoryLike] | None = None) -> None:
        self._factories: dict[str | None, PoolFactoryLike] = {}
        for name, factory in (factories or {}).items():
            self.register(factory, name)

    def register(self, factory: PoolFactoryLike, datasource: str | None = None) -> None:
        """Register a factory for ``datasource`` (``None`` for the default one)."""

        if not isinstance(factory, PoolFactory) and not callable(factory):
            raise TypeError(f"Pool factory for '{datasource}' must be callable or define create()")
        self._factories[_key(datasource)] = factory

    def register_many(self, factories: Iterable[tuple[str | None, PoolFactoryLike]]) -> None:
        for datasource, factory in factories:
            self.register(factory, datasource)

    def lookup(self, datasource: str | None = None) -> PoolFactoryLike | None:
        """Return the factory registered for ``datasource``, if any."""

        return self._factories.get(_key(datasource))

    def create(self, datasource: str | None, input: PoolCreationInput) -> Any:
        """Invoke the factory registered for ``datasource``."""

        factory = self._factories[_key(datasource)]
        if isinstance(factory, PoolFactory):
            return factory.create(input)
        return factory(input)

    def __contains__(self, datasource: object) -> bool:
        return isinstance(datasource, (str, type(None))) and _key(datasource) in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def _key(datasource: str | None) -> str | None:
    if datasource is None or datasource == DEFAULT_DATASOURCE_NAME:
        return None
    return datasource


__all__ = ["PoolFactoryRegistry"]
