"""Pool construction: custom factory dispatch with an aiomysql default."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable

import aiomysql
from pymysql.constants import CLIENT, CR
from pymysql.err import OperationalError

from .models import DEFAULT_DATASOURCE_NAME, ConnectOptions, PoolOptions, SslMode, TimeUnit
from .plugins import PoolCreationInput, PoolFactoryRegistry
from .runtime import Runtime
from .tls import build_ssl_context

LOG = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf8mb4"

# Modes that must never fall back to a plaintext session.
TLS_REQUIRED_MODES = frozenset({SslMode.REQUIRED, SslMode.VERIFY_CA, SslMode.VERIFY_IDENTITY})


def pool_connect_kwargs(pool_options: PoolOptions, connect_options: ConnectOptions) -> dict[str, object]:
    """Translate resolved options into ``aiomysql.create_pool`` keyword arguments.

    Pipelining, statement caching, reconnect policy, event-loop size and
    free-form properties have no aiomysql counterpart; they stay available to
    custom factories through :class:`PoolCreationInput`.
    """

    charset = connect_options.charset or DEFAULT_CHARSET
    kwargs: dict[str, object] = {
        "host": connect_options.host,
        "port": connect_options.port,
        "user": connect_options.user,
        "password": connect_options.password,
        "charset": charset,
        "minsize": 0,
        "maxsize": pool_options.max_size,
    }
    if connect_options.database:
        kwargs["db"] = connect_options.database
    if connect_options.collation:
        kwargs["init_command"] = f"SET NAMES {charset} COLLATE {connect_options.collation}"
    if not connect_options.use_affected_rows:
        kwargs["client_flag"] = CLIENT.FOUND_ROWS
    if connect_options.authentication_plugin:
        kwargs["auth_plugin"] = connect_options.authentication_plugin
    ssl_context = build_ssl_context(connect_options)
    if ssl_context is not None:
        kwargs["ssl"] = ssl_context

    if pool_options.connection_timeout is not None:
        timeout = pool_options.connection_timeout
        if pool_options.connection_timeout_unit is TimeUnit.MILLISECONDS:
            timeout = timeout / 1000
        kwargs["connect_timeout"] = timeout
    if pool_options.idle_timeout is not None:
        seconds = pool_options.idle_timeout
        if pool_options.idle_timeout_unit is TimeUnit.MILLISECONDS:
            seconds = -(-seconds // 1000)
        kwargs["pool_recycle"] = seconds
    return kwargs


class TlsRequiredConnection(aiomysql.Connection):
    """Connection that refuses servers which do not offer TLS.

    aiomysql only upgrades the socket when the server advertises
    ``CLIENT.SSL`` and otherwise sends the handshake response in plaintext.
    The check runs after the server greeting and before any credentials
    are written.
    """

    async def _request_authentication(self):
        if not self.server_capabilities & CLIENT.SSL:
            raise OperationalError(
                CR.CR_SSL_CONNECTION_ERROR,
                f"MySQL server on {self._host!r} does not support TLS but the SSL mode requires it",
            )
        await super()._request_authentication()


class TlsRequiredPool(aiomysql.Pool):
    """``aiomysql`` pool whose connections are :class:`TlsRequiredConnection`."""

    async def _fill_free_pool(self, override_min):
        self._discard_stale_connections()
        while self.size < self.minsize:
            await self._open_free_connection()
        if self._free:
            return
        if override_min and (not self.maxsize or self.size < self.maxsize):
            await self._open_free_connection()

    def _discard_stale_connections(self) -> None:
        for _ in range(len(self._free)):
            conn = self._free[-1]
            reader = conn._reader
            expired = self._recycle > -1 and self._loop.time() - conn.last_usage > self._recycle
            if reader.at_eof() or reader.exception() or reader.eof_received or expired:
                self._free.pop()
                conn.close()
            else:
                self._free.rotate()

    async def _open_free_connection(self) -> None:
        self._acquiring += 1
        try:
            conn = TlsRequiredConnection(echo=self._echo, loop=self._loop, **self._conn_kwargs)
            await conn._connect()
            self._free.append(conn)
            self._cond.notify()
        finally:
            self._acquiring -= 1


def create_default_pool(runtime: Runtime, pool_options: PoolOptions, connect_options: ConnectOptions) -> Any:
    """Build an ``aiomysql`` pool on the runtime loop; connections open lazily.

    SSL modes stricter than ``preferred`` get a :class:`TlsRequiredPool`, so a
    server without TLS support fails the connection instead of downgrading.
    """

    kwargs = pool_connect_kwargs(pool_options, connect_options)

    if connect_options.ssl_mode in TLS_REQUIRED_MODES:

        async def _create() -> Any:
            options = dict(kwargs)
            minsize = options.pop("minsize")
            maxsize = options.pop("maxsize")
            recycle = options.pop("pool_recycle", -1)
            return TlsRequiredPool(
                minsize=minsize,
                maxsize=maxsize,
                echo=False,
                pool_recycle=recycle,
                loop=asyncio.get_running_loop(),
                **options,
            )

    else:

        async def _create() -> Any:
            return await aiomysql.create_pool(**kwargs)

    return runtime.run(_create())


async def _resolve(pending: Awaitable[Any]) -> Any:
    return await pending


class PoolFactoryDispatcher:
    """Selects the registered factory for a data source, else the default pool."""

    def __init__(self, registry: PoolFactoryRegistry | None = None) -> None:
        self._registry = registry if registry is not None else PoolFactoryRegistry()

    @property
    def registry(self) -> PoolFactoryRegistry:
        return self._registry

    def create(
        self,
        runtime: Runtime,
        datasource: str,
        pool_options: PoolOptions,
        connect_options: ConnectOptions,
    ) -> Any:
        """Build the pool once; extension errors propagate unchanged.

        A factory may return an awaitable, which is resolved on the runtime loop.
        """

        lookup = None if datasource == DEFAULT_DATASOURCE_NAME else datasource
        if lookup in self._registry:
            LOG.debug("Creating pool through registered factory", extra={"datasource": datasource})
            pool = self._registry.create(lookup, PoolCreationInput(runtime, pool_options, connect_options))
            if inspect.isawaitable(pool):
                return runtime.run(_resolve(pool))
            return pool
        LOG.debug("Creating default aiomysql pool", extra={"datasource": datasource})
        return create_default_pool(runtime, pool_options, connect_options)


__all__ = [
    "DEFAULT_CHARSET",
    "TLS_REQUIRED_MODES",
    "PoolFactoryDispatcher",
    "TlsRequiredConnection",
    "TlsRequiredPool",
    "create_default_pool",
    "pool_connect_kwargs",
]
