"""
Client context.

Owns the configuration, the discovered server metadata and the connection
pool for the lifetime of a client. It is created once and passed explicitly
to whoever needs a connection.
"""

import logging
from collections.abc import Mapping
from contextlib import AbstractAsyncContextManager
from typing import Any, Self

import httpx

from .config import Configuration, ConfigStore
from .connection.handle import Connection
from .connection.pool import _USE_CONFIG, ConnectionPool
from .server import ServerInfo, discover

logger = logging.getLogger(__name__)


class ClientContext:
    """
    Configuration, server metadata and pool of one client.

    Usage:
        async with await ClientContext.create({"url": "http://localhost:7474"}) as ctx:
            async with ctx.acquire() as conn:
                response = await query_or_raise(conn, "RETURN 1 AS one")
    """

    def __init__(self, store: ConfigStore, server: ServerInfo, pool: ConnectionPool):
        self.store = store
        self.server = server
        self.pool = pool

    @classmethod
    async def create(
        cls,
        options: Mapping[str, Any] | Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ClientContext":
        """
        Load the configuration, discover the server and build the pool.

        Raises:
            ConfigError: If the configuration is invalid
            ConnectionError: If the server cannot be reached
            ProtocolError: If the discovery response is malformed
        """
        store = ConfigStore()
        config = store.load(options)
        server = await discover(config, transport=transport)
        pool = ConnectionPool(config, server, transport=transport)
        logger.debug(f"Client ready: pool_size={config.pool_size}, max_overflow={config.max_overflow}")
        return cls(store, server, pool)

    @property
    def config(self) -> Configuration:
        return self.store.get()

    @property
    def server_version(self) -> str:
        return self.server.version

    def acquire(self, timeout: Any = _USE_CONFIG) -> AbstractAsyncContextManager[Connection]:
        """Checkout a connection for the duration of an ``async with`` block.

        ``timeout`` overrides the configured one; None waits forever.
        """
        return self.pool.acquire(timeout)

    async def close(self) -> None:
        await self.pool.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
