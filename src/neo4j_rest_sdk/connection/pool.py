"""
Connection Pool Implementation for the Neo4j REST SDK.

A fixed set of steady-state connections plus a capped number of transient
overflow connections created under burst load.
"""

import asyncio
import logging
from collections import deque
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Self

import httpx

from ..config import Configuration
from ..exceptions import ConnectionError, PoolTimeoutError
from .handle import Connection
from .http import HTTPTransport

if TYPE_CHECKING:
    from ..server import ServerInfo

logger = logging.getLogger(__name__)

_USE_CONFIG = object()


class ConnectionPool:
    """
    Connection pool for Neo4j connections.

    All steady-state connections are created up front and share one
    ``ServerInfo``. When none is idle, overflow connections are created up
    to ``max_overflow`` and closed again on checkin. Beyond that, callers
    wait until a connection is returned or their timeout elapses.
    """

    def __init__(
        self,
        config: Configuration,
        server: "ServerInfo",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize connection pool.

        Args:
            config: Client configuration (pool sizing, timeout, credentials)
            server: Discovered server metadata shared by every connection
            transport: Optional httpx transport for every connection
        """
        self.config = config
        self.server = server
        self._transport = transport
        self._size = config.pool_size
        self._max_overflow = config.max_overflow

        self._connections = [self._create_connection() for _ in range(self._size)]
        self._idle: deque[Connection] = deque(self._connections)
        self._in_use: set[Connection] = set()
        self._overflow = 0
        self._condition = asyncio.Condition()
        self._closed = False

    @classmethod
    async def start(
        cls,
        config: Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ConnectionPool":
        """
        Discover the server and build a pool for it.

        No connection is created when discovery fails.
        """
        from ..server import discover

        server = await discover(config, transport=transport)
        return cls(config, server, transport=transport)

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    def _create_connection(self, is_overflow: bool = False) -> Connection:
        """Create a new connection instance."""
        transport = HTTPTransport(self.config, transport=self._transport).connect()
        return Connection(self.server, transport, is_overflow=is_overflow)

    def _can_take(self) -> bool:
        return bool(self._idle) or self._overflow < self._max_overflow

    def _take(self) -> Connection:
        if self._idle:
            return self._idle.popleft()
        self._overflow += 1
        logger.debug(f"Creating overflow connection ({self._overflow}/{self._max_overflow})")
        return self._create_connection(is_overflow=True)

    async def checkout(self, timeout: Any = _USE_CONFIG) -> Connection:
        """
        Take a connection from the pool.

        Args:
            timeout: Seconds to wait; 0 fails at once when none is available,
                None waits forever. Defaults to the configured timeout.

        Raises:
            PoolTimeoutError: If no connection became available in time
            ConnectionError: If the pool is closed
        """
        if timeout is _USE_CONFIG:
            timeout = self.config.timeout

        async with self._condition:
            if self._closed:
                raise ConnectionError("Pool is closed")

            if not self._can_take():
                if timeout is not None and timeout <= 0:
                    raise PoolTimeoutError("No connection available")
                try:
                    async with asyncio.timeout(timeout):
                        try:
                            await self._condition.wait_for(lambda: self._closed or self._can_take())
                        except BaseException:
                            # A notify consumed by a waiter that gives up must pass to the next one.
                            if not self._closed and self._can_take():
                                self._condition.notify()
                            raise
                except TimeoutError:
                    raise PoolTimeoutError(f"No connection available after {timeout}s")
                if self._closed:
                    raise ConnectionError("Pool is closed")

            conn = self._take()
            self._in_use.add(conn)
            return conn

    async def checkin(self, conn: Connection) -> None:
        """
        Return a connection to the pool.

        Overflow connections are closed instead of being kept.

        Raises:
            ValueError: If the connection is not checked out from this pool
        """
        discard = False
        async with self._condition:
            if conn not in self._in_use:
                raise ValueError("Connection is not checked out from this pool")
            self._in_use.discard(conn)

            if conn.is_open:
                logger.warning(f"Connection returned with an open transaction: {conn.transaction_url}")
            conn.reset()

            if conn.is_overflow:
                self._overflow -= 1
                discard = True
            elif self._closed:
                discard = True
            else:
                self._idle.append(conn)
            self._condition.notify()

        if discard:
            await conn.transport.close()

    @asynccontextmanager
    async def acquire(self, timeout: Any = _USE_CONFIG) -> AsyncGenerator[Connection, None]:
        """
        Acquire a connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                result = await query(conn, "MATCH (n) RETURN count(n)")

        Yields:
            A checked-out connection, always checked back in
        """
        conn = await self.checkout(timeout)
        try:
            yield conn
        finally:
            await self.checkin(conn)

    async def close(self) -> None:
        """Close all connections in the pool."""
        async with self._condition:
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
            self._condition.notify_all()

        for conn in idle:
            await conn.transport.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        """Number of steady-state connections."""
        return self._size

    @property
    def max_overflow(self) -> int:
        return self._max_overflow

    @property
    def available(self) -> int:
        """Number of idle connections in pool."""
        return len(self._idle)

    @property
    def in_use(self) -> int:
        """Number of connections currently in use."""
        return len(self._in_use)

    @property
    def overflow(self) -> int:
        """Number of overflow connections currently alive."""
        return self._overflow
