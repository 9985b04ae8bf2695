"""
Convenience client.

Thin adapter over ``ClientContext`` and the query/transaction functions;
it holds no state of its own besides the context.
"""

from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any, Self

import httpx

from . import queries as _query
from . import transaction as _tx
from .config import Configuration
from .connection.handle import Connection
from .context import ClientContext
from .types import Response, Result, StatementsArg


class Neo4jClient:
    """
    Client for a Neo4j server over the REST transaction API.

    Usage:
        async with await Neo4jClient.open({"url": "http://localhost:7474"}) as db:
            response = await db.query_or_raise("MATCH (n) RETURN count(n) AS total")

            async with db.conn(graph_result=["row", "graph"]) as conn:
                await db.tx_begin(conn)
                await db.tx_commit(conn, "CREATE (n:Person {name: $name})", {"name": "Ann"})
    """

    def __init__(self, context: ClientContext):
        self.context = context

    @classmethod
    async def open(
        cls,
        options: Mapping[str, Any] | Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Neo4jClient":
        """Create a client, discovering the server and building its pool."""
        return cls(await ClientContext.create(options, transport=transport))

    async def close(self) -> None:
        await self.context.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # Connection

    @asynccontextmanager
    async def conn(self, **options: Any) -> AsyncGenerator[Connection, None]:
        """
        Checkout a connection, optionally with per-call options.

        ``graph_result`` may be ["row"], ["graph"] or ["row", "graph"].
        """
        async with self.context.acquire() as conn:
            yield conn.with_options(**options)

    def server_version(self) -> str:
        return self.context.server_version

    def config(self, key: str | None = None, default: Any = None) -> Any:
        """Return the configuration, or a single option of it."""
        if key is None:
            return self.context.config
        return self.context.store.value(key, default)

    # Query

    async def query(self, statement: StatementsArg, params: dict[str, Any] | None = None) -> Result[Response]:
        async with self.conn() as conn:
            return await _query.query(conn, statement, params)

    async def query_or_raise(self, statement: StatementsArg, params: dict[str, Any] | None = None) -> Response:
        async with self.conn() as conn:
            return await _query.query_or_raise(conn, statement, params)

    async def property_keys(self) -> Result[list[str]]:
        async with self.conn() as conn:
            return await _query.property_keys(conn)

    # Transaction

    async def tx_begin(self, conn: Connection) -> Result[Connection]:
        return await _tx.begin(conn)

    async def tx_execute(
        self, conn: Connection, statements: StatementsArg = None, params: dict[str, Any] | None = None
    ) -> Result[Response]:
        return await _tx.execute(conn, statements, params)

    async def tx_commit(
        self, conn: Connection, statements: StatementsArg = None, params: dict[str, Any] | None = None
    ) -> Result[Response]:
        return await _tx.commit(conn, statements, params)

    async def tx_commit_or_raise(
        self, conn: Connection, statements: StatementsArg = None, params: dict[str, Any] | None = None
    ) -> Response:
        return await _tx.commit_or_raise(conn, statements, params)

    async def tx_rollback(self, conn: Connection) -> Result[Connection]:
        return await _tx.rollback(conn)

    @asynccontextmanager
    async def transaction(self, **options: Any) -> AsyncGenerator[_tx.Transaction, None]:
        """Checkout a connection and run a ``Transaction`` on it."""
        async with self.conn(**options) as conn:
            async with _tx.Transaction(conn) as tx:
                yield tx
