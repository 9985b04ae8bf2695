"""
Transaction support for the Neo4j REST SDK.

A transaction lives on a checked-out ``Connection``: ``begin`` opens it on the
server and stores its URLs on the connection, ``execute`` runs statements in
it, ``commit`` and ``rollback`` close it and return the connection to the
closed state.

Every function returns a tagged ``Result``; the ``*_or_raise`` variants
unwrap it and raise the carried exception instead.
"""

import logging
from typing import Any, Self

from .connection.handle import Connection
from .exceptions import InvalidStateError, Neo4jError, ProtocolError, TransactionError
from .queries import query, send_statements
from .types import Err, Ok, Response, Result, StatementsArg, to_statements

logger = logging.getLogger(__name__)

COMMIT_SUFFIX = "/commit"


def _track(conn: Connection, response: Response) -> None:
    """Store the commit URL and expiry reported for the open transaction."""
    if response.commit:
        conn.with_commit_url(response.commit)
    if response.expires:
        conn.expires = response.expires


def _close_on_server_error(conn: Connection, error: Neo4jError) -> None:
    # Neo4j rolls the transaction back on any reported error.
    if isinstance(error, TransactionError) and conn.is_open:
        logger.debug(f"Transaction {conn.transaction_url} closed by server error {error.code}")
        conn.clear_transaction()


async def begin(conn: Connection) -> Result[Connection]:
    """
    Open a transaction on the connection.

    Returns:
        The same connection, now holding the transaction URLs

    Errors:
        InvalidStateError: A transaction is already open on the connection
        ProtocolError: The response carries no commit URL
    """
    if conn.is_open:
        return Err(InvalidStateError(f"Transaction already open: {conn.transaction_url}"))

    try:
        response, body = await conn.transport.request(
            "POST",
            conn.server.transaction_url,
            {"statements": []},
        )
    except Neo4jError as e:
        return Err(e)

    commit_url = body.get("commit")
    if not commit_url:
        return Err(ProtocolError("Begin response is missing the commit URL", status=response.status_code))

    transaction_url = response.headers.get("location") or commit_url.removesuffix(COMMIT_SUFFIX)
    conn.with_transaction_url(transaction_url).with_commit_url(commit_url)
    conn.expires = (body.get("transaction") or {}).get("expires")
    logger.debug(f"Transaction opened: {transaction_url}")
    return Ok(conn)


async def execute(
    conn: Connection,
    statements: StatementsArg = None,
    params: dict[str, Any] | None = None,
) -> Result[Response]:
    """
    Run statements in the open transaction without committing it.

    Sending no statements keeps the transaction alive.

    Errors:
        InvalidStateError: No transaction is open on the connection
    """
    if not conn.is_open:
        return Err(InvalidStateError("No open transaction"))
    assert conn.transaction_url is not None

    try:
        response = await send_statements(conn, conn.transaction_url, to_statements(statements, params))
    except Neo4jError as e:
        _close_on_server_error(conn, e)
        return Err(e)

    _track(conn, response)
    return Ok(response)


async def commit(
    conn: Connection,
    statements: StatementsArg = None,
    params: dict[str, Any] | None = None,
) -> Result[Response]:
    """
    Commit statements.

    Without an open transaction, the statements run in a transaction opened
    and committed in one request. With one, they are sent to its commit URL
    and the connection returns to the closed state.
    """
    if not conn.is_open:
        return await query(conn, statements, params)

    url = conn.commit_url or f"{conn.transaction_url}{COMMIT_SUFFIX}"
    try:
        response = await send_statements(conn, url, to_statements(statements, params))
    except Neo4jError as e:
        _close_on_server_error(conn, e)
        return Err(e)

    logger.debug(f"Transaction committed: {conn.transaction_url}")
    conn.clear_transaction()
    return Ok(response)


async def rollback(conn: Connection) -> Result[Connection]:
    """
    Roll back the open transaction.

    Any further statement sent to the transaction fails on the server.

    Errors:
        InvalidStateError: No transaction is open on the connection
        TransactionError: The server reports the transaction closed or expired
    """
    if not conn.is_open:
        return Err(InvalidStateError("No open transaction"))
    assert conn.transaction_url is not None

    try:
        await conn.transport.request("DELETE", conn.transaction_url)
    except Neo4jError as e:
        _close_on_server_error(conn, e)
        return Err(e)

    logger.debug(f"Transaction rolled back: {conn.transaction_url}")
    conn.clear_transaction()
    return Ok(conn)


async def begin_or_raise(conn: Connection) -> Connection:
    """The same as ``begin`` but raises the error if it fails."""
    return (await begin(conn)).unwrap()


async def execute_or_raise(
    conn: Connection,
    statements: StatementsArg = None,
    params: dict[str, Any] | None = None,
) -> Response:
    """The same as ``execute`` but raises the error if it fails."""
    return (await execute(conn, statements, params)).unwrap()


async def commit_or_raise(
    conn: Connection,
    statements: StatementsArg = None,
    params: dict[str, Any] | None = None,
) -> Response:
    """The same as ``commit`` but raises the error if it fails."""
    return (await commit(conn, statements, params)).unwrap()


async def rollback_or_raise(conn: Connection) -> Connection:
    """The same as ``rollback`` but raises the error if it fails."""
    return (await rollback(conn)).unwrap()


class Transaction:
    """
    Transaction scoped to an ``async with`` block.

    Usage:
        async with pool.acquire() as conn:
            async with Transaction(conn) as tx:
                await tx.run("CREATE (n:Person {name: $name})", {"name": "Ann"})
                # Auto-commit on success, auto-rollback on exception
    """

    def __init__(self, connection: Connection):
        self._connection = connection
        self._response: Response | None = None

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def is_active(self) -> bool:
        return self._connection.is_open

    @property
    def response(self) -> Response | None:
        """Commit response, once committed."""
        return self._response

    async def __aenter__(self) -> Self:
        """Begin transaction on context entry."""
        await begin_or_raise(self._connection)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        """Commit on success, rollback on exception."""
        if exc_type is not None:
            if self.is_active:
                result = await rollback(self._connection)
                if isinstance(result, Err):
                    logger.debug(f"Rollback after {exc_type.__name__} failed: {result.error}")
            return False  # Re-raise exception
        if self.is_active:
            self._response = await commit_or_raise(self._connection)
        return False

    async def run(self, statements: StatementsArg, params: dict[str, Any] | None = None) -> Response:
        """Execute statements within the transaction."""
        return await execute_or_raise(self._connection, statements, params)

    async def commit(self, statements: StatementsArg = None, params: dict[str, Any] | None = None) -> Response:
        """Commit early, optionally sending final statements."""
        if not self.is_active:
            raise InvalidStateError("Transaction not active")
        self._response = await commit_or_raise(self._connection, statements, params)
        return self._response

    async def rollback(self) -> None:
        """Roll back early."""
        await rollback_or_raise(self._connection)
