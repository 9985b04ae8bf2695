"""
One-shot queries against the transaction endpoint.

Every function returns a tagged ``Result``; the ``*_or_raise`` variants
unwrap it and raise the carried exception instead.
"""

import logging
from typing import Any

from .connection.handle import Connection
from .exceptions import Neo4jError, ProtocolError
from .types import Err, Ok, Response, Result, Statement, StatementsArg, to_statements

logger = logging.getLogger(__name__)


async def send_statements(
    conn: Connection,
    url: str,
    statements: list[Statement],
) -> Response:
    """
    POST statements to ``url`` and parse the response.

    Raises:
        Neo4jError: Any transport, protocol or server-reported failure
    """
    formats = conn.result_formats
    payload = {"statements": [s.to_dict(formats) for s in statements]}
    _, body = await conn.transport.request("POST", url, payload)
    return Response.from_dict(body)


async def query(
    conn: Connection,
    statement: StatementsArg,
    params: dict[str, Any] | None = None,
) -> Result[Response]:
    """
    Run statements in a transaction opened and committed in one request.

    The connection's transaction state is left untouched.

    Args:
        conn: A checked-out connection
        statement: Cypher statement(s)
        params: Parameters, when ``statement`` is a single string
    """
    try:
        return Ok(await send_statements(conn, conn.server.commit_url, to_statements(statement, params)))
    except Neo4jError as e:
        return Err(e)


async def query_or_raise(
    conn: Connection,
    statement: StatementsArg,
    params: dict[str, Any] | None = None,
) -> Response:
    """The same as ``query`` but raises the error if it fails."""
    return (await query(conn, statement, params)).unwrap()


async def property_keys(conn: Connection) -> Result[list[str]]:
    """
    List every property key ever used in the database.

    This includes keys whose properties have since been deleted.
    """
    try:
        _, keys = await conn.transport.request("GET", f"{conn.server.data_url}propertykeys", expect_object=False)
    except Neo4jError as e:
        return Err(e)
    if not isinstance(keys, list):
        return Err(ProtocolError(f"Expected a list of property keys, got {type(keys).__name__}"))
    return Ok([str(k) for k in keys])
