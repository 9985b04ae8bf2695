"""
Server handshake.

Discovers the REST data root of a Neo4j server: its transaction endpoint and
version.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .config import Configuration
from .connection.http import HTTPTransport
from .exceptions import ProtocolError

logger = logging.getLogger(__name__)

DATA_PATH = "/db/data/"


@dataclass(frozen=True)
class ServerInfo:
    """
    Metadata returned by the server's data root.

    Attributes:
        url: Configured base URL
        data_url: REST data root, ending with "/"
        transaction_url: Transaction endpoint
        version: Server version string
        raw: Full discovery body
    """

    url: str
    data_url: str
    transaction_url: str
    version: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def commit_url(self) -> str:
        """Endpoint opening and committing a transaction in one request."""
        return f"{self.transaction_url}/commit"

    @classmethod
    def from_dict(cls, url: str, data: dict[str, Any]) -> "ServerInfo":
        """
        Parse the discovery body.

        Raises:
            ProtocolError: If ``transaction`` or ``neo4j_version`` is absent.
        """
        missing = [key for key in ("transaction", "neo4j_version") if not data.get(key)]
        if missing:
            raise ProtocolError(f"Discovery response is missing {', '.join(missing)}")
        return cls(
            url=url,
            data_url=f"{url}{DATA_PATH}",
            transaction_url=str(data["transaction"]).rstrip("/"),
            version=str(data["neo4j_version"]),
            raw=data,
        )


async def discover(
    config: Configuration,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServerInfo:
    """
    Query the server's data root once.

    Args:
        config: Client configuration
        transport: Optional httpx transport

    Raises:
        ConnectionError: If the server cannot be reached
        ProtocolError: If the body lacks the transaction endpoint or version
        TransactionError: If the server rejects the request
    """
    url = f"{config.url}{DATA_PATH}"
    async with HTTPTransport(config, transport=transport) as http:
        _, body = await http.request("GET", url)

    server = ServerInfo.from_dict(config.url, body)
    logger.info(f"Connected to Neo4j {server.version} at {config.url}")
    return server
