"""
HTTP Transport for the Neo4j REST SDK.

Wraps an ``httpx.AsyncClient`` with the server's authentication headers and
translates transport failures and error payloads into SDK exceptions.
"""

import logging
from typing import Any, Self

import httpx

from ..config import Configuration
from ..exceptions import ConnectionError, ProtocolError, TransactionError
from ..types import ServerError

logger = logging.getLogger(__name__)


class HTTPTransport:
    """
    Authenticated JSON-over-HTTP client bound to one Neo4j server.

    Every request carries the configured credentials. Response bodies are
    decoded as JSON; a non-empty ``errors`` array is raised as
    ``TransactionError`` whatever the HTTP status.
    """

    def __init__(
        self,
        config: Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the transport.

        Args:
            config: Client configuration (URL, timeout, credentials)
            transport: Optional httpx transport, used to swap the network layer
        """
        self.url = config.url
        self.timeout = config.timeout
        self._auth_header = config.auth_header()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Build request headers."""
        h = {
            "Accept": "application/json; charset=UTF-8",
            "Content-Type": "application/json",
            "X-Stream": "true",
        }
        if self._auth_header:
            h["Authorization"] = self._auth_header
        return h

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> Self:
        """Create the underlying HTTP client. Returns self for fluent API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self.connect()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
        expect_object: bool = True,
    ) -> tuple[httpx.Response, Any]:
        """
        Send a request and decode its JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            payload: JSON body, if any
            expect_object: Require the body to be a JSON object

        Returns:
            The raw response and its decoded body (empty dict for empty bodies)

        Raises:
            ConnectionError: If the server cannot be reached
            ProtocolError: If the body is not valid JSON, or not an object
                when ``expect_object`` is set
            TransactionError: If the server reports errors or an error status
        """
        if self._client is None:
            self.connect()
        assert self._client is not None

        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(method, url, json=payload)
        except httpx.TimeoutException as e:
            raise ConnectionError(f"Request timed out: {method} {url}: {e}")
        except httpx.RequestError as e:
            raise ConnectionError(f"Request failed: {method} {url}: {e}")

        body = self._decode(response)

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            raise TransactionError.from_server_errors(
                [ServerError.from_dict(err) for err in errors],
                status=response.status_code,
            )
        if response.is_error:
            raise TransactionError(
                f"HTTP error: {response.status_code} - {response.text}",
                status=response.status_code,
            )
        if expect_object and not isinstance(body, dict):
            raise ProtocolError(
                f"Expected a JSON object, got {type(body).__name__}",
                status=response.status_code,
            )
        return response, body

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            if response.is_error:
                raise TransactionError(
                    f"HTTP error: {response.status_code} - {response.text}",
                    status=response.status_code,
                )
            raise ProtocolError(
                f"Response is not valid JSON: {response.text[:200]}",
                status=response.status_code,
            )
