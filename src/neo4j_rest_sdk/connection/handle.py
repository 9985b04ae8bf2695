"""
Connection handle.

Pure transaction state of one pooled connection: no network behavior lives here.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Self

from ..types import ResultFormat, TransactionState

if TYPE_CHECKING:
    from ..server import ServerInfo
    from .http import HTTPTransport


class Connection:
    """
    A pooled connection to a Neo4j server.

    Holds the server metadata, the HTTP transport, and the URLs of the
    transaction currently open on it, if any. A connection has at most one
    open transaction; ``commit_url`` and ``expires`` are only set while
    ``transaction_url`` is.
    """

    def __init__(
        self,
        server: "ServerInfo",
        transport: "HTTPTransport",
        is_overflow: bool = False,
    ):
        self.server = server
        self.transport = transport
        self.is_overflow = is_overflow
        self.transaction_url: str | None = None
        self.commit_url: str | None = None
        self.expires: str | None = None
        self._options: dict[str, Any] | None = None

    def __repr__(self) -> str:
        return (
            f"Connection(server={self.server.url!r}, state={self.state.value}, "
            f"transaction_url={self.transaction_url!r}, overflow={self.is_overflow})"
        )

    @property
    def state(self) -> TransactionState:
        return TransactionState.OPEN if self.transaction_url else TransactionState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is TransactionState.OPEN

    @property
    def server_version(self) -> str:
        return self.server.version

    @property
    def options(self) -> dict[str, Any] | None:
        """Per-call options, None when unset."""
        return self._options

    @property
    def result_formats(self) -> list[ResultFormat] | None:
        """Requested result formats from the ``graph_result`` option."""
        if not self._options or not self._options.get("graph_result"):
            return None
        return [ResultFormat(f) for f in self._options["graph_result"]]

    def with_options(self, graph_result: Iterable[str | ResultFormat] | None = None, **options: Any) -> Self:
        """
        Set per-call options.

        ``graph_result`` selects the result formats: ["row"], ["graph"] or both.
        """
        if graph_result is not None:
            options["graph_result"] = [ResultFormat(f) for f in graph_result]
        self._options = options or None
        return self

    def with_transaction_url(self, url: str) -> Self:
        self.transaction_url = url
        return self

    def with_commit_url(self, url: str) -> Self:
        self.commit_url = url
        return self

    def clear_transaction(self) -> Self:
        """Return to the closed state."""
        self.transaction_url = None
        self.commit_url = None
        self.expires = None
        return self

    def reset(self) -> Self:
        """Clear transaction state and options before the handle is reused."""
        self._options = None
        return self.clear_transaction()
