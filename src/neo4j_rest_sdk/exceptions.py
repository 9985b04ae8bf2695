"""
Neo4j REST SDK Exceptions.

Custom exception hierarchy for the SDK.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import ServerError


class Neo4jError(Exception):
    """Base exception for all Neo4j SDK errors."""

    def __init__(self, message: str, code: str | None = None, status: int | None = None):
        self.message = message
        self.code = code
        self.status = status
        super().__init__(message)


class ConfigError(Neo4jError):
    """Raised when the client configuration is missing or invalid."""

    pass


class NotInitializedError(ConfigError):
    """Raised when configuration is read before it has been loaded."""

    pass


class ConnectionError(Neo4jError):
    """Raised when the server cannot be reached (refused, DNS, timeout)."""

    pass


class ProtocolError(Neo4jError):
    """Raised when a response does not have the expected shape."""

    pass


class TransactionError(Neo4jError):
    """Raised when the server reports a failure or a transaction is misused.

    ``errors`` holds every entry of the response's ``errors`` array; ``code``
    and ``message`` mirror the first one.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status: int | None = None,
        errors: "list[ServerError] | None" = None,
    ):
        self.errors = errors or []
        super().__init__(message, code, status)

    @classmethod
    def from_server_errors(cls, errors: "list[ServerError]", status: int | None = None) -> "TransactionError":
        """Build an error from the server-reported ``errors`` entries."""
        first = errors[0]
        return cls(first.message, code=first.code, status=status, errors=errors)


class InvalidStateError(TransactionError):
    """Raised when an operation does not fit the connection's transaction state."""

    pass


class PoolTimeoutError(Neo4jError):
    """Raised when no pooled connection became available in time."""

    pass
