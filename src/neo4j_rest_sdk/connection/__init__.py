"""
Neo4j REST SDK Connection Module.

Provides the HTTP transport, the connection handle and the connection pool.
"""

from .handle import Connection
from .http import HTTPTransport
from .pool import ConnectionPool

__all__ = [
    "Connection",
    "ConnectionPool",
    "HTTPTransport",
]
