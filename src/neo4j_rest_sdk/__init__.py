"""
Neo4j REST SDK - An asyncio client for the Neo4j HTTP transaction API.

Supports:
- Pooled connections with transient overflow
- One-time server discovery shared by every connection
- One-shot queries and multi-request transactions (begin/execute/commit/rollback)
- Tagged results or raising variants, per call
"""

from .client import Neo4jClient
from .config import BasicAuth, ConfigStore, Configuration, load_config
from .connection.handle import Connection
from .connection.http import HTTPTransport
from .connection.pool import ConnectionPool
from .context import ClientContext
from .exceptions import (
    ConfigError,
    ConnectionError,
    InvalidStateError,
    Neo4jError,
    NotInitializedError,
    PoolTimeoutError,
    ProtocolError,
    TransactionError,
)
from .queries import property_keys, query, query_or_raise
from .server import ServerInfo, discover
from .transaction import (
    Transaction,
    begin,
    begin_or_raise,
    commit,
    commit_or_raise,
    execute,
    execute_or_raise,
    rollback,
    rollback_or_raise,
)
from .types import (
    Err,
    Ok,
    Response,
    Result,
    ResultFormat,
    ServerError,
    Statement,
    StatementResult,
    TransactionState,
)

__version__ = "0.1.0"
__all__ = [
    # Client
    "Neo4jClient",
    "ClientContext",
    # Configuration
    "BasicAuth",
    "ConfigStore",
    "Configuration",
    "load_config",
    # Server
    "ServerInfo",
    "discover",
    # Connections
    "Connection",
    "ConnectionPool",
    "HTTPTransport",
    # Queries
    "query",
    "query_or_raise",
    "property_keys",
    # Transactions
    "Transaction",
    "begin",
    "begin_or_raise",
    "execute",
    "execute_or_raise",
    "commit",
    "commit_or_raise",
    "rollback",
    "rollback_or_raise",
    # Types
    "Err",
    "Ok",
    "Response",
    "Result",
    "ResultFormat",
    "ServerError",
    "Statement",
    "StatementResult",
    "TransactionState",
    # Exceptions
    "Neo4jError",
    "ConfigError",
    "NotInitializedError",
    "ConnectionError",
    "ProtocolError",
    "TransactionError",
    "InvalidStateError",
    "PoolTimeoutError",
]
