"""
Type definitions for Neo4j REST SDK requests and responses.

Provides strongly-typed wrappers around the transaction API payloads and the
tagged ``Ok``/``Err`` result returned by every dispatcher call.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeAlias, TypeVar

if TYPE_CHECKING:
    from .exceptions import Neo4jError

T = TypeVar("T")


class ResultFormat(StrEnum):
    """Shape of the data the server returns for each statement."""

    ROW = "row"
    GRAPH = "graph"


class TransactionState(StrEnum):
    """Transaction state of a connection.

    Committed and rolled back transactions return the connection to CLOSED.
    """

    CLOSED = "closed"
    OPEN = "open"


@dataclass
class Statement:
    """A single Cypher statement with its parameters."""

    statement: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self, formats: list[ResultFormat] | None = None) -> dict[str, Any]:
        """Render the statement in its wire form."""
        data: dict[str, Any] = {"statement": self.statement, "parameters": self.parameters}
        if formats:
            data["resultDataContents"] = [str(f) for f in formats]
        return data


StatementsArg: TypeAlias = (
    str | Statement | tuple[str, dict[str, Any]] | Iterable["str | Statement | tuple[str, dict[str, Any]]"] | None
)


def to_statements(statements: StatementsArg, params: dict[str, Any] | None = None) -> list[Statement]:
    """
    Normalize the accepted statement arguments into a list of ``Statement``.

    Accepts a single string (combined with ``params``), a ``Statement``, a
    ``(statement, parameters)`` tuple, or an iterable of any of those.

    Raises:
        TypeError: If ``params`` comes with anything but a single string, or
            the statements are a mapping or an unsupported type
    """
    if isinstance(statements, str):
        return [Statement(statements, dict(params or {}))]
    if params is not None:
        raise TypeError("params can only be given with a single statement string")
    if statements is None:
        return []
    if isinstance(statements, Mapping):
        raise TypeError(f"Unsupported statement type: {type(statements).__name__}")
    if isinstance(statements, Statement):
        return [statements]
    if isinstance(statements, tuple):
        text, parameters = statements
        return [Statement(text, dict(parameters or {}))]

    result: list[Statement] = []
    for item in statements:
        if isinstance(item, Statement):
            result.append(item)
        elif isinstance(item, str):
            result.append(Statement(item))
        elif isinstance(item, tuple):
            text, parameters = item
            result.append(Statement(text, dict(parameters or {})))
        else:
            raise TypeError(f"Unsupported statement type: {type(item).__name__}")
    return result


@dataclass(frozen=True)
class ServerError:
    """One entry of a response's ``errors`` array."""

    code: str
    message: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerError":
        return cls(code=str(data.get("code", "")), message=str(data.get("message", "")))


@dataclass
class StatementResult:
    """
    Result of a single statement.

    Attributes:
        columns: Column names, in order
        data: Raw data entries, each holding ``row`` and/or ``graph``
    """

    columns: list[str] = field(default_factory=list)
    data: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatementResult":
        return cls(columns=list(data.get("columns", [])), data=list(data.get("data", [])))

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Rows as dicts mapping column name to value."""
        return [dict(zip(self.columns, entry["row"])) for entry in self.data if "row" in entry]

    @property
    def graphs(self) -> list[dict[str, Any]]:
        """Graph entries (nodes and relationships) per row."""
        return [entry["graph"] for entry in self.data if "graph" in entry]


@dataclass
class Response:
    """
    Response from a transaction API call.

    Contains one StatementResult per statement sent.
    """

    results: list[StatementResult] = field(default_factory=list)
    commit: str | None = None
    expires: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Response":
        """Parse a response body whose ``errors`` array is empty."""
        transaction = data.get("transaction") or {}
        return cls(
            results=[StatementResult.from_dict(r) for r in data.get("results", [])],
            commit=data.get("commit"),
            expires=transaction.get("expires"),
            raw=data,
        )

    @property
    def first_result(self) -> StatementResult | None:
        return self.results[0] if self.results else None

    @property
    def all_rows(self) -> list[dict[str, Any]]:
        """Rows of every statement, in order."""
        rows: list[dict[str, Any]] = []
        for result in self.results:
            rows.extend(result.rows)
        return rows


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_error(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the exception that describes it."""

    error: "Neo4jError"

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_error(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise self.error


Result: TypeAlias = Ok[T] | Err
