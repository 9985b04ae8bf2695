"""Tests for transaction module."""

import httpx
import pytest

from neo4j_rest_sdk.config import Configuration
from neo4j_rest_sdk.connection.handle import Connection
from neo4j_rest_sdk.connection.pool import ConnectionPool
from neo4j_rest_sdk.exceptions import ConnectionError, InvalidStateError, ProtocolError, TransactionError
from neo4j_rest_sdk.server import ServerInfo
from neo4j_rest_sdk.transaction import (
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
from neo4j_rest_sdk.types import Err, Ok, TransactionState
from tests.fake_neo4j import EXPIRES, TX_URL, FakeNeo4jServer


@pytest.fixture
async def conn(pool: ConnectionPool):
    conn = await pool.checkout()
    yield conn
    await pool.checkin(conn)


class TestBegin:
    """Tests for begin()."""

    @pytest.mark.asyncio
    async def test_begin_opens_transaction(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        result = await begin(conn)

        assert isinstance(result, Ok)
        assert result.value is conn
        assert conn.state is TransactionState.OPEN
        assert conn.transaction_url == f"{TX_URL}/1"
        assert conn.commit_url == f"{TX_URL}/1/commit"
        assert conn.expires == EXPIRES

        request = fake_server.requests[-1]
        assert request.method == "POST"
        assert str(request.url) == TX_URL
        assert fake_server.bodies()[-1] == {"statements": []}

    @pytest.mark.asyncio
    async def test_begin_twice_is_invalid(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)
        sent = len(fake_server.requests)

        result = await begin(conn)

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidStateError)
        assert conn.transaction_url == f"{TX_URL}/1"
        assert len(fake_server.requests) == sent

    @pytest.mark.asyncio
    async def test_begin_without_location_uses_commit_url(self, config: Configuration, server_info: ServerInfo) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"commit": f"{TX_URL}/42/commit", "results": [], "errors": []})

        pool = ConnectionPool(config, server_info, transport=httpx.MockTransport(handler))
        async with pool.acquire() as c:
            await begin_or_raise(c)
            assert c.transaction_url == f"{TX_URL}/42"
            assert c.expires is None
            c.clear_transaction()
        await pool.close()

    @pytest.mark.asyncio
    async def test_begin_missing_commit_url(self, config: Configuration, server_info: ServerInfo) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(201, json={"results": [], "errors": []}))
        pool = ConnectionPool(config, server_info, transport=transport)

        async with pool.acquire() as c:
            result = await begin(c)
            assert isinstance(result, Err)
            assert isinstance(result.error, ProtocolError)
            assert c.state is TransactionState.CLOSED
        await pool.close()

    @pytest.mark.asyncio
    async def test_begin_rejected(self, config: Configuration, server_info: ServerInfo) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401, json={"errors": [{"code": "Neo.ClientError.Security.Unauthorized", "message": "No auth"}]}
            )

        pool = ConnectionPool(config, server_info, transport=httpx.MockTransport(handler))
        async with pool.acquire() as c:
            with pytest.raises(TransactionError, match="No auth"):
                await begin_or_raise(c)
            assert c.state is TransactionState.CLOSED
        await pool.close()


class TestCommit:
    """Tests for commit()."""

    @pytest.mark.asyncio
    async def test_commit_open_transaction(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)

        result = await commit(conn, "CREATE (n:Test {name: $name}) RETURN n", {"name": "A"})

        assert isinstance(result, Ok)
        assert result.value.all_rows == [{"n": {"name": "A"}}]
        assert str(fake_server.requests[-1].url) == f"{TX_URL}/1/commit"
        assert conn.state is TransactionState.CLOSED
        assert conn.transaction_url is None
        assert conn.commit_url is None
        assert fake_server.committed == [1]

    @pytest.mark.asyncio
    async def test_commit_without_statements(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)
        await execute_or_raise(conn, "CREATE (n:Test {name: $name})", {"name": "B"})

        response = await commit_or_raise(conn)

        assert response.results == []
        assert fake_server.bodies()[-1] == {"statements": []}
        assert fake_server.committed == [1]

    @pytest.mark.asyncio
    async def test_commit_closed_is_one_shot(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        result = await commit(conn, "RETURN $x", {"x": 1})

        assert isinstance(result, Ok)
        assert str(fake_server.requests[-1].url) == f"{TX_URL}/commit"
        assert conn.state is TransactionState.CLOSED
        assert fake_server.open_transactions == set()

    @pytest.mark.asyncio
    async def test_commit_list_with_params_raises(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)
        sent = len(fake_server.requests)

        with pytest.raises(TypeError):
            await commit(conn, ["RETURN $x"], {"x": 1})

        assert len(fake_server.requests) == sent
        assert conn.is_open

    @pytest.mark.asyncio
    async def test_commit_after_commit_is_one_shot(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)
        await commit_or_raise(conn, "RETURN 1")

        await commit_or_raise(conn, "RETURN 2")

        assert str(fake_server.requests[-1].url) == f"{TX_URL}/commit"
        assert conn.state is TransactionState.CLOSED

    @pytest.mark.asyncio
    async def test_commit_server_error_closes_transaction(self, conn: Connection) -> None:
        await begin_or_raise(conn)

        result = await commit(conn, "FAIL ME")

        assert isinstance(result, Err)
        assert isinstance(result.error, TransactionError)
        assert conn.state is TransactionState.CLOSED

    @pytest.mark.asyncio
    async def test_commit_transport_error_keeps_transaction(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)
        fake_server.unreachable = True

        result = await commit(conn, "RETURN 1")

        assert isinstance(result, Err)
        assert isinstance(result.error, ConnectionError)
        assert conn.state is TransactionState.OPEN
        conn.clear_transaction()

    @pytest.mark.asyncio
    async def test_commit_or_raise_raises_carried_error(self, conn: Connection) -> None:
        with pytest.raises(TransactionError, match="Invalid input"):
            await commit_or_raise(conn, "FAIL ME")


class TestExecute:
    """Tests for execute()."""

    @pytest.mark.asyncio
    async def test_execute_keeps_transaction_open(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)

        response = await execute_or_raise(conn, "CREATE (n:Test {name: $name}) RETURN n", {"name": "A"})

        assert response.all_rows == [{"n": {"name": "A"}}]
        assert str(fake_server.requests[-1].url) == f"{TX_URL}/1"
        assert conn.state is TransactionState.OPEN
        assert conn.commit_url == f"{TX_URL}/1/commit"
        assert 1 in fake_server.open_transactions
        await rollback_or_raise(conn)

    @pytest.mark.asyncio
    async def test_execute_requires_open_transaction(self, conn: Connection) -> None:
        result = await execute(conn, "RETURN 1")

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidStateError)

    @pytest.mark.asyncio
    async def test_execute_error_closes_transaction(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)

        result = await execute(conn, "FAIL ME")

        assert isinstance(result, Err)
        assert conn.state is TransactionState.CLOSED
        assert fake_server.open_transactions == set()


class TestRollback:
    """Tests for rollback()."""

    @pytest.mark.asyncio
    async def test_begin_then_rollback(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)

        result = await rollback(conn)

        assert isinstance(result, Ok)
        assert result.value is conn
        assert conn.state is TransactionState.CLOSED
        assert conn.transaction_url is None
        assert fake_server.requests[-1].method == "DELETE"
        assert str(fake_server.requests[-1].url) == f"{TX_URL}/1"
        assert fake_server.rolled_back == [1]

    @pytest.mark.asyncio
    async def test_rollback_without_transaction(self, conn: Connection) -> None:
        result = await rollback(conn)

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidStateError)

    @pytest.mark.asyncio
    async def test_rollback_expired_transaction(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        await begin_or_raise(conn)
        fake_server.open_transactions.clear()

        with pytest.raises(TransactionError) as exc_info:
            await rollback_or_raise(conn)

        assert exc_info.value.status == 404
        assert exc_info.value.code == "Neo.ClientError.Transaction.TransactionNotFound"
        assert conn.state is TransactionState.CLOSED

    @pytest.mark.asyncio
    async def test_begin_after_rollback(self, conn: Connection) -> None:
        await begin_or_raise(conn)
        await rollback_or_raise(conn)

        await begin_or_raise(conn)

        assert conn.transaction_url == f"{TX_URL}/2"
        await rollback_or_raise(conn)


class TestTransaction:
    """Tests for the Transaction context manager."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        async with Transaction(conn) as tx:
            assert tx.is_active
            assert tx.connection is conn
            await tx.run("CREATE (n:Test {name: $name})", {"name": "A"})

        assert not tx.is_active
        assert tx.response is not None
        assert fake_server.committed == [1]

    @pytest.mark.asyncio
    async def test_rolls_back_on_exception(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            async with Transaction(conn):
                raise RuntimeError("boom")

        assert conn.state is TransactionState.CLOSED
        assert fake_server.rolled_back == [1]

    @pytest.mark.asyncio
    async def test_server_error_propagates(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        with pytest.raises(TransactionError):
            async with Transaction(conn) as tx:
                await tx.run("FAIL ME")

        assert conn.state is TransactionState.CLOSED
        assert fake_server.rolled_back == []

    @pytest.mark.asyncio
    async def test_explicit_commit(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        async with Transaction(conn) as tx:
            response = await tx.commit("RETURN $x", {"x": 1})

            assert response.all_rows == [{"n": {"x": 1}}]
            with pytest.raises(InvalidStateError):
                await tx.commit()

        assert fake_server.committed == [1]

    @pytest.mark.asyncio
    async def test_explicit_rollback(self, conn: Connection, fake_server: FakeNeo4jServer) -> None:
        async with Transaction(conn) as tx:
            await tx.rollback()

        assert fake_server.rolled_back == [1]
        assert fake_server.committed == []
