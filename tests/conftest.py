"""
Pytest configuration for neo4j-rest-sdk tests.

Unit tests run against ``FakeNeo4jServer`` through ``httpx.MockTransport``.
Integration tests (marked ``integration``) need a real Neo4j server and are
skipped when none answers at ``NEO4J_URL``.

Shared connection constants are defined here so every test file can import them
instead of hardcoding URLs and credentials.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from neo4j_rest_sdk import ClientContext, Configuration, ConnectionPool, load_config
from neo4j_rest_sdk.server import ServerInfo
from tests.fake_neo4j import BASE_URL, FakeNeo4jServer

# ---------------------------------------------------------------------------
# Shared connection constants (import these in test files)
# ---------------------------------------------------------------------------
NEO4J_URL = os.getenv("NEO4J_URL", "http://localhost:7474")
NEO4J_USERNAME = os.getenv("NEO4J_USERNAME", "neo4j")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD", "neo4j")


def is_neo4j_healthy(url: str = NEO4J_URL) -> bool:
    """Check if Neo4j answers on its REST data root."""
    try:
        response = httpx.get(
            f"{url}/db/data/",
            auth=(NEO4J_USERNAME, NEO4J_PASSWORD),
            headers={"Accept": "application/json"},
            timeout=2,
        )
        return response.status_code == 200
    except httpx.HTTPError:
        return False


@pytest.fixture(scope="session")
def neo4j_available() -> bool:
    """
    Session-scoped fixture that indicates if Neo4j is available.

    Use this fixture in tests that need to conditionally skip if Neo4j
    is not available.
    """
    return is_neo4j_healthy()


@pytest.fixture
def fake_server() -> FakeNeo4jServer:
    return FakeNeo4jServer()


@pytest.fixture
def transport(fake_server: FakeNeo4jServer) -> httpx.MockTransport:
    return fake_server.transport()


@pytest.fixture
def config_options() -> dict[str, Any]:
    return {
        "url": BASE_URL,
        "pool_size": 2,
        "max_overflow": 1,
        "timeout": 5,
        "basic_auth": {"username": "neo4j", "password": "test"},
    }


@pytest.fixture
def config(config_options: dict[str, Any]) -> Configuration:
    return load_config(config_options)


@pytest.fixture
def server_info(fake_server: FakeNeo4jServer) -> ServerInfo:
    return ServerInfo.from_dict(BASE_URL, fake_server.discovery)


@pytest.fixture
async def pool(
    config: Configuration, server_info: ServerInfo, transport: httpx.MockTransport
) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(config, server_info, transport=transport)
    yield pool
    await pool.close()


@pytest.fixture
async def context(
    config_options: dict[str, Any], transport: httpx.MockTransport
) -> AsyncGenerator[ClientContext, None]:
    ctx = await ClientContext.create(config_options, transport=transport)
    yield ctx
    await ctx.close()
