# neo4j-rest-sdk Examples

# Meant to be run cell by cell (select a part of the code and execute it with Shift+Enter).
# Use the comments as cell definitions.

# Load requirements

import asyncio
import logging

from neo4j_rest_sdk import Configuration, Neo4jClient, Transaction, begin_or_raise, commit, rollback

logging.basicConfig(level=logging.DEBUG)

# Read NEO4J_URL, NEO4J_USERNAME, NEO4J_PASSWORD, ... from the environment
config = Configuration.from_env()


async def main() -> None:
    async with await Neo4jClient.open(config) as db:
        print(f"Neo4j {db.server_version()}")

        # One-shot query
        response = await db.query_or_raise("CREATE (n:Person {name: $name}) RETURN n", {"name": "Ann"})
        print(response.all_rows)

        # Tagged results: no exception, branch on the outcome
        result = await db.query("THIS IS NOT CYPHER")
        if result.is_error:
            print(f"Query failed: {result.error}")

        # Explicit transaction on one connection
        async with db.conn(graph_result=["row", "graph"]) as conn:
            await begin_or_raise(conn)
            committed = await commit(conn, "MATCH (n:Person {name: $name}) SET n.age = 42 RETURN n", {"name": "Ann"})
            print(committed.unwrap().first_result.graphs)

            await begin_or_raise(conn)
            await rollback(conn)

            # Commit on success, rollback on exception
            async with Transaction(conn) as tx:
                await tx.run("MATCH (n:Person) DETACH DELETE n")

        print((await db.property_keys()).unwrap())


asyncio.run(main())
