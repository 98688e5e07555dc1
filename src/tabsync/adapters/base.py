"""The connection interface used by every pipeline stage.

``DatabaseClient`` is what push and pull talk to: a query that returns rows,
a single statement, a multi-statement batch, and teardown.

Usage:
    from tabsync.adapters.base import DatabaseClient

    async def do_work(client: DatabaseClient) -> None:
        rows = await client.fetch_all("SHOW TABLES")
        await client.execute("CREATE DATABASE tmp")
        await client.execute_script("CREATE TABLE a (id INT); CREATE TABLE b (id INT);")
        await client.close()
"""

from typing import Any, Protocol


class DatabaseClient(Protocol):
    """A connection bound to one MySQL database, or to the bare server.

    Every method is a coroutine.
    """

    async def fetch_all(self, sql: str) -> list[tuple[Any, ...]]:
        """Run a query and return every row as a tuple.

        Args:
            sql: Raw SQL query (e.g., ``"SHOW TABLES"``).

        Returns:
            List of row tuples, in the order the server returned them.
        """
        ...

    async def execute(self, sql: str) -> None:
        """Execute a single raw SQL statement (DDL or other non-query).

        Args:
            sql: Raw SQL statement to execute.

        Example:
            await client.execute("DROP DATABASE IF EXISTS tmp")
        """
        ...

    async def execute_script(self, sql: str) -> None:
        """Execute a multi-statement SQL batch in one round trip.

        Every result set is consumed so that an error in any statement of
        the batch is raised to the caller.

        Args:
            sql: One or more ``;``-separated SQL statements.

        Raises:
            Exception: The driver error of the first failing statement.
        """
        ...

    async def close(self) -> None:
        """Close database connection and clean up resources."""
        ...
