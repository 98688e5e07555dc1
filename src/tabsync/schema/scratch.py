"""Scratch database management.

The scratch database is a structural mirror of the schema files: it is
recreated on every push and each ``<table>.sql`` is sourced into it, so the
structural-diff tool can compare ``scratch.table`` against ``live.table``
with identical semantics on both sides.

Usage:
    await recreate_scratch_database(server_client, "tmp")
    load = await load_scratch_database(scratch_client, files)
    ...
    await drop_scratch_database(server_client, "tmp")
"""

import logging
from collections.abc import Sequence

from tabsync.adapters.base import DatabaseClient
from tabsync.schema.files import read_schema_sql
from tabsync.schema.models import LoadResult, SchemaFile

logger = logging.getLogger(__name__)


class ScratchDatabaseError(Exception):
    """Raised when the scratch database can't be dropped or created."""

    pass


async def recreate_scratch_database(server_client: DatabaseClient, name: str) -> None:
    """Drop (if present) and create the scratch database.

    Args:
        server_client: Server-level connection (not bound to a database).
        name: Scratch database name.

    Raises:
        ScratchDatabaseError: If either statement fails.
    """
    drop_stmt = f"DROP DATABASE IF EXISTS {name}"
    create_stmt = f"CREATE DATABASE {name}"
    logger.info("About to execute\n\t%s\n\t%s", drop_stmt, create_stmt)

    for stmt in (drop_stmt, create_stmt):
        try:
            await server_client.execute(stmt)
        except Exception as e:
            raise ScratchDatabaseError(f"{stmt} failed: {e}") from e


async def load_scratch_database(
    scratch_client: DatabaseClient,
    files: Sequence[SchemaFile],
) -> LoadResult:
    """Source every schema file into the scratch database, one at a time.

    A file that fails to read or execute is logged and recorded as not
    sourced; the remaining files are still loaded.

    Args:
        scratch_client: Connection bound to the scratch database.
        files: Schema files in load order.

    Returns:
        ``LoadResult`` listing sourced tables and failures with their cause.
    """
    sourced: list[str] = []
    failed: dict[str, str] = {}

    for schema_file in files:
        logger.info("About to source %s.", schema_file.path.name)
        try:
            sql = read_schema_sql(schema_file.path)
            await scratch_client.execute_script(sql)
        except Exception as e:
            logger.warning("Not sourced %s: %s", schema_file.path.name, e)
            failed[schema_file.table] = str(e)
            continue
        logger.info("Sourced %s.", schema_file.path.name)
        sourced.append(schema_file.table)

    if failed:
        logger.warning(
            "%d of %d schema files were not sourced: %s",
            len(failed),
            len(files),
            ", ".join(failed),
        )
    return LoadResult(sourced=tuple(sourced), failed=failed)


async def drop_scratch_database(server_client: DatabaseClient, name: str) -> bool:
    """Drop the scratch database.

    Returns:
        True if the drop succeeded.  Failures are logged, never raised.
    """
    stmt = f"DROP DATABASE IF EXISTS {name}"
    logger.info("About to execute\n\t%s", stmt)
    try:
        await server_client.execute(stmt)
    except Exception as e:
        logger.error("Failed to drop scratch database %s: %s", name, e)
        return False
    return True
