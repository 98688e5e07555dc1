"""Push: apply the schema files to the live database.

Stages run strictly one after another, each awaiting the previous one:

1. list live tables (``SHOW TABLES``)
2. recreate the scratch database
3. list the schema files
4. source every file into the scratch database
5. reconcile file tables with live tables
6. assemble the push script (CREATE / DROP / structural diff)
7. export the script to its file
8. execute it on the live database (unless dry run)
9. drop the scratch database (unless retained) and close connections

Usage:
    from tabsync.push import run_push

    result = await run_push(settings)
    if not result.success:
        print(result.error)
"""

import logging
from collections.abc import Awaitable, Callable

from tabsync.adapters.base import DatabaseClient
from tabsync.config.models import ServerProfile, SyncSettings
from tabsync.factory import get_adapter
from tabsync.schema.apply import execute_push_script, write_push_script
from tabsync.schema.comparator import reconcile
from tabsync.schema.differ import TableDiffer
from tabsync.schema.files import file_snapshot, list_schema_files
from tabsync.schema.introspector import list_live_tables
from tabsync.schema.models import FragmentKind, PushResult
from tabsync.schema.scratch import (
    drop_scratch_database,
    load_scratch_database,
    recreate_scratch_database,
)
from tabsync.schema.script import Differ, assemble_push_script

logger = logging.getLogger(__name__)

Connector = Callable[[ServerProfile, str | None], Awaitable[DatabaseClient]]


async def _close(client: DatabaseClient, label: str) -> None:
    try:
        await client.close()
    except Exception as e:
        logger.warning("Failed to close %s connection: %s", label, e)


async def run_push(
    settings: SyncSettings,
    *,
    differ: Differ | None = None,
    connect: Connector = get_adapter,
) -> PushResult:
    """Reconcile the schema files with the live database and apply the result.

    Fatal errors (live listing, scratch creation, schema directory, aborted
    diff, script execution) are logged and returned in ``PushResult.error``;
    they are never raised.  Scratch cleanup and connection teardown happen on
    every path.

    Args:
        settings: Immutable run settings.
        differ: Structural-diff collaborator (default: ``TableDiffer``).
        connect: Coroutine creating a client for ``(profile, database)``.

    Returns:
        ``PushResult`` describing every stage that ran.
    """
    server = settings.server
    logger.info(
        "Using {schema_dir: %s, host: %s, port: %s, user: %s, live_db: %s, scratch_db: %s}",
        settings.schema_dir,
        server.host,
        server.port,
        server.user,
        settings.live_db,
        settings.scratch_db,
    )

    live_client = await connect(server, settings.live_db)
    server_client = await connect(server, None)
    scratch_client = await connect(server, settings.scratch_db)
    differ = differ or TableDiffer(settings)

    result = PushResult()
    try:
        result.live_tables = await list_live_tables(live_client)

        await recreate_scratch_database(server_client, settings.scratch_db)

        files = list_schema_files(settings.schema_dir)
        result.file_tables = file_snapshot(files)
        logger.info(
            "%d schema files, %d live tables", len(result.file_tables), len(result.live_tables)
        )

        result.load = await load_scratch_database(scratch_client, files)

        reconciliation = reconcile(result.file_tables.tables, result.live_tables.tables)
        result.reconciliation = reconciliation
        logger.info("%s", reconciliation.format_report())

        script = await assemble_push_script(
            reconciliation,
            files,
            differ,
            on_diff_failure=settings.on_diff_failure,
            concurrency=settings.diff_concurrency,
        )
        for kind in FragmentKind:
            tables = script.tables(kind)
            if tables:
                logger.info("%s: %s", kind.value.upper(), ", ".join(tables))
        result.script = script.render()
        logger.info("The final push script is\n%s", result.script)

        if settings.push_script_path is not None:
            if write_push_script(script, settings.push_script_path):
                result.script_path = settings.push_script_path

        try:
            result.executed = await execute_push_script(
                live_client, script, dry_run=settings.dry_run
            )
        except Exception as e:
            raise RuntimeError(f"Push script execution failed: {e}") from e

        result.success = True
    except Exception as e:
        logger.error("Push aborted: %s", e)
        result.error = str(e)
    finally:
        await _close(scratch_client, "scratch")
        if not settings.retain_scratch:
            result.scratch_dropped = await drop_scratch_database(
                server_client, settings.scratch_db
            )
        await _close(server_client, "server")
        await _close(live_client, "live")

    return result
