"""Live schema introspection.

Queries the live database for the names of its tables, in the order the
server reports them.
"""

import logging

from tabsync.adapters.base import DatabaseClient
from tabsync.schema.models import SchemaSnapshot

logger = logging.getLogger(__name__)


async def list_live_tables(client: DatabaseClient) -> SchemaSnapshot:
    """Snapshot the tables of the database ``client`` is bound to.

    Runs ``SHOW TABLES``; the single result column is named after the
    database (``Tables_in_<db>``), so rows are read positionally.

    Raises:
        Exception: Any driver error -- callers treat it as fatal.
    """
    rows = await client.fetch_all("SHOW TABLES")
    tables = tuple(str(row[0]) for row in rows)
    logger.debug("Live tables: %s", ", ".join(tables) or "(none)")
    return SchemaSnapshot(source="live", tables=tables)
