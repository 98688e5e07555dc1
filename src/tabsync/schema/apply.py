"""Persisting and executing a push script.

The script is always written to its export path first (when one is
configured), so a failed or skipped execution leaves it available for
inspection and manual replay.
"""

import logging
from pathlib import Path

from tabsync.adapters.base import DatabaseClient
from tabsync.schema.models import PushScript

logger = logging.getLogger(__name__)


def write_push_script(script: PushScript, path: Path | str) -> bool:
    """Write the rendered script to ``path``, overwriting any existing file.

    Returns:
        True if the file was written.  An ``OSError`` is logged and reported
        as False; it never prevents execution.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(script.render(), encoding="utf-8")
    except OSError as e:
        logger.error("Failed to export push script to %s: %s", path, e)
        return False
    logger.info("Push script exported to %s", path)
    return True


async def execute_push_script(
    client: DatabaseClient,
    script: PushScript,
    *,
    dry_run: bool = False,
) -> bool:
    """Send the whole script to the live database as one batch.

    Args:
        client: Connection bound to the live database.
        script: Assembled push script.
        dry_run: If True, the client is not called at all.

    Returns:
        True if the script was executed, False if it was skipped (dry run or
        nothing to apply).

    Raises:
        Exception: The driver error of the first failing statement.  There
            is no partial-success accounting.
    """
    if dry_run:
        logger.info("Dry run: push script not executed.")
        return False
    if script.is_empty:
        logger.info("Push script is empty: live database already matches the schema files.")
        return False

    await client.execute_script(script.render())
    logger.info("Push script executed against the live database.")
    return True
