"""Pull: export the live schema into the schema directory.

Clears the ``*.sql`` files of the directory and regenerates them with
``mysqldump --no-data --tab``, one ``<table>.sql`` per table.

Note that ``--tab`` makes the MySQL server write the files itself, so the
directory must be reachable (and writable) by the server process.
"""

import logging
from pathlib import Path

from tabsync.commands import CommandRunner, mask_password, run_command
from tabsync.config.models import SyncSettings
from tabsync.schema.files import SCHEMA_FILE_SUFFIX
from tabsync.schema.models import PullResult

logger = logging.getLogger(__name__)

DUMP_OPTIONS = (
    "--no-data",
    "--skip-comments",
    "--skip-add-drop-table",
    "--skip-add-locks",
)


def build_dump_command(settings: SyncSettings, output_dir: Path) -> list[str]:
    """Argument vector dumping the live schema into ``output_dir``."""
    server = settings.server
    argv = [
        settings.tools.dump_command,
        f"--host={server.host}",
        f"--port={server.port}",
        f"--user={server.user}",
    ]
    if server.password is not None:
        argv.append(f"--password={server.password}")
    # mysqldump expects the directory with a trailing separator
    argv.append(f"--tab={output_dir.as_posix().rstrip('/')}/")
    argv.append(settings.live_db)
    argv.extend(DUMP_OPTIONS)
    return argv


def clear_schema_files(directory: Path) -> int:
    """Delete the ``*.sql`` regular files of ``directory``.

    Returns:
        Number of files deleted.
    """
    deleted = 0
    for entry in sorted(directory.iterdir()):
        if entry.is_file() and entry.suffix == SCHEMA_FILE_SUFFIX:
            entry.unlink()
            deleted += 1
    return deleted


async def run_pull(settings: SyncSettings, *, runner: CommandRunner = run_command) -> PullResult:
    """Regenerate the schema directory from the live database.

    Errors are logged and returned in ``PullResult.error``, never raised.
    """
    output_dir = Path(settings.schema_dir).resolve()
    result = PullResult(output_dir=output_dir)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        result.deleted_files = clear_schema_files(output_dir)
    except OSError as e:
        logger.error("Cannot prepare schema directory %s: %s", output_dir, e)
        result.error = str(e)
        return result
    logger.info("Just deleted %d `%s` files.", result.deleted_files, SCHEMA_FILE_SUFFIX)

    argv = build_dump_command(settings, output_dir)
    command_line = mask_password(argv, settings.server.password)
    try:
        completed = await runner(argv)
    except OSError as e:
        logger.error("Cannot run %s: %s", argv[0], e)
        result.error = f"cannot run {argv[0]}: {e}"
        return result

    if completed.returncode != 0:
        message = completed.stderr.strip() or f"exited with status {completed.returncode}"
        logger.error("Command failed\n\t%s\n%s", command_line, message)
        result.error = message
        return result

    logger.info("Executed command\n\t%s", command_line)
    result.success = True
    return result
