"""Schema file reading.

Lists ``<table>.sql`` files in a schema directory and reads them as
executable SQL, stripping the version-gated ``/*!...*/;`` directives that
mysqldump writes around every table definition.
"""

import logging
import re
from pathlib import Path

from tabsync.schema.models import SchemaFile, SchemaSnapshot

logger = logging.getLogger(__name__)

SCHEMA_FILE_SUFFIX = ".sql"

# /*!40101 SET character_set_client = utf8 */; plus the line breaks after it
_CONDITIONAL_COMMENT_RE = re.compile(r"/\*!.+\*/;(\r?\n)*")


class SchemaDirectoryError(Exception):
    """Raised when the schema directory is missing, unreadable, or empty."""

    pass


def strip_conditional_comments(sql: str) -> str:
    """Remove MySQL conditional-comment directives from dump output.

    Examples:
        >>> strip_conditional_comments("/*!40101 SET NAMES utf8 */;\\nCREATE TABLE t (id INT);\\n")
        'CREATE TABLE t (id INT);\\n'
        >>> strip_conditional_comments("SELECT 1;")
        'SELECT 1;'
    """
    return _CONDITIONAL_COMMENT_RE.sub("", sql)


def is_schema_file(path: Path) -> bool:
    """True for regular, non-symlinked files ending in ``.sql``; logs why others are skipped."""
    if not path.is_file() or path.is_symlink():
        logger.info("%s is not a regular file, skipped.", path)
        return False
    if path.suffix != SCHEMA_FILE_SUFFIX:
        logger.info("%s doesn't have `%s` extension, skipped.", path, SCHEMA_FILE_SUFFIX)
        return False
    return True


def list_schema_files(directory: Path | str) -> list[SchemaFile]:
    """List the schema files of a directory, sorted by file name.

    Args:
        directory: Directory holding ``<table>.sql`` files.

    Returns:
        One ``SchemaFile`` per matching entry.

    Raises:
        SchemaDirectoryError: If the directory can't be listed or holds no
            schema file.
    """
    directory = Path(directory)
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise SchemaDirectoryError(f"Cannot list schema directory {directory}: {e}") from e

    files = [
        SchemaFile(table=entry.name[: -len(SCHEMA_FILE_SUFFIX)], path=entry)
        for entry in entries
        if is_schema_file(entry)
    ]
    if not files:
        raise SchemaDirectoryError(
            f"No `{SCHEMA_FILE_SUFFIX}` files found in {directory}, nothing to push"
        )
    return files


def read_schema_sql(path: Path | str) -> str:
    """Read a schema file and return its sanitized SQL."""
    return strip_conditional_comments(Path(path).read_text(encoding="utf-8"))


def file_snapshot(files: list[SchemaFile]) -> SchemaSnapshot:
    """Snapshot of the table names defined by ``files``."""
    return SchemaSnapshot(source="files", tables=tuple(f.table for f in files))
