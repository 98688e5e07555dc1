"""Schema files, live introspection, reconciliation, and push scripts.

Provides the schema file reader (``list_schema_files``), live table
listing (``list_live_tables``), scratch database loading, table-set
reconciliation (``reconcile``), structural diffs (``TableDiffer``), push
script assembly (``assemble_push_script``) and application.

Usage:
    from tabsync.schema import reconcile, assemble_push_script
    from tabsync.schema import list_schema_files, list_live_tables
"""

from tabsync.schema.apply import execute_push_script, write_push_script
from tabsync.schema.comparator import exclusive_names, merge_names, reconcile
from tabsync.schema.differ import DiffFailedError, TableDiffer
from tabsync.schema.files import (
    SchemaDirectoryError,
    list_schema_files,
    read_schema_sql,
    strip_conditional_comments,
)
from tabsync.schema.introspector import list_live_tables
from tabsync.schema.models import (
    DiffOutcome,
    FragmentKind,
    LoadResult,
    PullResult,
    PushResult,
    PushScript,
    ReconciliationResult,
    SchemaFile,
    SchemaSnapshot,
    ScriptFragment,
)
from tabsync.schema.scratch import (
    ScratchDatabaseError,
    drop_scratch_database,
    load_scratch_database,
    recreate_scratch_database,
)
from tabsync.schema.script import assemble_push_script

__all__ = [
    "reconcile",
    "merge_names",
    "exclusive_names",
    "list_schema_files",
    "read_schema_sql",
    "strip_conditional_comments",
    "SchemaDirectoryError",
    "list_live_tables",
    "recreate_scratch_database",
    "load_scratch_database",
    "drop_scratch_database",
    "ScratchDatabaseError",
    "TableDiffer",
    "DiffFailedError",
    "assemble_push_script",
    "write_push_script",
    "execute_push_script",
    "SchemaFile",
    "SchemaSnapshot",
    "ReconciliationResult",
    "FragmentKind",
    "ScriptFragment",
    "PushScript",
    "LoadResult",
    "DiffOutcome",
    "PushResult",
    "PullResult",
]
