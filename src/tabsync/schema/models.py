"""Models for schema snapshots, reconciliation, and push scripts.

This module contains the schema-domain models:
- Snapshot models: SchemaFile, SchemaSnapshot
- Reconciliation: ReconciliationResult
- Script models: FragmentKind, ScriptFragment, PushScript
- Stage results: LoadResult, DiffOutcome, PushResult, PullResult

Everything here is immutable; each pipeline stage returns a new value
instead of updating shared state.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Snapshots
# ============================================================================


@dataclass(frozen=True)
class SchemaFile:
    """A ``<table>.sql`` definition file.

    Example:
        >>> SchemaFile(table="users", path=Path("schema/users.sql")).table
        'users'
    """

    table: str
    path: Path


class SchemaSnapshot(BaseModel):
    """Ordered table names, either defined in files or present live."""

    model_config = ConfigDict(frozen=True)

    source: Literal["files", "live"]
    tables: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.tables)


# ============================================================================
# Reconciliation
# ============================================================================


class ReconciliationResult(BaseModel):
    """Three disjoint table-name groups plus their ordered union.

    ``merged`` keeps first-seen order: file tables first, then tables only
    found live.
    """

    model_config = ConfigDict(frozen=True)

    merged: tuple[str, ...] = ()
    only_in_files: tuple[str, ...] = ()
    only_live: tuple[str, ...] = ()
    in_both: tuple[str, ...] = ()

    @property
    def change_count(self) -> int:
        """Tables to create plus tables to drop."""
        return len(self.only_in_files) + len(self.only_live)

    def format_report(self) -> str:
        """Format the reconciliation as a human-readable report."""
        lines = [f"Tables: {len(self.merged)}"]
        if self.only_in_files:
            lines.append(f"  To create ({len(self.only_in_files)}): {', '.join(self.only_in_files)}")
        if self.only_live:
            lines.append(f"  To drop ({len(self.only_live)}): {', '.join(self.only_live)}")
        if self.in_both:
            lines.append(f"  To diff ({len(self.in_both)}): {', '.join(self.in_both)}")
        return "\n".join(lines)


# ============================================================================
# Push script
# ============================================================================


class FragmentKind(str, Enum):
    """What a script fragment does to its table."""

    CREATE = "create"
    DROP = "drop"
    ALTER = "alter"


@dataclass(frozen=True)
class ScriptFragment:
    """The SQL produced for one table.

    ``sql`` may be empty for ``ALTER`` when the table has no structural
    difference.
    """

    table: str
    kind: FragmentKind
    sql: str = ""

    @property
    def is_empty(self) -> bool:
        """True if the SQL holds nothing but blank lines and line comments."""
        for line in self.sql.splitlines():
            line = line.strip()
            if line and not line.startswith(("#", "--")):
                return False
        return True


@dataclass(frozen=True)
class PushScript:
    """Ordered fragments making up one executable batch."""

    fragments: tuple[ScriptFragment, ...] = ()

    def render(self) -> str:
        """Concatenate fragments, each followed by a newline.

        Example:
            >>> PushScript((ScriptFragment("c", FragmentKind.DROP, "DROP TABLE IF EXISTS c;"),)).render()
            'DROP TABLE IF EXISTS c;\\n'
        """
        return "".join(f"{fragment.sql}\n" for fragment in self.fragments)

    @property
    def is_empty(self) -> bool:
        """True if no fragment carries any SQL."""
        return all(fragment.is_empty for fragment in self.fragments)

    def tables(self, kind: FragmentKind) -> list[str]:
        """Tables with a non-empty fragment of ``kind``, in script order."""
        return [f.table for f in self.fragments if f.kind is kind and not f.is_empty]


# ============================================================================
# Stage results
# ============================================================================


class LoadResult(BaseModel):
    """Outcome of loading schema files into the scratch database."""

    model_config = ConfigDict(frozen=True)

    sourced: tuple[str, ...] = ()
    failed: dict[str, str] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.sourced) + len(self.failed)


class DiffOutcome(BaseModel):
    """Result of one structural-diff invocation.

    Either success with the tool's stdout (possibly empty) or failure with
    the cause.
    """

    model_config = ConfigDict(frozen=True)

    table: str
    ok: bool
    output: str = ""
    error: str | None = None
    returncode: int | None = None


class PushResult(BaseModel):
    """Outcome of a full push run."""

    success: bool = False
    file_tables: SchemaSnapshot | None = None
    live_tables: SchemaSnapshot | None = None
    reconciliation: ReconciliationResult | None = None
    load: LoadResult | None = None
    script: str | None = None
    script_path: Path | None = None
    executed: bool = False
    scratch_dropped: bool = False
    error: str | None = None


class PullResult(BaseModel):
    """Outcome of a pull run."""

    success: bool = False
    output_dir: Path | None = None
    deleted_files: int = 0
    error: str | None = None
