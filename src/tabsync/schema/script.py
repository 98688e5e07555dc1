"""Push script assembly.

Turns a ``ReconciliationResult`` into one ``PushScript``: a ``CREATE`` for
tables only in files, a ``DROP TABLE IF EXISTS`` for tables only live, and
the structural diff output for tables in both.  Fragments follow the
``merged`` order, which is also the execution order on the live database.

Usage:
    from tabsync.schema.script import assemble_push_script

    script = await assemble_push_script(reconciliation, files, differ)
    print(script.render())
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from tabsync.config.models import DiffFailurePolicy
from tabsync.schema.differ import DiffFailedError
from tabsync.schema.files import read_schema_sql
from tabsync.schema.models import (
    DiffOutcome,
    FragmentKind,
    PushScript,
    ReconciliationResult,
    SchemaFile,
    ScriptFragment,
)

logger = logging.getLogger(__name__)


class Differ(Protocol):
    """Anything that can produce a structural diff for one table."""

    async def diff(self, table: str) -> DiffOutcome: ...


# ------------------------------------------------------------------
# Fragment builders
# ------------------------------------------------------------------


def create_fragment(schema_file: SchemaFile) -> ScriptFragment:
    """The table's full sanitized file contents, added as-is."""
    logger.info("`%s` is a new table to be created in the live database.", schema_file.table)
    return ScriptFragment(
        table=schema_file.table,
        kind=FragmentKind.CREATE,
        sql=read_schema_sql(schema_file.path),
    )


def drop_fragment(table: str) -> ScriptFragment:
    """``DROP TABLE IF EXISTS``, idempotent when already absent."""
    logger.info("`%s` is a table to be dropped from the live database.", table)
    return ScriptFragment(
        table=table,
        kind=FragmentKind.DROP,
        sql=f"DROP TABLE IF EXISTS {table};",
    )


def alter_fragment(outcome: DiffOutcome, on_diff_failure: DiffFailurePolicy) -> ScriptFragment:
    """Diff output as-is, or the failure policy applied to a failed diff.

    Raises:
        DiffFailedError: If the diff failed and the policy is ``abort``.
    """
    if outcome.ok:
        return ScriptFragment(table=outcome.table, kind=FragmentKind.ALTER, sql=outcome.output)

    if on_diff_failure == "abort":
        logger.error("Structural diff of `%s` failed: %s", outcome.table, outcome.error)
        raise DiffFailedError(outcome)

    if on_diff_failure == "keep":
        logger.warning(
            "Structural diff of `%s` failed: %s; keeping its output anyway.",
            outcome.table,
            outcome.error,
        )
        return ScriptFragment(table=outcome.table, kind=FragmentKind.ALTER, sql=outcome.output)

    logger.warning(
        "Structural diff of `%s` failed: %s; no ALTER emitted for it.",
        outcome.table,
        outcome.error,
    )
    return ScriptFragment(table=outcome.table, kind=FragmentKind.ALTER)


# ------------------------------------------------------------------
# Diffing
# ------------------------------------------------------------------


async def run_diffs(
    differ: Differ,
    tables: Iterable[str],
    concurrency: int = 1,
) -> dict[str, DiffOutcome]:
    """Diff every table with at most ``concurrency`` diffs in flight.

    ``concurrency=1`` runs the diffs strictly one after another, in order.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    tables = list(tables)
    semaphore = asyncio.Semaphore(concurrency)

    async def _diff(table: str) -> DiffOutcome:
        async with semaphore:
            return await differ.diff(table)

    outcomes = await asyncio.gather(*(_diff(table) for table in tables))
    return dict(zip(tables, outcomes))


# ------------------------------------------------------------------
# Assembly
# ------------------------------------------------------------------


async def assemble_push_script(
    reconciliation: ReconciliationResult,
    schema_files: Sequence[SchemaFile],
    differ: Differ,
    *,
    on_diff_failure: DiffFailurePolicy = "skip",
    concurrency: int = 1,
) -> PushScript:
    """Build the push script for a reconciliation.

    Args:
        reconciliation: Output of ``reconcile(file_tables, live_tables)``.
        schema_files: Schema files; every table of ``only_in_files`` must
            have one.
        differ: Structural-diff collaborator for tables in both.
        on_diff_failure: ``skip`` emits an empty fragment, ``keep`` keeps
            the failed tool's stdout, ``abort`` raises.
        concurrency: Maximum number of diffs running at once.

    Returns:
        ``PushScript`` with one fragment per table, in ``merged`` order.

    Raises:
        DiffFailedError: If a diff failed and ``on_diff_failure="abort"``.
        KeyError: If a table to create has no schema file.
    """
    files_by_table = {f.table: f for f in schema_files}
    only_in_files = set(reconciliation.only_in_files)
    only_live = set(reconciliation.only_live)

    outcomes = await run_diffs(differ, reconciliation.in_both, concurrency)

    fragments: list[ScriptFragment] = []
    for table in reconciliation.merged:
        if table in only_in_files:
            fragments.append(create_fragment(files_by_table[table]))
        elif table in only_live:
            fragments.append(drop_fragment(table))
        else:
            fragments.append(alter_fragment(outcomes[table], on_diff_failure))

    return PushScript(fragments=tuple(fragments))
