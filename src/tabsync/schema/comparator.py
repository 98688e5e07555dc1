"""Table-set reconciliation using ordered set operations.

Compares the tables defined in schema files against the tables present in
the live database.  Pure logic -- no I/O, no database connections.

Usage:
    from tabsync.schema.comparator import reconcile

    result = reconcile(["users", "orders"], ["orders", "legacy"])
    result.only_in_files   # ('users',)
    result.only_live       # ('legacy',)
    result.in_both         # ('orders',)
    result.merged          # ('users', 'orders', 'legacy')
"""

from collections.abc import Iterable, Sequence

from tabsync.schema.models import ReconciliationResult


def merge_names(first: Iterable[str], second: Iterable[str]) -> list[str]:
    """Union of two name lists in first-seen order.

    Not a sorted union: names from *first* come in their own order, then
    names from *second* not seen yet.

    Examples:
        >>> merge_names(["b", "a"], ["c", "a", "b"])
        ['b', 'a', 'c']
    """
    seen: set[str] = set()
    merged: list[str] = []
    for name in (*first, *second):
        if name in seen:
            continue
        seen.add(name)
        merged.append(name)
    return merged


def exclusive_names(first: Iterable[str], second: Iterable[str]) -> list[str]:
    """Names of *first* that are absent from *second*, in *first* order.

    Examples:
        >>> exclusive_names(["a", "b", "c"], ["b"])
        ['a', 'c']
    """
    other: set[str] = set(second)
    result: list[str] = []
    for name in first:
        if name in other or name in result:
            continue
        result.append(name)
    return result


def reconcile(
    file_tables: Sequence[str],
    live_tables: Sequence[str],
) -> ReconciliationResult:
    """Split file-defined and live table names into create/drop/diff groups.

    Args:
        file_tables: Table names derived from ``<table>.sql`` files.
        live_tables: Table names reported by the live database.

    Returns:
        ``ReconciliationResult`` where ``only_in_files``, ``only_live`` and
        ``in_both`` are pairwise disjoint and together equal ``merged``.

    Examples:
        >>> result = reconcile(["a", "b"], ["b", "c"])
        >>> result.merged, result.only_in_files, result.only_live, result.in_both
        (('a', 'b', 'c'), ('a',), ('c',), ('b',))
    """
    merged = merge_names(file_tables, live_tables)
    only_in_files = exclusive_names(file_tables, live_tables)
    only_live = exclusive_names(live_tables, file_tables)

    exclusive: set[str] = {*only_in_files, *only_live}
    in_both = [name for name in merged if name not in exclusive]

    return ReconciliationResult(
        merged=tuple(merged),
        only_in_files=tuple(only_in_files),
        only_live=tuple(only_live),
        in_both=tuple(in_both),
    )
