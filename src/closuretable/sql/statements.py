from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy import and_, bindparam, delete, insert, update
from sqlalchemy.sql.expression import Executable
from sqlalchemy.sql.schema import Table

from ..diff import ChangeSet

StatementBatch = Tuple[Executable, List[Dict[str, Any]]]

# Bind names must not collide with column names in UPDATE ... SET.
_B_ANCESTOR = "b_ancestor"
_B_DESCENDANT = "b_descendant"
_B_DEPTH = "b_depth"


def _columns(table: Table) -> Tuple[Any, Any, Any]:
    """
    Return the (ancestor, descendant, depth) columns of a closure table,
    relying on the column order used by closure_table().
    """
    cols = list(table.columns)
    if len(cols) != 3:
        raise ValueError(
            f"Closure table {table.name!r} must have exactly 3 columns "
            "(ancestor, descendant, depth), got "
            f"{[c.name for c in cols]!r}"
        )
    return cols[0], cols[1], cols[2]


def build_statements(table: Table, changes: ChangeSet) -> List[StatementBatch]:
    """
    Translate collected diff events into SQLAlchemy Core statements.

    Returns (statement, params) pairs in the order DELETE, UPDATE, INSERT;
    groups without rows are left out. Each pair is meant for
    ``connection.execute(statement, params)`` (executemany). Nothing is
    executed here.
    """
    ancestor, descendant, depth = _columns(table)
    batches: List[StatementBatch] = []

    key_match = and_(
        ancestor == bindparam(_B_ANCESTOR),
        descendant == bindparam(_B_DESCENDANT),
    )

    if changes.removed:
        batches.append(
            (
                delete(table).where(key_match),
                [
                    {_B_ANCESTOR: p.src, _B_DESCENDANT: p.dest}
                    for p in changes.removed
                ],
            )
        )

    if changes.updated:
        batches.append(
            (
                update(table)
                .where(key_match)
                .values({depth.name: bindparam(_B_DEPTH)}),
                [
                    {_B_ANCESTOR: p.src, _B_DESCENDANT: p.dest, _B_DEPTH: p.depth}
                    for p in changes.updated
                ],
            )
        )

    if changes.added:
        batches.append(
            (
                insert(table),
                [
                    {ancestor.name: p.src, descendant.name: p.dest, depth.name: p.depth}
                    for p in changes.added
                ],
            )
        )

    return batches
