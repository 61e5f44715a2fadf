"""
closuretable.sql
================

SQLAlchemy helpers for keeping a persisted closure table in sync.

Public API:

- closure_table         : define the (ancestor, descendant, depth) Table.
- create_closure_schema : create the table (and its schema on PostgreSQL).
- build_statements      : turn a ChangeSet into executable Core statements.

Nothing in this package opens connections on its own; callers execute the
returned statements inside their own transaction.
"""

from __future__ import annotations

from .schema import closure_table, create_closure_schema
from .statements import build_statements

__all__ = [
    "closure_table",
    "create_closure_schema",
    "build_statements",
]
