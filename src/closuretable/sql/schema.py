from __future__ import annotations

from typing import Optional

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    Integer,
    BigInteger,
    String,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.types import TypeEngine

from ..config import ClosureTableSettings, get_settings

_ID_TYPES: dict[str, type[TypeEngine]] = {
    "integer": Integer,
    "bigint": BigInteger,
    "string": String,
}


def closure_table(
    metadata: MetaData,
    settings: Optional[ClosureTableSettings] = None,
) -> Table:
    """
    Define the persisted closure table on `metadata`.

    Columns (names from `settings`, default get_settings().table):
      - ancestor   : id of the ancestor (primary key, part 1)
      - descendant : id of the descendant (primary key, part 2)
      - depth      : minimum number of edges between them
    """
    if settings is None:
        settings = get_settings().table

    id_type = _ID_TYPES[settings.id_type]

    return Table(
        settings.table_name,
        metadata,
        Column(settings.ancestor_column, id_type, primary_key=True),
        Column(settings.descendant_column, id_type, primary_key=True),
        Column(settings.depth_column, Integer, nullable=False),
        schema=settings.schema_name,
    )


def create_closure_schema(engine: Engine, table: Table) -> None:
    """
    Create the closure table if it does not exist yet.

    - For PostgreSQL with a schema configured: CREATE SCHEMA IF NOT EXISTS
    - Otherwise rely on Table.create(checkfirst=True).
    """
    with engine.begin() as conn:
        if table.schema and engine.dialect.name == "postgresql":
            conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{table.schema}"'))
        table.create(conn, checkfirst=True)
