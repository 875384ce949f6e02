from __future__ import annotations

from typing import Any, Dict, Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session


def _dialect_insert(db: Session, table):
    name = db.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise RuntimeError(f"Unsupported database backend for upserts: {name}")


def upsert_returning(
    db: Session,
    model,
    *,
    values: Dict[str, Any],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
    bump_version: bool = False,
) -> Row:
    """
    Single-statement INSERT ... ON CONFLICT DO UPDATE ... RETURNING.

    The unique constraint on conflict_columns serializes concurrent writers, so
    with bump_version the counter moves exactly once per successful write.
    Returns (id, row_version) when bump_version, else (id,).
    """
    table = model.__table__
    stmt = _dialect_insert(db, table).values(**values)

    set_: Dict[str, Any] = {col: stmt.excluded[col] for col in update_columns}
    if bump_version:
        set_["row_version"] = table.c.row_version + 1

    returning = [table.c.id]
    if bump_version:
        returning.append(table.c.row_version)

    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_=set_,
    ).returning(*returning)

    return db.execute(stmt).one()
