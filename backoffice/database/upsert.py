# -*- coding: utf-8 -*-
"""
Dialect-aware INSERT ... ON CONFLICT helpers.

Production runs on PostgreSQL and the test-suite on SQLite; both dialects
expose the same ``on_conflict_do_nothing`` / ``on_conflict_do_update`` API,
so callers only need the right ``insert`` construct for the bound engine.
"""
from typing import Iterable, List, Union

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_for(session: Session, model):
    """Return an upsert-capable ``insert(model)`` for the session's dialect."""
    dialect = session.get_bind().dialect.name
    try:
        return _INSERTS[dialect](model)
    except KeyError:
        raise NotImplementedError(f"ON CONFLICT upserts are not supported on '{dialect}'")


def insert_ignore(session: Session, model, values: dict, conflict_columns: Iterable[str]) -> bool:
    """
    INSERT ... ON CONFLICT DO NOTHING.

    Returns True when a new row was written, False when the conflict
    target already existed.
    """
    stmt = insert_for(session, model).values(values)
    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    result = session.execute(stmt)
    return result.rowcount == 1


def upsert(session: Session, model, rows: Union[dict, List[dict]],
           conflict_columns: Iterable[str], update_columns: Iterable[str]) -> None:
    """
    INSERT ... ON CONFLICT DO UPDATE SET col = EXCLUDED.col.

    ``rows`` may be a single dict or a list of dicts; a list is written as
    one multi-row statement, so the whole batch succeeds or fails together.
    """
    stmt = insert_for(session, model).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={col: getattr(stmt.excluded, col) for col in update_columns},
    )
    session.execute(stmt)


def select_for_update(session: Session, model, *criteria):
    """
    ``session.query(model).filter(*criteria)`` holding a write lock until
    the transaction ends.

    PostgreSQL takes row locks with FOR UPDATE. SQLite ignores FOR UPDATE,
    so there a no-op UPDATE on the same rows opens the write transaction
    first; concurrent callers then queue on the database lock instead of
    reading rows that are about to change.
    """
    query = session.query(model).filter(*criteria)
    if session.get_bind().dialect.name == "sqlite":
        pk = sa_inspect(model).primary_key[0]
        session.query(model).filter(*criteria).update({pk: pk}, synchronize_session=False)
    return query.with_for_update()
