from typing import Any, Dict, List, Optional

from sqlalchemy.dialects import postgresql, sqlite

from caltrack.extensions import db

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(model):
    dialect = db.session.get_bind().dialect.name
    try:
        return _INSERTS[dialect](model)
    except KeyError:
        raise RuntimeError(f"Upsert not supported for dialect {dialect}")


def upsert(model, values: Dict[str, Any], key: List[str], update: Optional[List[str]] = None) -> None:
    """
    Insert-or-replace keyed by ``key``.

    With ``update`` empty the statement becomes insert-or-ignore. The caller
    commits.
    """
    stmt = _insert_for(model).values(**values)
    if update:
        stmt = stmt.on_conflict_do_update(
            index_elements=key,
            set_={name: values[name] for name in update},
        )
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=key)
    db.session.execute(stmt)
