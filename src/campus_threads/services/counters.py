"""Atomic maintenance of denormalised counters.

Counters are adjusted with a single ``UPDATE ... SET c = c + 1`` statement so
two concurrent toggles on the same row cannot lose an update. Decrements are
floored at zero inside the same statement.
"""
from __future__ import annotations

from sqlalchemy import case, select, update
from sqlalchemy.orm import InstrumentedAttribute, Session

__all__ = ["increment", "decrement_floored", "current_value"]


def current_value(db: Session, column: InstrumentedAttribute[int], row_id: int) -> int:
    """Read the committed-or-flushed value of a counter column."""
    model = column.class_
    value = db.execute(select(column).where(model.id == row_id)).scalar_one_or_none()
    return int(value or 0)


def increment(
    db: Session,
    column: InstrumentedAttribute[int],
    row_id: int,
    delta: int = 1,
) -> int:
    """Add ``delta`` to ``column`` on row ``row_id`` and return the new value."""
    model = column.class_
    db.execute(
        update(model)
        .where(model.id == row_id)
        .values({column.key: column + delta})
        .execution_options(synchronize_session="fetch")
    )
    return current_value(db, column, row_id)


def decrement_floored(db: Session, column: InstrumentedAttribute[int], row_id: int) -> int:
    """Subtract one from ``column`` without going below zero; return the new value."""
    model = column.class_
    db.execute(
        update(model)
        .where(model.id == row_id)
        .values({column.key: case((column > 0, column - 1), else_=0)})
        .execution_options(synchronize_session="fetch")
    )
    return current_value(db, column, row_id)
