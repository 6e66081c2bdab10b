"""Cursor pagination over SQLAlchemy queries."""
from __future__ import annotations

import base64
from typing import Any, TypeVar

from sqlalchemy.orm import InstrumentedAttribute, Query

from campus_threads.core.errors import ValidationError
from campus_threads.schemas.common import PaginationOpts

T = TypeVar("T")

__all__ = ["encode_cursor", "decode_cursor", "paginate"]


def encode_cursor(key: int) -> str:
    """Return an opaque cursor for the last key of a page."""
    return base64.urlsafe_b64encode(str(key).encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> int:
    """Decode a cursor produced by :func:`encode_cursor`."""
    padding = "=" * (-len(cursor) % 4)
    try:
        return int(base64.urlsafe_b64decode(cursor + padding).decode())
    except (ValueError, UnicodeDecodeError) as err:
        raise ValidationError("Invalid pagination cursor") from err


def paginate(
    query: Query[Any],
    key: InstrumentedAttribute[int],
    opts: PaginationOpts,
    *,
    descending: bool = True,
) -> tuple[list[Any], str | None, bool]:
    """Run ``query`` as keyset pagination on the unique integer column ``key``.

    Returns:
        The rows of this page, the cursor for the next page (None when done),
        and whether the listing is exhausted.
    """
    if opts.cursor:
        last_key = decode_cursor(opts.cursor)
        query = query.filter(key < last_key if descending else key > last_key)
    query = query.order_by(key.desc() if descending else key.asc())

    # One extra row tells us whether another page exists.
    rows = query.limit(opts.num_items + 1).all()
    is_done = len(rows) <= opts.num_items
    rows = rows[: opts.num_items]
    if is_done or not rows:
        return rows, None, True

    last = rows[-1]
    # Rows may be ORM entities or (entity, ...) tuples from joined queries.
    entity = last[0] if isinstance(last, tuple) or hasattr(last, "_fields") else last
    return rows, encode_cursor(getattr(entity, key.key)), False
