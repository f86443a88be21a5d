"""Opaque cursor pagination helpers.

Cursors encode the sort key of the last returned row plus its id, so pages
stay stable when rows are inserted concurrently. Lists are ordered by
(sort key desc, id desc).
"""

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 50


class InvalidCursorError(ValueError):
    """Raised when a pagination cursor cannot be decoded."""


@dataclass
class Cursor:
    """Decoded cursor position."""

    value: datetime
    id: str


@dataclass
class Page(Generic[T]):
    """A page of results plus the cursor for the next page (None at the end)."""

    items: list[T]
    next_cursor: str | None


def encode_cursor(value: datetime, row_id: str) -> str:
    """Encode a (sort value, id) position as a URL-safe token."""
    payload = json.dumps({"v": value.isoformat(), "id": row_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(token: str) -> Cursor:
    """Decode a token produced by encode_cursor.

    Raises:
        InvalidCursorError: If the token is malformed.
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        data = json.loads(base64.urlsafe_b64decode(padded.encode()).decode())
        return Cursor(value=datetime.fromisoformat(data["v"]), id=str(data["id"]))
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(f"Invalid cursor: {token!r}") from e


def clamp_limit(limit: int | None) -> int:
    """Clamp a requested page size to [1, MAX_PAGE_LIMIT]."""
    if limit is None:
        return DEFAULT_PAGE_LIMIT
    return max(1, min(MAX_PAGE_LIMIT, limit))


def paginate(
    query: Query,
    sort_column: Any,
    id_column: Any,
    cursor: str | None,
    limit: int | None,
    sort_value: Callable[[Any], datetime],
) -> Page:
    """Apply keyset pagination to a query.

    Args:
        query: Base query, already filtered.
        sort_column: Column ordered descending (e.g. ``created_at``).
        id_column: Tie-breaker column, also descending.
        cursor: Token from a previous page, or None for the first page.
        limit: Requested page size (clamped).
        sort_value: Extracts the sort key from a returned row.

    Returns:
        A Page with at most ``limit`` items.
    """
    limit = clamp_limit(limit)
    if cursor:
        position = decode_cursor(cursor)
        query = query.filter(
            or_(
                sort_column < position.value,
                and_(sort_column == position.value, id_column < position.id),
            )
        )

    rows = query.order_by(sort_column.desc(), id_column.desc()).limit(limit + 1).all()
    has_more = len(rows) > limit
    rows = rows[:limit]

    next_cursor = None
    if has_more and rows:
        last = rows[-1]
        next_cursor = encode_cursor(sort_value(last), last.id)
    return Page(items=rows, next_cursor=next_cursor)
