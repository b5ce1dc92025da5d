from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Select, and_, or_

from tikaz.application.ports.repositories import InvalidCursorError


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def encode_cursor(created_at: datetime, row_id: str) -> str:
    payload = f"{as_utc(created_at).isoformat()}|{row_id}"
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        created_at_raw, row_id = raw.split("|", 1)
        return as_utc(datetime.fromisoformat(created_at_raw)), row_id
    except Exception as exc:
        raise InvalidCursorError("invalid cursor") from exc


def apply_newest_first(statement: Select[Any], model: Any, cursor: str | None, limit: int) -> Select[Any]:
    """Restrict ``statement`` to rows strictly after ``cursor`` in (created_at, id) descending order."""
    if cursor:
        cursor_created_at, cursor_id = decode_cursor(cursor)
        statement = statement.where(
            or_(
                model.created_at < cursor_created_at,
                and_(model.created_at == cursor_created_at, model.id < cursor_id),
            )
        )
    return statement.order_by(model.created_at.desc(), model.id.desc()).limit(limit + 1)


def split_page(models: list[Any], limit: int) -> tuple[list[Any], str | None]:
    page = models[:limit]
    next_cursor: str | None = None
    if len(models) > limit and page:
        last = page[-1]
        next_cursor = encode_cursor(last.created_at, last.id)
    return page, next_cursor
