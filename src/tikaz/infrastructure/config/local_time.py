from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

DEFAULT_UTC_OFFSET_HOURS = 4.0


def restaurant_utc_offset_hours() -> float:
    raw = os.getenv("RESTAURANT_UTC_OFFSET_HOURS")
    if not raw:
        return DEFAULT_UTC_OFFSET_HOURS
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"RESTAURANT_UTC_OFFSET_HOURS is not a number: {raw}") from exc


def to_restaurant_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone(timedelta(hours=restaurant_utc_offset_hours())))
