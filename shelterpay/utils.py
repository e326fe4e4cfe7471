from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(id_str: Any) -> Optional[ObjectId]:
    """Return ObjectId for a valid hex id, None for anything else."""
    if isinstance(id_str, ObjectId):
        return id_str
    try:
        return ObjectId(str(id_str))
    except (InvalidId, TypeError):
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string, epoch milliseconds or datetime into UTC.

    Empty values return None. Raises ValueError for unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"timestamp out of range: {value!r}") from exc
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_minor_units(amount: Any) -> int:
    """Major currency units -> integer cents, half-up."""
    cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)
