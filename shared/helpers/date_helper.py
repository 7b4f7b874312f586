from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse


def utc_today() -> date:
    """Current civil date in UTC. Callers compute it once and pass it down."""
    return datetime.now(timezone.utc).date()


def parse_iso_date(value: Any) -> Optional[date]:
    """
    Strictly convert a stored value to a calendar date.

    - None / "" -> None
    - date -> itself, datetime -> its UTC civil date
    - "YYYY-MM-DD" or an ISO datetime string -> date

    Anything else raises ValueError instead of degrading to a sentinel.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _utc_date(value)

    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO date string, got {type(value).__name__}")

    text = value.strip()
    if text == "":
        return None

    if len(text) <= 10:
        return date.fromisoformat(text)
    return _utc_date(isoparse(text))


def _utc_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(timezone.utc).date()
