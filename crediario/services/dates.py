from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union

from dateutil.parser import isoparse

DateLike = Union[date, datetime, str]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(d: datetime) -> datetime:
    # sqlite devolve datetime sem tz; tudo aqui é gravado em UTC
    if d.tzinfo is None:
        return d.replace(tzinfo=timezone.utc)
    return d.astimezone(timezone.utc)


def parse_datetime(value: Optional[DateLike]) -> Optional[datetime]:
    """
    aceita date, datetime ou string ISO ("2026-01-30" ou "2026-01-30T10:00:00Z").
    retorna None se não der para interpretar.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return as_utc(isoparse(raw))
        except (ValueError, OverflowError):
            return None
    return None


def start_of_day(d: datetime) -> datetime:
    return d.replace(hour=0, minute=0, second=0, microsecond=0)


def calendar_days_between(later: datetime, earlier: datetime) -> int:
    return (later.date() - earlier.date()).days
