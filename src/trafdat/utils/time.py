from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


DEFAULT_TZ = ZoneInfo("America/Chicago")

PERIOD_MS = 30_000


def stamp_ms(hour: int, minute: int, second: int) -> int:
    """Milliseconds since local midnight for a wall-clock time."""
    return (hour * 3600 + minute * 60 + second) * 1000


def period_of(stamp: int, period_ms: int = PERIOD_MS) -> int:
    if period_ms <= 0:
        raise ValueError("period_ms must be > 0")
    return stamp // period_ms


def parse_archive_date(value: str) -> date:
    return datetime.strptime(value, "%Y%m%d").date()


def period_timestamps(day: str, count: int, tz: ZoneInfo = DEFAULT_TZ) -> list[datetime]:
    midnight = datetime.combine(parse_archive_date(day), time(0, 0), tzinfo=tz)
    return [midnight + timedelta(milliseconds=i * PERIOD_MS) for i in range(count)]
