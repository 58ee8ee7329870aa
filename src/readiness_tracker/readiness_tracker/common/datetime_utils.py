"""Timezone-aware calendar primitives.

Every date comparison in the engine goes through the local calendar date of the
owning company's timezone. Naive datetimes are treated as UTC instants.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Iterable, Iterator, Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError

DAY_NAMES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")

TimezoneLike = Union[str, tzinfo, None]
DayLike = Union[date, datetime]


@lru_cache(maxsize=64)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def resolve_timezone(tz: TimezoneLike) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    name = (tz or DEFAULT_TIMEZONE).strip()
    try:
        return _zone(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}")


def is_valid_timezone(name: str) -> bool:
    try:
        resolve_timezone(name)
    except ValidationError:
        return False
    return True


def parse_work_days(tokens: Union[str, Iterable[str], None]) -> frozenset:
    """Normalize work-day tokens: "mon, Tue" -> {"MON", "TUE"}."""
    if tokens is None:
        return frozenset()
    if isinstance(tokens, str):
        tokens = tokens.split(",")
    return frozenset(t.strip().upper() for t in tokens if t and t.strip())


def to_local(instant: datetime, tz: TimezoneLike) -> datetime:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(resolve_timezone(tz))


def local_date(value: DayLike, tz: TimezoneLike) -> date:
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return to_local(value, tz).date()
    return value


def format_local_date(value: DayLike, tz: TimezoneLike) -> str:
    """Canonical YYYY-MM-DD key of an instant or date in `tz`."""
    return local_date(value, tz).isoformat()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def day_name(value: DayLike, tz: TimezoneLike) -> str:
    return DAY_NAMES[local_date(value, tz).weekday()]


def is_work_day(value: DayLike, work_days, tz: TimezoneLike) -> bool:
    return day_name(value, tz) in parse_work_days(work_days)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Inclusive day-by-day walk. Empty when end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_work_days_in_range(
    start: DayLike,
    end: DayLike,
    work_days,
    tz: TimezoneLike,
    holiday_dates: Iterable[str] = (),
) -> int:
    tokens = parse_work_days(work_days)
    if not tokens:
        return 0
    first = local_date(start, tz)
    last = local_date(end, tz)
    if last < first:
        return 0
    holidays = set(holiday_dates)
    return sum(
        1
        for day in iter_dates(first, last)
        if DAY_NAMES[day.weekday()] in tokens and day.isoformat() not in holidays
    )


def effective_start_date(instant: datetime, tz: TimezoneLike) -> datetime:
    """Local midnight of the calendar day after `instant`.

    A join at 23:59 local still starts the next calendar day, not 24 hours later.
    """
    zone = resolve_timezone(tz)
    next_day = to_local(instant, zone).date() + timedelta(days=1)
    return datetime.combine(next_day, time.min, tzinfo=zone)


def effective_start_day(instant: datetime, tz: TimezoneLike) -> date:
    return effective_start_date(instant, tz).date()


def local_day_bounds(day: date, tz: TimezoneLike) -> Tuple[datetime, datetime]:
    """Half-open UTC instant range [start, end) covering local `day`."""
    zone = resolve_timezone(tz)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_range_bounds(start: date, end: date, tz: TimezoneLike) -> Tuple[datetime, datetime]:
    return local_day_bounds(start, tz)[0], local_day_bounds(end, tz)[1]


def period_bounds(days: int, today: date) -> Tuple[date, date]:
    """[today - (days - 1), today]."""
    return today - timedelta(days=days - 1), today


def previous_period(start: date, end: date) -> Tuple[date, date]:
    """Window of equal length ending the day before `start`."""
    length = (end - start).days + 1
    prev_end = start - timedelta(days=1)
    return prev_end - timedelta(days=length - 1), prev_end


def minutes_late(check_in: datetime, shift_start: time, grace_minutes: int, tz: TimezoneLike) -> int:
    """Whole minutes past the grace cutoff; 0 when within grace."""
    zone = resolve_timezone(tz)
    local = to_local(check_in, zone)
    cutoff = datetime.combine(local.date(), shift_start, tzinfo=zone) + timedelta(minutes=grace_minutes)
    if local <= cutoff:
        return 0
    return math.floor((local - cutoff).total_seconds() / 60)


def shift_bounds(day: date, shift_start: time, shift_end: time, tz: TimezoneLike) -> Tuple[datetime, datetime]:
    """Local start and end of the shift that begins on `day`.

    An end at or before the start (e.g. 22:00-06:00) falls on the following day.
    """
    zone = resolve_timezone(tz)
    start = datetime.combine(day, shift_start, tzinfo=zone)
    end = datetime.combine(day, shift_end, tzinfo=zone)
    if end <= start:
        end += timedelta(days=1)
    return start, end


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def today_in(tz: TimezoneLike, *, now: Optional[datetime] = None) -> date:
    return local_date(now or now_utc(), tz)
