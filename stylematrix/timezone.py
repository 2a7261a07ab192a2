# -*- coding: utf-8 -*-
"""
Business-local calendar (GST, fixed UTC+4, no daylight saving).

Instants are stored and queried in UTC; every "which day / which month does this
sale belong to" decision goes through this module.

Month arguments named ``month_index`` are 0-based (0 = January, 11 = December)
and may overflow in either direction: -1 is December of the previous year,
12 is January of the next one.
"""
from __future__ import annotations

import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

from dateutil import parser as date_parser

UTC = timezone.utc
BUSINESS_TZ = timezone(timedelta(hours=4), "GST")

# last representable moment of a local day, millisecond resolution
_END_OF_DAY = time(23, 59, 59, 999000)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

Instant = Union[datetime, str]
DayLike = Union[date, datetime, str]


# ------------ instants --------------------------------------------------------
def to_utc_instant(value: Instant) -> datetime:
    """Aware UTC datetime from an ISO string or datetime (naive means UTC)."""
    if isinstance(value, str):
        value = date_parser.isoparse(value)
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime or ISO string, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_local(value: Instant) -> datetime:
    return to_utc_instant(value).astimezone(BUSINESS_TZ)


def _local_date(value: DayLike) -> date:
    # datetime is a date subclass: an instant, not a calendar day
    if isinstance(value, (datetime, str)):
        return to_local(value).date()
    if isinstance(value, date):
        return value
    raise TypeError(f"expected date, datetime or ISO string, got {type(value).__name__}")


def to_local_calendar_date(instant: Instant) -> date:
    """Local (year, month, day) of an instant; the grouping key for daily buckets."""
    return to_local(instant).date()


def now_as_utc_instant(now: Optional[datetime] = None) -> datetime:
    """
    Current local wall clock, whole seconds, expressed as a UTC instant.
    Used as the stored ``transaction_date`` of new sales.
    """
    current = to_utc_instant(now) if now is not None else datetime.now(UTC)
    wall = current.astimezone(BUSINESS_TZ).replace(microsecond=0)
    return wall.astimezone(UTC)


def local_today(now: Optional[datetime] = None) -> date:
    return to_local(now if now is not None else datetime.now(UTC)).date()


# ------------ day boundaries --------------------------------------------------
def start_of_local_day(value: DayLike) -> datetime:
    d = _local_date(value)
    return datetime.combine(d, time.min, tzinfo=BUSINESS_TZ).astimezone(UTC)


def end_of_local_day(value: DayLike) -> datetime:
    d = _local_date(value)
    return datetime.combine(d, _END_OF_DAY, tzinfo=BUSINESS_TZ).astimezone(UTC)


def local_day_bounds(value: DayLike) -> Tuple[datetime, datetime]:
    return start_of_local_day(value), end_of_local_day(value)


# ------------ month boundaries ------------------------------------------------
def normalize_month(year: int, month_index: int) -> Tuple[int, int]:
    extra, month_index = divmod(month_index, 12)
    return year + extra, month_index


def shift_month(year: int, month_index: int, delta: int) -> Tuple[int, int]:
    return normalize_month(year, month_index + delta)


def start_of_local_month(year: int, month_index: int) -> datetime:
    y, mi = normalize_month(year, month_index)
    return start_of_local_day(date(y, mi + 1, 1))


def end_of_local_month(year: int, month_index: int) -> datetime:
    # last day of the month = day 0 of the next one
    y, mi = normalize_month(year, month_index + 1)
    return end_of_local_day(date(y, mi + 1, 1) - timedelta(days=1))


def local_month_bounds(year: int, month_index: int) -> Tuple[datetime, datetime]:
    return start_of_local_month(year, month_index), end_of_local_month(year, month_index)


def days_in_month(year: int, month_index: int) -> int:
    y, mi = normalize_month(year, month_index)
    return calendar.monthrange(y, mi + 1)[1]


def first_weekday_of_month(year: int, month_index: int) -> int:
    """Weekday of the 1st, 0 = Sunday (calendar grids start on Sunday)."""
    y, mi = normalize_month(year, month_index)
    return (date(y, mi + 1, 1).weekday() + 1) % 7


def month_name(month_index: int) -> str:
    return MONTH_NAMES[month_index % 12]


# ------------ query-string parsing --------------------------------------------
def _year_in_range(year: int) -> bool:
    # the first and last representable years overflow once shifted to UTC or a neighbour month
    return MINYEAR < year < MAXYEAR


def parse_month(qs: Optional[str], today: Optional[date] = None) -> Tuple[int, int]:
    """``YYYY-MM`` -> (year, month_index); anything else -> the current local month."""
    today = today or local_today()
    if qs:
        try:
            y, m = map(int, qs.strip().split("-")[:2])
            if 1 <= m <= 12 and _year_in_range(y):
                return y, m - 1
        except ValueError:
            pass
    return today.year, today.month - 1


def format_month_param(year: int, month_index: int) -> str:
    y, mi = normalize_month(year, month_index)
    return f"{y:04d}-{mi + 1:02d}"


def parse_local_date(qs: Optional[str]) -> Optional[date]:
    if not qs:
        return None
    try:
        d = date.fromisoformat(qs.strip()[:10])
    except ValueError:
        return None
    return d if _year_in_range(d.year) else None


# ------------ display ---------------------------------------------------------
def format_local_date(value: DayLike) -> str:
    """DD/MM/YYYY in business time."""
    return _local_date(value).strftime("%d/%m/%Y")


def format_local_time(value: Instant) -> str:
    """hh:mm AM/PM in business time."""
    return to_local(value).strftime("%I:%M %p")
