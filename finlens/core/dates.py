"""Calendar helpers used across the engine."""
from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Any, Optional, Tuple

import pandas as pd


def coerce_to_date(value: Any) -> Optional[date]:
    """Normalize multiple date formats to python date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime().date()
    if isinstance(value, str):
        try:
            normalized = value.replace("Z", "")
            return datetime.fromisoformat(normalized).date()
        except ValueError:
            return None
    return None


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by ``offset`` months; negative offsets go back in time."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def day_cursor(reference: date, today: date) -> int:
    """Day-of-month used as the "spend so far" comparison point.

    Today's day when ``reference`` is in the current month, the last day of
    the reference month otherwise.
    """
    if (reference.year, reference.month) == (today.year, today.month):
        return today.day
    return days_in_month(reference.year, reference.month)


def whole_months_between(start: date, end: date) -> int:
    """Number of complete months from ``start`` to ``end`` (0 if end precedes start).

    Ending on the last day of the following month counts as a full month even
    when that month is shorter (Jan 31 -> Feb 29 is one month).
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    end_of_month = end.day == days_in_month(end.year, end.month)
    if end.day < start.day and not (end_of_month and months == 1):
        months -= 1
    return max(months, 0)
