"""Date range and calendar bucketing helpers.

Every function here is pure.  Anything that depends on "now" takes the
reference instant as an argument and only falls back to
``datetime.now()`` when the caller passes nothing.  Weeks start on
Sunday.  Instants are naive local ``datetime`` values.
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Union

import pandas as pd

from .models import DateRange, TimePeriod

logger = logging.getLogger(__name__)

# datetime.weekday(): Monday == 0 ... Sunday == 6
WEEK_STARTS_ON = 6
PAY_PERIOD_DAYS = 14

PeriodLike = Union[TimePeriod, str, None]


# ---------------------------------------------------------------------------
# Calendar boundaries
# ---------------------------------------------------------------------------


def start_of_day(instant: datetime) -> datetime:
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(instant: datetime) -> datetime:
    return instant.replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_week(instant: datetime) -> datetime:
    day = start_of_day(instant)
    return day - timedelta(days=(day.weekday() - WEEK_STARTS_ON) % 7)


def end_of_week(instant: datetime) -> datetime:
    return end_of_day(start_of_week(instant) + timedelta(days=6))


def start_of_month(instant: datetime) -> datetime:
    return start_of_day(instant).replace(day=1)


def end_of_month(instant: datetime) -> datetime:
    last_day = calendar.monthrange(instant.year, instant.month)[1]
    return end_of_day(instant.replace(day=last_day))


def start_of_year(instant: datetime) -> datetime:
    return start_of_day(instant).replace(month=1, day=1)


def end_of_year(instant: datetime) -> datetime:
    return end_of_day(instant.replace(month=12, day=31))


def add_months(instant: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day to the target month."""
    index = instant.year * 12 + (instant.month - 1) + months
    year, month_zero = divmod(index, 12)
    month = month_zero + 1
    day = min(instant.day, calendar.monthrange(year, month)[1])
    return instant.replace(year=year, month=month, day=day)


# ---------------------------------------------------------------------------
# Date range generators
# ---------------------------------------------------------------------------


def _coerce_period(period: PeriodLike) -> TimePeriod:
    try:
        return TimePeriod(period)
    except ValueError:
        logger.debug("Unknown period %r, falling back to month", period)
        return TimePeriod.MONTH


def date_range_for(period: PeriodLike, reference: Optional[datetime] = None) -> DateRange:
    """Get the date range for a period containing ``reference``.

    ``quarter`` is the trailing three calendar months ending with the
    reference month, not a fiscal quarter.  Unknown periods (including
    ``custom``) resolve to the reference month.

    Example:
        >>> date_range_for('month', datetime(2024, 2, 10)).end
        datetime.datetime(2024, 2, 29, 23, 59, 59, 999999)
    """
    today = start_of_day(reference or datetime.now())
    kind = _coerce_period(period)

    if kind is TimePeriod.WEEK:
        return DateRange(start_of_week(today), end_of_week(today))
    if kind is TimePeriod.QUARTER:
        return DateRange(start_of_month(add_months(today, -2)), end_of_month(today))
    if kind is TimePeriod.YEAR:
        return DateRange(start_of_year(today), end_of_year(today))
    return DateRange(start_of_month(today), end_of_month(today))


def previous_period_for(period: PeriodLike, reference: Optional[datetime] = None) -> DateRange:
    """Get the range one period before :func:`date_range_for`."""
    today = start_of_day(reference or datetime.now())
    kind = _coerce_period(period)

    if kind is TimePeriod.WEEK:
        previous_week = today - timedelta(weeks=1)
        return DateRange(start_of_week(previous_week), end_of_week(previous_week))
    if kind is TimePeriod.QUARTER:
        return DateRange(
            start_of_month(add_months(today, -5)),
            end_of_month(add_months(today, -3)),
        )
    if kind is TimePeriod.YEAR:
        previous_year = add_months(today, -12)
        return DateRange(start_of_year(previous_year), end_of_year(previous_year))
    previous_month = add_months(today, -1)
    return DateRange(start_of_month(previous_month), end_of_month(previous_month))


def last_n_months(n: int, reference: Optional[datetime] = None) -> DateRange:
    """The ``n`` calendar months ending with the reference month."""
    reference = reference or datetime.now()
    return DateRange(start_of_month(add_months(reference, -(n - 1))), end_of_month(reference))


def last_n_weeks(n: int, reference: Optional[datetime] = None) -> DateRange:
    """The ``n`` Sunday-aligned weeks ending with the reference week."""
    reference = reference or datetime.now()
    return DateRange(start_of_week(reference - timedelta(weeks=n - 1)), end_of_week(reference))


# ---------------------------------------------------------------------------
# Interval generators
# ---------------------------------------------------------------------------


def _to_datetimes(index: pd.DatetimeIndex) -> List[datetime]:
    return [timestamp.to_pydatetime() for timestamp in index]


def enumerate_days(date_range: DateRange) -> List[datetime]:
    """Midnight of every calendar day in the range, both ends included."""
    return _to_datetimes(pd.date_range(start=start_of_day(date_range.start), end=date_range.end, freq='D'))


def enumerate_weeks(date_range: DateRange) -> List[datetime]:
    """Sunday start of every week overlapping the range."""
    return _to_datetimes(pd.date_range(start=start_of_week(date_range.start), end=date_range.end, freq='7D'))


def enumerate_months(date_range: DateRange) -> List[datetime]:
    """First day of every calendar month overlapping the range."""
    return _to_datetimes(pd.date_range(start=start_of_month(date_range.start), end=date_range.end, freq='MS'))


# ---------------------------------------------------------------------------
# Comparison and labels
# ---------------------------------------------------------------------------


def is_date_in_range(instant: datetime, date_range: DateRange) -> bool:
    return date_range.contains(instant)


def month_key(instant: datetime) -> str:
    """Grouping key ``YYYY-MM``; lexical order is chronological order."""
    return f"{instant.year:04d}-{instant.month:02d}"


def week_label(week_number: int) -> str:
    return f"Week {week_number}"


# ---------------------------------------------------------------------------
# Pay periods (bi-weekly)
# ---------------------------------------------------------------------------


def next_payday(last_payday: datetime) -> datetime:
    return last_payday + timedelta(days=PAY_PERIOD_DAYS)


def days_until_payday(payday: datetime, today: Optional[datetime] = None) -> int:
    today = start_of_day(today or datetime.now())
    return max(0, (start_of_day(payday) - today).days)


def current_pay_period(last_payday: datetime) -> DateRange:
    start = start_of_day(last_payday)
    return DateRange(start, end_of_day(start + timedelta(days=PAY_PERIOD_DAYS - 1)))
