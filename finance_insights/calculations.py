"""Expense and income aggregation.

Pure functions turning flat lists of :class:`ExpenseRecord` and
:class:`IncomeRecord` into totals, category breakdowns and time series
for charts.  Records are loaded into a pandas DataFrame for grouping and
results are handed back as plain dataclasses with integer cent amounts.

Divide-by-zero sites all go through :func:`safe_ratio` so the edge-case
policy lives in one place.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .date_utils import (
    date_range_for,
    end_of_week,
    enumerate_days,
    enumerate_months,
    enumerate_weeks,
    last_n_months,
    month_key,
    previous_period_for,
)
from .models import (
    CategoryBreakdownEntry,
    DailySpendingEntry,
    DateRange,
    ExpenseRecord,
    IncomeRecord,
    IncomeVsExpenseEntry,
    MonthlyTotal,
    SpendingIntensity,
    TimePeriod,
    WeeklyTrendEntry,
)

logger = logging.getLogger(__name__)

# Charting contract: the income/expense comparison always covers this many
# months ending with the current one.
INCOME_VS_EXPENSES_MONTHS = 6

_FRAME_COLUMNS = ['id', 'amount', 'label', 'date']


def _records_frame(records: Iterable, label_field: str) -> pd.DataFrame:
    """Load records into a DataFrame with ``id, amount, label, date`` columns."""
    rows = [
        {
            'id': record.id,
            'amount': record.amount,
            'label': getattr(record, label_field),
            'date': record.date,
        }
        for record in records
    ]
    frame = pd.DataFrame(rows, columns=_FRAME_COLUMNS)
    frame['amount'] = frame['amount'].astype('int64')
    frame['date'] = pd.to_datetime(frame['date'])
    return frame


def _monthly_sums(records: Iterable, label_field: str) -> pd.Series:
    frame = _records_frame(records, label_field)
    if frame.empty:
        return pd.Series(dtype='int64')
    return frame.groupby(frame['date'].map(month_key))['amount'].sum()


def entries_to_frame(entries: Sequence) -> pd.DataFrame:
    """Convert a list of result dataclasses into a DataFrame for charting."""
    return pd.DataFrame([asdict(entry) for entry in entries])


# ---------------------------------------------------------------------------
# Ratios
# ---------------------------------------------------------------------------


def safe_ratio(numerator: float, denominator: float, zero_denominator_result: float = 0.0) -> float:
    """Divide, substituting ``zero_denominator_result`` when the denominator is 0."""
    if denominator == 0:
        return float(zero_denominator_result)
    return numerator / denominator


def percentage_change(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``.

    A zero baseline reports 100 when anything was spent and 0 otherwise
    rather than an infinite change.

    Example:
        >>> percentage_change(1500, 1000)
        50.0
        >>> percentage_change(500, 0)
        100.0
    """
    return safe_ratio(current - previous, previous, 1.0 if current > 0 else 0.0) * 100


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def total_expenses(records: Iterable[ExpenseRecord]) -> int:
    return int(sum(record.amount for record in records))


def total_income(records: Iterable[IncomeRecord]) -> int:
    return int(sum(record.amount for record in records))


def net_amount(income: Iterable[IncomeRecord], expenses: Iterable[ExpenseRecord]) -> int:
    """Income minus expenses; negative when spending exceeds income."""
    return total_income(income) - total_expenses(expenses)


def savings_rate(income: Iterable[IncomeRecord], expenses: Iterable[ExpenseRecord]) -> float:
    """Net as a percentage of income, 0 when there is no income."""
    income_total = total_income(income)
    net = income_total - total_expenses(expenses)
    return safe_ratio(net, income_total, 0.0) * 100


def filter_by_date_range(records: Iterable, date_range: DateRange) -> List:
    """Keep records dated inside the inclusive range."""
    return [record for record in records if date_range.contains(record.date)]


# ---------------------------------------------------------------------------
# Category breakdown
# ---------------------------------------------------------------------------


def category_breakdown(expenses: Iterable[ExpenseRecord]) -> List[CategoryBreakdownEntry]:
    """Spending per category, largest first.

    Ties on amount keep category id order so results are deterministic.
    Returns an empty list when nothing was spent.
    """
    expenses = list(expenses)
    total = total_expenses(expenses)
    if total == 0:
        return []

    frame = _records_frame(expenses, 'category')
    grouped = frame.groupby('label', sort=True)['amount'].agg(['sum', 'count'])
    grouped = grouped.sort_values('sum', ascending=False, kind='mergesort')
    logger.debug("Category breakdown over %d expenses: %d categories", len(expenses), len(grouped))

    return [
        CategoryBreakdownEntry(
            category=str(category),
            amount=int(row['sum']),
            percentage=float(row['sum']) / total * 100,
            count=int(row['count']),
        )
        for category, row in grouped.iterrows()
    ]


def top_category(expenses: Iterable[ExpenseRecord]) -> Optional[CategoryBreakdownEntry]:
    breakdown = category_breakdown(expenses)
    return breakdown[0] if breakdown else None


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------


def monthly_totals(expenses: Iterable[ExpenseRecord]) -> List[MonthlyTotal]:
    """Totals per calendar month across all records, oldest first."""
    frame = _records_frame(expenses, 'category')
    if frame.empty:
        return []

    frame['year'] = frame['date'].dt.year
    frame['month'] = frame['date'].dt.month
    grouped = frame.groupby(['year', 'month'], sort=True)['amount'].agg(['sum', 'count'])

    totals = []
    for (year, month), row in grouped.iterrows():
        year, month = int(year), int(month)
        totals.append(MonthlyTotal(
            month=calendar.month_abbr[month],
            year=year,
            total=int(row['sum']),
            count=int(row['count']),
            key=month_key(datetime(year, month, 1)),
        ))
    return totals


def weekly_trend(
    expenses: Iterable[ExpenseRecord],
    start: datetime,
    end: datetime,
) -> List[WeeklyTrendEntry]:
    """Weekly spending between ``start`` and ``end`` with a cumulative mean.

    ``running_average`` for week *i* is the mean of weeks 1..i.
    """
    weeks = enumerate_weeks(DateRange(start, end))
    if not weeks:
        return []

    frame = _records_frame(expenses, 'category')
    amounts = []
    for week_start in weeks:
        mask = (frame['date'] >= week_start) & (frame['date'] <= end_of_week(week_start))
        amounts.append(int(frame.loc[mask, 'amount'].sum()))

    running = np.cumsum(amounts) / np.arange(1, len(amounts) + 1)

    return [
        WeeklyTrendEntry(
            week=index + 1,
            week_start=week_start,
            week_end=end_of_week(week_start),
            amount=amount,
            running_average=float(average),
        )
        for index, (week_start, amount, average) in enumerate(zip(weeks, amounts, running))
    ]


def income_vs_expenses(
    income: Iterable[IncomeRecord],
    expenses: Iterable[ExpenseRecord],
    now: Optional[datetime] = None,
) -> List[IncomeVsExpenseEntry]:
    """Income against expenses for the six months ending with ``now``.

    Always returns exactly :data:`INCOME_VS_EXPENSES_MONTHS` entries; months
    without activity are zero-filled.  Records outside the window are
    ignored.
    """
    window = last_n_months(INCOME_VS_EXPENSES_MONTHS, now or datetime.now())
    income_by_month = _monthly_sums(income, 'type')
    expenses_by_month = _monthly_sums(expenses, 'category')

    rows = []
    for month_start in enumerate_months(window):
        key = month_key(month_start)
        month_income = int(income_by_month.get(key, 0))
        month_expenses = int(expenses_by_month.get(key, 0))
        net = month_income - month_expenses
        rows.append(IncomeVsExpenseEntry(
            period=month_start.strftime('%b %Y'),
            income=month_income,
            expenses=month_expenses,
            net=net,
            savings_rate=safe_ratio(net, month_income, 0.0) * 100,
        ))
    return rows


def spending_intensity(amount: int, thresholds: Optional[SpendingIntensity] = None) -> int:
    """Heatmap level 0-4 for a day's spending."""
    thresholds = thresholds or SpendingIntensity.from_config()
    if amount <= 0:
        return 0
    if amount < thresholds.low:
        return 1
    if amount < thresholds.medium:
        return 2
    if amount < thresholds.high:
        return 3
    return 4


def daily_spending(
    expenses: Iterable[ExpenseRecord],
    start: datetime,
    end: datetime,
    thresholds: Optional[SpendingIntensity] = None,
) -> List[DailySpendingEntry]:
    """One entry per calendar day in ``[start, end]`` with its intensity level."""
    thresholds = thresholds or SpendingIntensity.from_config()
    frame = _records_frame(expenses, 'category')
    by_day = frame.groupby(frame['date'].dt.normalize())['amount'].sum()

    entries = []
    for day in enumerate_days(DateRange(start, end)):
        amount = int(by_day.get(pd.Timestamp(day), 0))
        entries.append(DailySpendingEntry(
            date=day,
            amount=amount,
            intensity=spending_intensity(amount, thresholds),
        ))
    return entries


# ---------------------------------------------------------------------------
# Period comparison and averages
# ---------------------------------------------------------------------------


def month_over_month_change(expenses: Iterable[ExpenseRecord], now: Optional[datetime] = None) -> float:
    """Change in spending between the current and the previous calendar month."""
    expenses = list(expenses)
    now = now or datetime.now()
    current = total_expenses(filter_by_date_range(expenses, date_range_for(TimePeriod.MONTH, now)))
    previous = total_expenses(filter_by_date_range(expenses, previous_period_for(TimePeriod.MONTH, now)))
    return percentage_change(current, previous)


def average_daily_spending(total: int, days: int) -> float:
    return safe_ratio(total, days, 0.0)


def average_monthly_spending(totals: Sequence[MonthlyTotal]) -> float:
    return safe_ratio(sum(month.total for month in totals), len(totals), 0.0)
