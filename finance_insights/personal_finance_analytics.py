"""Personal Finance Analytics.

This module bundles the aggregation functions into one object bound to a
set of records, a date range and a reference "now", the way the
dashboard consumes them: totals and breakdowns over the selected range,
trends over the full history, and the goals report.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Union

from . import calculations as calc
from .category_registry import CategoryRegistry
from .date_utils import date_range_for
from .goals import build_goals_analytics
from .models import (
    AnalyticsSummary,
    CategoryBreakdownEntry,
    DateRange,
    ExpenseRecord,
    GoalAllocation,
    GoalScoringPolicy,
    GoalsAnalytics,
    IncomeRecord,
    LabeledBreakdownEntry,
    SpendingIntensity,
    TimePeriod,
)

logger = logging.getLogger(__name__)


class PersonalFinanceAnalytics:
    """Personal finance analytics over one user's records."""

    def __init__(
        self,
        expenses: Iterable[ExpenseRecord],
        income: Iterable[IncomeRecord],
        date_range: Optional[DateRange] = None,
        now: Optional[datetime] = None,
        thresholds: Optional[SpendingIntensity] = None,
    ):
        """Initialize with records.

        Args:
            expenses: All expense records available to the user
            income: All income records available to the user
            date_range: Range for totals and breakdowns; defaults to the month containing ``now``
            now: Reference instant for "current month" calculations
            thresholds: Daily spending intensity thresholds
        """
        self.expenses = list(expenses)
        self.income = list(income)
        self.now = now or datetime.now()
        self.date_range = date_range or date_range_for(TimePeriod.MONTH, self.now)
        self.thresholds = thresholds or SpendingIntensity.from_config()
        self._prepare_data()

    def _prepare_data(self) -> None:
        """Select the records inside the date range."""
        self.filtered_expenses = calc.filter_by_date_range(self.expenses, self.date_range)
        self.filtered_income = calc.filter_by_date_range(self.income, self.date_range)
        logger.debug(
            "Prepared %d/%d expenses and %d/%d income records for %s - %s",
            len(self.filtered_expenses), len(self.expenses),
            len(self.filtered_income), len(self.income),
            self.date_range.start, self.date_range.end,
        )

    def calculate_category_spending(
        self,
        registry: Optional[CategoryRegistry] = None,
    ) -> Union[List[CategoryBreakdownEntry], List[LabeledBreakdownEntry]]:
        """Category breakdown for the range, labelled when a registry is given."""
        breakdown = calc.category_breakdown(self.filtered_expenses)
        if registry is None:
            return breakdown
        return registry.label_breakdown(breakdown)

    def calculate_period_summary(self) -> AnalyticsSummary:
        """Calculate every dashboard figure for the selected range.

        Totals, breakdowns and averages use records inside the range; the
        monthly, weekly, daily and income-vs-expense series read the full
        history.
        """
        total_expenses = calc.total_expenses(self.filtered_expenses)
        breakdown = calc.category_breakdown(self.filtered_expenses)
        monthly = calc.monthly_totals(self.expenses)
        daily = calc.daily_spending(
            self.expenses, self.date_range.start, self.date_range.end, self.thresholds
        )

        return AnalyticsSummary(
            date_range=self.date_range,
            total_expenses=total_expenses,
            total_income=calc.total_income(self.filtered_income),
            net_amount=calc.net_amount(self.filtered_income, self.filtered_expenses),
            savings_rate=calc.savings_rate(self.filtered_income, self.filtered_expenses),
            category_breakdown=breakdown,
            top_category=breakdown[0] if breakdown else None,
            monthly_totals=monthly,
            weekly_trend=calc.weekly_trend(self.expenses, self.date_range.start, self.date_range.end),
            income_vs_expenses=calc.income_vs_expenses(self.income, self.expenses, now=self.now),
            daily_spending=daily,
            month_over_month_change=calc.month_over_month_change(self.expenses, now=self.now),
            average_daily_spending=calc.average_daily_spending(total_expenses, len(daily)),
            average_monthly_spending=calc.average_monthly_spending(monthly),
            expense_count=len(self.filtered_expenses),
            income_count=len(self.filtered_income),
        )

    def calculate_goal_progress(
        self,
        allocations: Iterable[GoalAllocation],
        policy: Optional[GoalScoringPolicy] = None,
    ) -> GoalsAnalytics:
        """Goals report over the records inside the selected range."""
        return build_goals_analytics(allocations, self.filtered_expenses, self.filtered_income, policy=policy)
