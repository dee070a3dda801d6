"""Top-level package for Finance Insights.

Pure computation over already-loaded expense and income records.  The
primary modules are:

* ``date_utils`` - date ranges and calendar bucketing
* ``calculations`` - totals, category breakdowns and time series
* ``goals`` - goal allocation progress, health score and insights
* ``category_registry`` - built-in plus custom (soft-deletable) categories
* ``personal_finance_analytics`` - everything above bound to one record set

Thresholds, default allocations and the category catalog are JSON data
under ``finance_insights/settings``.
"""

from . import calculations  # noqa: F401  # re-exported for convenience
from . import date_utils  # noqa: F401  # re-exported for convenience
from . import goals  # noqa: F401  # re-exported for convenience
from .category_registry import CategoryRegistry
from .models import (
    CustomCategory,
    DateRange,
    ExpenseRecord,
    GoalAllocation,
    GoalCategory,
    GoalStatus,
    IncomeRecord,
    InsightType,
    TimePeriod,
)
from .personal_finance_analytics import PersonalFinanceAnalytics

__version__ = "0.1.0"

__all__ = [
    "calculations",
    "date_utils",
    "goals",
    "CategoryRegistry",
    "CustomCategory",
    "DateRange",
    "ExpenseRecord",
    "GoalAllocation",
    "GoalCategory",
    "GoalStatus",
    "IncomeRecord",
    "InsightType",
    "TimePeriod",
    "PersonalFinanceAnalytics",
]
