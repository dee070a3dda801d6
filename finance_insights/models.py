"""Domain types for expense/income analytics and goal scoring.

Records coming from the storage layer and every derived result are plain
dataclasses.  Closed domains (goal buckets, statuses, insight kinds) are
``str`` enums so they compare equal to their stored string values;
category ids stay open strings because custom categories are created at
runtime.

All monetary fields are integers in minor currency units (cents).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .settings import get_analytics_config


class TimePeriod(str, Enum):
    WEEK = 'week'
    MONTH = 'month'
    QUARTER = 'quarter'
    YEAR = 'year'
    CUSTOM = 'custom'


class CategoryType(str, Enum):
    FIXED = 'fixed'
    VARIABLE = 'variable'


class GoalCategory(str, Enum):
    SAVINGS = 'savings'
    INVESTMENTS = 'investments'
    NEEDS = 'needs'
    WANTS = 'wants'
    DEBT_REPAYMENT = 'debt_repayment'
    EMERGENCY_FUND = 'emergency_fund'

    @property
    def is_spend_down(self) -> bool:
        """True for buckets where staying under target is the goal."""
        return self in (GoalCategory.NEEDS, GoalCategory.WANTS)


class GoalStatus(str, Enum):
    ON_TRACK = 'on_track'
    BEHIND = 'behind'
    AHEAD = 'ahead'


class InsightType(str, Enum):
    WARNING = 'warning'
    SUCCESS = 'success'
    TIP = 'tip'


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExpenseRecord:
    id: str
    amount: int          # cents, >= 0
    category: str        # built-in or custom category id
    date: datetime
    is_recurring: bool = False
    tags: Tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class IncomeRecord:
    id: str
    amount: int          # cents, >= 0
    type: str            # salary, bonus, freelance, ...
    date: datetime
    is_regular: bool = False
    source: str = ""


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``[start, end]`` window."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryConfig:
    """A built-in catalog entry."""

    id: str
    name: str
    icon: str
    color: str
    type: CategoryType
    order: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategoryConfig':
        return cls(
            id=data['id'],
            name=data['name'],
            icon=data.get('icon', ''),
            color=data.get('color', ''),
            type=CategoryType(data.get('type', CategoryType.VARIABLE.value)),
            order=int(data.get('order', 0)),
        )


@dataclass(frozen=True)
class CustomCategory:
    """A user-defined category; deletion only flips ``is_deleted``."""

    id: str
    name: str
    icon: str
    color: str
    type: CategoryType
    order: int
    is_deleted: bool = False


@dataclass(frozen=True)
class UnifiedCategory:
    id: str
    name: str
    icon: str
    color: str
    type: CategoryType
    order: int
    is_custom: bool
    is_deleted: bool = False


# ---------------------------------------------------------------------------
# Aggregation results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryBreakdownEntry:
    category: str
    amount: int
    percentage: float
    count: int


@dataclass(frozen=True)
class LabeledBreakdownEntry:
    """A breakdown entry joined to its category's display attributes."""

    category: str
    name: str
    color: str
    icon: str
    amount: int
    percentage: float
    count: int


@dataclass(frozen=True)
class MonthlyTotal:
    month: str           # abbreviated month name, e.g. "Jan"
    year: int
    total: int
    count: int
    key: str             # "YYYY-MM"


@dataclass(frozen=True)
class WeeklyTrendEntry:
    week: int            # 1-based
    week_start: datetime
    week_end: datetime
    amount: int
    running_average: float


@dataclass(frozen=True)
class IncomeVsExpenseEntry:
    period: str          # e.g. "Jan 2024"
    income: int
    expenses: int
    net: int
    savings_rate: float


@dataclass(frozen=True)
class DailySpendingEntry:
    date: datetime
    amount: int
    intensity: int       # 0..4


@dataclass(frozen=True)
class SpendingIntensity:
    """Upper bounds (exclusive, in cents) of intensity levels 1-3."""

    low: int = 5000
    medium: int = 10000
    high: int = 20000

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'SpendingIntensity':
        config = config if config is not None else get_analytics_config()
        block = config.get('spending_intensity', {})
        return cls(
            low=int(block.get('low', cls.low)),
            medium=int(block.get('medium', cls.medium)),
            high=int(block.get('high', cls.high)),
        )


@dataclass(frozen=True)
class AnalyticsSummary:
    """Everything the dashboard needs for one date range."""

    date_range: DateRange
    total_expenses: int
    total_income: int
    net_amount: int
    savings_rate: float
    category_breakdown: List[CategoryBreakdownEntry]
    top_category: Optional[CategoryBreakdownEntry]
    monthly_totals: List[MonthlyTotal]
    weekly_trend: List[WeeklyTrendEntry]
    income_vs_expenses: List[IncomeVsExpenseEntry]
    daily_spending: List[DailySpendingEntry]
    month_over_month_change: float
    average_daily_spending: float
    average_monthly_spending: float
    expense_count: int
    income_count: int


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GoalScoringPolicy:
    """Thresholds used for status classification and scoring."""

    spend_down_ahead_ratio: float = 0.8
    accumulation_on_track_ratio: float = 0.9
    accumulation_ahead_ratio: float = 1.1
    overspend_penalty_per_point: float = 5
    encouraging_ratio: float = 0.7

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'GoalScoringPolicy':
        config = config if config is not None else get_analytics_config()
        block = config.get('goal_scoring', {})
        return cls(
            spend_down_ahead_ratio=float(block.get('spend_down_ahead_ratio', cls.spend_down_ahead_ratio)),
            accumulation_on_track_ratio=float(
                block.get('accumulation_on_track_ratio', cls.accumulation_on_track_ratio)
            ),
            accumulation_ahead_ratio=float(block.get('accumulation_ahead_ratio', cls.accumulation_ahead_ratio)),
            overspend_penalty_per_point=float(
                block.get('overspend_penalty_per_point', cls.overspend_penalty_per_point)
            ),
            encouraging_ratio=float(block.get('encouraging_ratio', cls.encouraging_ratio)),
        )


@dataclass(frozen=True)
class GoalAllocation:
    category: GoalCategory
    target_percentage: float
    color: str = ""
    icon: str = ""
    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class GoalPlan:
    """A user's target allocation plan."""

    allocations: Tuple[GoalAllocation, ...]
    monthly_income_target: int


@dataclass(frozen=True)
class GoalProgress:
    category: GoalCategory
    target_percentage: float
    actual_percentage: float
    target_amount: float
    actual_amount: int
    difference: float
    status: GoalStatus


@dataclass(frozen=True)
class GoalInsight:
    type: InsightType
    message: str
    category: Optional[GoalCategory] = None
    action: Optional[str] = None


@dataclass(frozen=True)
class GoalsAnalytics:
    total_income: int
    total_allocated: int
    progress: List[GoalProgress] = field(default_factory=list)
    overall_score: int = 0
    trend: float = 0.0   # historical comparison is not implemented
    insights: List[GoalInsight] = field(default_factory=list)
