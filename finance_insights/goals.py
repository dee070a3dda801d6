"""Goal progress, health scoring and insights.

A goal plan splits income across six fixed buckets.  Spend-down buckets
(needs, wants) succeed by staying under target; accumulation buckets
(savings, investments, debt repayment, emergency fund) succeed by reaching
it.  Expense spending is attributed to buckets through
:mod:`finance_insights.categorization`; savings is whatever income is left
after expenses.  Investments, debt repayment and emergency fund currently
always have an actual amount of 0 because no record marks transfers into
them.
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .calculations import safe_ratio, total_expenses, total_income as sum_income
from .categorization import build_classification, classify_expense_category, default_goal_bucket
from .formatting import format_currency
from .models import (
    ExpenseRecord,
    GoalAllocation,
    GoalCategory,
    GoalInsight,
    GoalPlan,
    GoalProgress,
    GoalScoringPolicy,
    GoalsAnalytics,
    GoalStatus,
    IncomeRecord,
    InsightType,
)
from .settings import get_analytics_config

logger = logging.getLogger(__name__)

ALL_ON_TRACK_MESSAGE = 'All your financial goals are on track! Keep it up!'
MOSTLY_ON_TRACK_MESSAGE = "You're doing well overall. Small adjustments can help you reach all goals."


def goal_category_meta(category: GoalCategory, config: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    """Display name, icon, color and description for a goal bucket."""
    config = config if config is not None else get_analytics_config()
    meta = config.get('goal_categories', {}).get(GoalCategory(category).value, {})
    return {
        'name': meta.get('name', GoalCategory(category).value.replace('_', ' ').title()),
        'icon': meta.get('icon', ''),
        'color': meta.get('color', ''),
        'description': meta.get('description', ''),
    }


# ---------------------------------------------------------------------------
# Allocation plan
# ---------------------------------------------------------------------------


def default_allocations(config: Optional[Dict[str, Any]] = None) -> Tuple[GoalAllocation, ...]:
    """The configured default split (50/20/15/10/5 out of the box)."""
    config = config if config is not None else get_analytics_config()
    allocations = []
    for entry in config['default_goal_allocations']:
        category = GoalCategory(entry['category'])
        meta = goal_category_meta(category, config)
        allocations.append(GoalAllocation(
            category=category,
            target_percentage=float(entry['target_percentage']),
            color=meta['color'],
            icon=meta['icon'],
            name=meta['name'],
            description=meta['description'],
        ))
    return tuple(allocations)


def default_goal_plan(config: Optional[Dict[str, Any]] = None) -> GoalPlan:
    config = config if config is not None else get_analytics_config()
    return GoalPlan(
        allocations=default_allocations(config),
        monthly_income_target=int(config.get('default_monthly_income_target', 0)),
    )


def reset_goal_plan(config: Optional[Dict[str, Any]] = None) -> GoalPlan:
    """Discard a user's plan in favour of the defaults."""
    logger.info("Resetting goal plan to defaults")
    return default_goal_plan(config)


def save_allocations(
    plan: GoalPlan,
    allocations: Iterable[GoalAllocation],
    monthly_income_target: Optional[int] = None,
) -> GoalPlan:
    """Replace the plan's allocations wholesale."""
    target = plan.monthly_income_target if monthly_income_target is None else int(monthly_income_target)
    return GoalPlan(allocations=tuple(allocations), monthly_income_target=target)


def update_allocation(plan: GoalPlan, category: GoalCategory, percentage: float) -> GoalPlan:
    """Return a copy of ``plan`` with one bucket's target percentage changed.

    Raises:
        KeyError: If the plan has no allocation for ``category``
    """
    category = GoalCategory(category)
    if not any(GoalCategory(alloc.category) == category for alloc in plan.allocations):
        raise KeyError(f"No allocation for goal category '{category.value}'")

    updated = tuple(
        GoalAllocation(
            category=alloc.category,
            target_percentage=float(percentage) if GoalCategory(alloc.category) == category else alloc.target_percentage,
            color=alloc.color,
            icon=alloc.icon,
            name=alloc.name,
            description=alloc.description,
        )
        for alloc in plan.allocations
    )
    return save_allocations(plan, updated)


def allocation_total(allocations: Iterable[GoalAllocation]) -> float:
    """Sum of target percentages; usually 100 but not enforced."""
    return float(sum(alloc.target_percentage for alloc in allocations))


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


def _actual_by_bucket(
    total_income: int,
    expenses: Sequence[ExpenseRecord],
    classification: Mapping[str, GoalCategory],
    default: GoalCategory,
) -> Dict[GoalCategory, int]:
    actual = {bucket: 0 for bucket in GoalCategory}
    for expense in expenses:
        actual[classify_expense_category(expense.category, classification, default)] += expense.amount

    # Savings is residual income, never derived from expense categories
    actual[GoalCategory.SAVINGS] = max(0, total_income - total_expenses(expenses))
    return actual


def _threshold(target_amount: float, ratio: float) -> Fraction:
    """``target_amount * ratio`` computed exactly; ratios are taken at their decimal value."""
    return Fraction(target_amount) * Fraction(str(ratio))


def classify_status(
    category: GoalCategory,
    actual_amount: float,
    target_amount: float,
    policy: Optional[GoalScoringPolicy] = None,
) -> GoalStatus:
    """Status of one bucket given its actual and target amounts.

    Spend-down buckets are ``on_track`` at or under target, ``behind`` over
    it, and ``ahead`` when under ``spend_down_ahead_ratio`` of target.
    Accumulation buckets are ``on_track`` from ``accumulation_on_track_ratio``
    of target and ``ahead`` from ``accumulation_ahead_ratio``.
    """
    policy = policy or GoalScoringPolicy.from_config()
    actual = Fraction(actual_amount)
    if GoalCategory(category).is_spend_down:
        status = GoalStatus.ON_TRACK if actual <= Fraction(target_amount) else GoalStatus.BEHIND
        if actual < _threshold(target_amount, policy.spend_down_ahead_ratio):
            status = GoalStatus.AHEAD
        return status

    status = (
        GoalStatus.ON_TRACK
        if actual >= _threshold(target_amount, policy.accumulation_on_track_ratio)
        else GoalStatus.BEHIND
    )
    if actual >= _threshold(target_amount, policy.accumulation_ahead_ratio):
        status = GoalStatus.AHEAD
    return status


def compute_progress(
    allocations: Iterable[GoalAllocation],
    total_income: Optional[int],
    expenses: Iterable[ExpenseRecord],
    income: Iterable[IncomeRecord] = (),
    classification: Optional[Mapping[str, GoalCategory]] = None,
    policy: Optional[GoalScoringPolicy] = None,
    default: Optional[GoalCategory] = None,
) -> List[GoalProgress]:
    """Target vs actual for every allocation in the plan.

    Args:
        allocations: The user's target allocation plan
        total_income: Income for the period in cents; when None it is
            summed from ``income``
        expenses: Expense records for the period
        income: Income records for the period
        classification: Expense category -> goal bucket lookup
        policy: Status thresholds
        default: Bucket for categories missing from ``classification``;
            defaults to the configured fallback

    Returns:
        One :class:`GoalProgress` per allocation, in plan order
    """
    expenses = list(expenses)
    if total_income is None:
        total_income = sum_income(income)
    classification = classification if classification is not None else build_classification()
    policy = policy or GoalScoringPolicy.from_config()
    default = GoalCategory(default) if default is not None else default_goal_bucket()

    actual_by_bucket = _actual_by_bucket(total_income, expenses, classification, default)

    progress = []
    for alloc in allocations:
        category = GoalCategory(alloc.category)
        target_amount = total_income * alloc.target_percentage / 100
        actual_amount = actual_by_bucket[category]
        progress.append(GoalProgress(
            category=category,
            target_percentage=alloc.target_percentage,
            actual_percentage=safe_ratio(actual_amount, total_income, 0.0) * 100,
            target_amount=target_amount,
            actual_amount=actual_amount,
            difference=actual_amount - target_amount,
            status=classify_status(category, actual_amount, target_amount, policy),
        ))
    return progress


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


def _behind_insight(entry: GoalProgress, name: str) -> GoalInsight:
    if GoalCategory(entry.category).is_spend_down:
        overspend = format_currency(abs(entry.difference), show_cents=False)
        return GoalInsight(
            type=InsightType.WARNING,
            category=entry.category,
            message=f"You're overspending on {name} by {overspend}",
            action=f"Try to reduce {name.lower()} expenses",
        )
    gap = abs(entry.actual_percentage - entry.target_percentage)
    return GoalInsight(
        type=InsightType.WARNING,
        category=entry.category,
        message=f"{name} is {gap:.1f}% below target",
        action=f"Consider allocating more to {name.lower()}",
    )


def generate_insights(
    progress: Sequence[GoalProgress],
    policy: Optional[GoalScoringPolicy] = None,
    config: Optional[Dict[str, Any]] = None,
) -> List[GoalInsight]:
    """Warnings for buckets behind, praise for buckets ahead, then one
    overall message when all (success) or most (tip) buckets are not behind.
    """
    if not progress:
        return []
    policy = policy or GoalScoringPolicy.from_config(config)

    insights: List[GoalInsight] = []
    for entry in progress:
        name = goal_category_meta(entry.category, config)['name']
        if entry.status == GoalStatus.BEHIND:
            insights.append(_behind_insight(entry, name))
        elif entry.status == GoalStatus.AHEAD:
            insights.append(GoalInsight(
                type=InsightType.SUCCESS,
                category=entry.category,
                message=f"Great job! {name} is on track",
            ))

    not_behind = sum(1 for entry in progress if entry.status != GoalStatus.BEHIND)
    if not_behind == len(progress):
        insights.append(GoalInsight(type=InsightType.SUCCESS, message=ALL_ON_TRACK_MESSAGE))
    elif not_behind >= len(progress) * policy.encouraging_ratio:
        insights.append(GoalInsight(type=InsightType.TIP, message=MOSTLY_ON_TRACK_MESSAGE))

    return insights


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def category_score(entry: GoalProgress, policy: Optional[GoalScoringPolicy] = None) -> float:
    """Score one bucket from 0 to 100.

    Spend-down buckets lose ``overspend_penalty_per_point`` per percentage
    point over target.  Accumulation buckets score their fill ratio, capped
    at 100; a zero target counts as fully met.
    """
    policy = policy or GoalScoringPolicy.from_config()
    if GoalCategory(entry.category).is_spend_down:
        if entry.actual_percentage <= entry.target_percentage:
            return 100.0
        over_by = entry.actual_percentage - entry.target_percentage
        return max(0.0, 100 - over_by * policy.overspend_penalty_per_point)

    ratio = safe_ratio(entry.actual_percentage, entry.target_percentage, 1.0)
    return min(100.0, ratio * 100)


def overall_score(progress: Sequence[GoalProgress], policy: Optional[GoalScoringPolicy] = None) -> int:
    """Mean bucket score rounded to the nearest integer (halves round up); 0 when empty."""
    if not progress:
        return 0
    policy = policy or GoalScoringPolicy.from_config()
    mean = np.mean([category_score(entry, policy) for entry in progress])
    return int(np.floor(mean + 0.5))


def build_goals_analytics(
    allocations: Iterable[GoalAllocation],
    expenses: Iterable[ExpenseRecord],
    income: Iterable[IncomeRecord],
    classification: Optional[Mapping[str, GoalCategory]] = None,
    policy: Optional[GoalScoringPolicy] = None,
    default: Optional[GoalCategory] = None,
) -> GoalsAnalytics:
    """Full goals report for one set of records."""
    expenses = list(expenses)
    income_total = sum_income(income)
    policy = policy or GoalScoringPolicy.from_config()

    progress = compute_progress(
        allocations, income_total, expenses,
        classification=classification, policy=policy, default=default,
    )
    score = overall_score(progress, policy)
    logger.debug("Goal score %d over %d buckets", score, len(progress))

    return GoalsAnalytics(
        total_income=income_total,
        total_allocated=total_expenses(expenses),
        progress=progress,
        overall_score=score,
        trend=0.0,
        insights=generate_insights(progress, policy),
    )
