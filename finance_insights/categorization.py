"""Expense category to goal bucket classification.

Expense categories map many-to-one onto the fixed goal buckets through a
static table read from the analytics settings.  Anything missing from the
table, custom categories included, lands in the fallback bucket (``wants``).
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import GoalCategory
from .settings import get_analytics_config


def _get_category_map() -> Dict[str, List[str]]:
    """Get the goal bucket -> expense categories table from configuration."""
    return get_analytics_config()['goal_category_map']


def default_goal_bucket() -> GoalCategory:
    """The configured bucket for categories missing from the table."""
    return GoalCategory(get_analytics_config().get('default_goal_category', GoalCategory.WANTS.value))


def build_classification(
    category_map: Optional[Mapping[str, Iterable[str]]] = None,
) -> Dict[str, GoalCategory]:
    """Invert a bucket -> categories table into a category -> bucket lookup.

    Args:
        category_map: Dictionary mapping goal bucket names to expense
            category ids. Defaults to the configured table.

    Returns:
        Dictionary mapping each expense category id to its goal bucket

    Example:
        >>> build_classification({'needs': ['rent'], 'wants': ['amazon']})
        {'rent': <GoalCategory.NEEDS: 'needs'>, 'amazon': <GoalCategory.WANTS: 'wants'>}
    """
    category_map = category_map if category_map is not None else _get_category_map()
    lookup: Dict[str, GoalCategory] = {}
    for bucket, categories in category_map.items():
        for category in categories:
            lookup[category] = GoalCategory(bucket)
    return lookup


def classify_expense_category(
    category: Optional[str],
    classification: Optional[Mapping[str, GoalCategory]] = None,
    default: Optional[GoalCategory] = None,
) -> GoalCategory:
    """Classify an expense category id into a goal bucket.

    Args:
        category: Expense category id (may be None)
        classification: Category id -> bucket lookup; defaults to the configured table
        default: Bucket for unmapped categories; defaults to the configured fallback

    Returns:
        The goal bucket the category's spending counts against

    Example:
        >>> classify_expense_category('groceries')
        <GoalCategory.NEEDS: 'needs'>
        >>> classify_expense_category('custom-1700000000000')
        <GoalCategory.WANTS: 'wants'>
    """
    classification = classification if classification is not None else build_classification()
    fallback = default if default is not None else default_goal_bucket()
    if not category:
        return fallback
    return classification.get(category, fallback)


def describe_classification(config: Optional[Dict[str, Any]] = None) -> Dict[str, List[str]]:
    """Goal bucket -> sorted category ids, every bucket present."""
    category_map = (config or get_analytics_config())['goal_category_map']
    return {
        bucket.value: sorted(category_map.get(bucket.value, []))
        for bucket in GoalCategory
    }
