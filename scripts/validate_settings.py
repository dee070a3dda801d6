#!/usr/bin/env python3
"""Lightweight validator for the analytics settings file."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_insights.categorization import describe_classification  # noqa: E402
from finance_insights.config import configure_logging, get_settings_dir  # noqa: E402
from finance_insights.goals import allocation_total, default_allocations  # noqa: E402
from finance_insights.models import CategoryConfig, GoalCategory  # noqa: E402
from finance_insights.settings import load_config  # noqa: E402

REQUIRED_KEYS = (
    'spending_intensity',
    'categories',
    'goal_categories',
    'default_goal_allocations',
    'goal_category_map',
    'goal_scoring',
)


def validate_settings(config: Dict[str, Any]) -> List[str]:
    errors = []
    missing = [key for key in REQUIRED_KEYS if key not in config]
    if missing:
        return [f"missing keys: {', '.join(missing)}"]

    thresholds = config['spending_intensity']
    if not thresholds.get('low', 0) < thresholds.get('medium', 0) < thresholds.get('high', 0):
        errors.append("spending_intensity must satisfy low < medium < high")

    seen = set()
    for entry in config['categories']:
        try:
            category = CategoryConfig.from_dict(entry)
        except (KeyError, ValueError) as exc:
            errors.append(f"invalid category {entry!r}: {exc}")
            continue
        if category.id in seen:
            errors.append(f"duplicate category id '{category.id}'")
        seen.add(category.id)

    buckets = {bucket.value for bucket in GoalCategory}
    for bucket in config['goal_category_map']:
        if bucket not in buckets:
            errors.append(f"goal_category_map uses unknown bucket '{bucket}'")
    for bucket, categories in describe_classification(config).items():
        unknown = [c for c in categories if c not in seen]
        if unknown:
            errors.append(f"{bucket} maps unknown categories: {', '.join(unknown)}")

    try:
        total = allocation_total(default_allocations(config))
    except (KeyError, ValueError) as exc:
        errors.append(f"invalid default_goal_allocations: {exc}")
    else:
        if total != 100:
            # Allowed, but almost always a mistake in the defaults
            print(f"Warning: default allocations sum to {total:g}%, not 100%")

    return errors


def main() -> int:
    configure_logging()
    try:
        config = load_config('analytics')
    except FileNotFoundError as exc:
        print(exc)
        return 1

    errors = validate_settings(config)
    if errors:
        print(f"Settings validation failed ({get_settings_dir()}):")
        for message in errors:
            print(f"  - {message}")
        return 1

    print("Analytics settings validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
