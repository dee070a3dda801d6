"""Unified category lookup over built-in and custom categories.

The built-in catalog is static configuration injected at construction.
Custom categories are user-defined and soft-deletable: deleting one only
flips its ``is_deleted`` flag, so historical expenses that reference the
id keep resolving to a name and color.  Deleted customs are hidden from
the *active* views used by pickers, never from id lookups.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .models import (
    CategoryBreakdownEntry,
    CategoryConfig,
    CategoryType,
    CustomCategory,
    LabeledBreakdownEntry,
    UnifiedCategory,
)
from .settings import get_analytics_config

logger = logging.getLogger(__name__)

CUSTOM_ID_PREFIX = 'custom-'
CUSTOM_ORDER_START = 100
FALLBACK_COLOR = '#6B7280'
FALLBACK_ICON = 'CreditCard'

_EDITABLE_FIELDS = {'name', 'icon', 'color', 'type', 'order'}


class CategoryRegistry:
    """Merged, ordered view of built-in and custom categories."""

    def __init__(
        self,
        builtin: Sequence[CategoryConfig],
        custom: Iterable[CustomCategory] = (),
        *,
        id_prefix: str = CUSTOM_ID_PREFIX,
        order_start: int = CUSTOM_ORDER_START,
        fallback_color: str = FALLBACK_COLOR,
        fallback_icon: str = FALLBACK_ICON,
    ):
        """Initialize the registry.

        Args:
            builtin: The built-in catalog; stored as an immutable tuple
            custom: Previously saved custom categories, deleted ones included
            id_prefix: Prefix for generated custom category ids
            order_start: Display order of the first custom category
            fallback_color: Color used when labelling an unknown id
            fallback_icon: Icon used when labelling an unknown id
        """
        self.builtin = tuple(builtin)
        self._builtin_by_id: Dict[str, CategoryConfig] = {c.id: c for c in self.builtin}
        self._custom: Dict[str, CustomCategory] = {}
        for category in custom:
            self._custom[category.id] = category
        self.id_prefix = id_prefix
        self.order_start = order_start
        self.fallback_color = fallback_color
        self.fallback_icon = fallback_icon

    @classmethod
    def from_settings(
        cls,
        custom: Iterable[CustomCategory] = (),
        config: Optional[Dict] = None,
    ) -> 'CategoryRegistry':
        """Build a registry whose built-in catalog comes from the analytics settings."""
        config = config if config is not None else get_analytics_config()
        options = config.get('custom_categories', {})
        return cls(
            [CategoryConfig.from_dict(entry) for entry in config['categories']],
            custom,
            id_prefix=options.get('id_prefix', CUSTOM_ID_PREFIX),
            order_start=int(options.get('order_start', CUSTOM_ORDER_START)),
            fallback_color=options.get('fallback_color', FALLBACK_COLOR),
            fallback_icon=options.get('fallback_icon', FALLBACK_ICON),
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @staticmethod
    def _unify_builtin(config: CategoryConfig) -> UnifiedCategory:
        return UnifiedCategory(
            id=config.id,
            name=config.name,
            icon=config.icon,
            color=config.color,
            type=config.type,
            order=config.order,
            is_custom=False,
        )

    @staticmethod
    def _unify_custom(category: CustomCategory) -> UnifiedCategory:
        return UnifiedCategory(
            id=category.id,
            name=category.name,
            icon=category.icon,
            color=category.color,
            type=category.type,
            order=category.order,
            is_custom=True,
            is_deleted=category.is_deleted,
        )

    def _merged(self, include_deleted: bool) -> List[UnifiedCategory]:
        merged = [self._unify_builtin(c) for c in self.builtin]
        merged.extend(
            self._unify_custom(c)
            for c in self._custom.values()
            if include_deleted or not c.is_deleted
        )
        # sorted() is stable: equal orders keep built-ins first, then customs by creation
        return sorted(merged, key=lambda c: c.order)

    def active_categories(self) -> List[UnifiedCategory]:
        """Categories offered for new records; soft-deleted customs excluded."""
        return self._merged(include_deleted=False)

    def all_categories_including_deleted(self) -> List[UnifiedCategory]:
        """Every category that may appear on historical records."""
        return self._merged(include_deleted=True)

    def fixed_categories(self) -> List[UnifiedCategory]:
        return [c for c in self.active_categories() if c.type == CategoryType.FIXED]

    def variable_categories(self) -> List[UnifiedCategory]:
        return [c for c in self.active_categories() if c.type == CategoryType.VARIABLE]

    def custom_categories(self, include_deleted: bool = False) -> List[CustomCategory]:
        customs = [c for c in self._custom.values() if include_deleted or not c.is_deleted]
        return sorted(customs, key=lambda c: c.order)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve_by_id(self, category_id: str) -> Optional[UnifiedCategory]:
        """Find a category by id, including soft-deleted customs."""
        if category_id in self._builtin_by_id:
            return self._unify_builtin(self._builtin_by_id[category_id])
        custom = self._custom.get(category_id)
        return self._unify_custom(custom) if custom is not None else None

    def category_config(self, category_id: str) -> Optional[Union[CategoryConfig, CustomCategory]]:
        """The original built-in or custom record behind an id."""
        if category_id in self._builtin_by_id:
            return self._builtin_by_id[category_id]
        return self._custom.get(category_id)

    def label_breakdown(self, breakdown: Iterable[CategoryBreakdownEntry]) -> List[LabeledBreakdownEntry]:
        """Attach display name, color and icon to breakdown entries.

        Ids that resolve to nothing are shown under their raw id.
        """
        labeled = []
        for entry in breakdown:
            category = self.resolve_by_id(entry.category)
            labeled.append(LabeledBreakdownEntry(
                category=entry.category,
                name=category.name if category else entry.category,
                color=category.color if category else self.fallback_color,
                icon=category.icon if category else self.fallback_icon,
                amount=entry.amount,
                percentage=entry.percentage,
                count=entry.count,
            ))
        return labeled

    # ------------------------------------------------------------------
    # Custom category management
    # ------------------------------------------------------------------

    def _require_custom(self, category_id: str) -> CustomCategory:
        if category_id in self._builtin_by_id:
            raise ValueError(f"Built-in category '{category_id}' cannot be modified")
        try:
            return self._custom[category_id]
        except KeyError:
            raise KeyError(f"Unknown custom category '{category_id}'") from None

    def add_custom_category(
        self,
        name: str,
        icon: str,
        color: str,
        type: Union[CategoryType, str] = CategoryType.VARIABLE,
        now: Optional[datetime] = None,
    ) -> CustomCategory:
        """Create a custom category with a ``custom-<epoch millis>`` id.

        Raises:
            ValueError: If the generated id is already taken
        """
        now = now or datetime.now()
        category_id = f"{self.id_prefix}{int(now.timestamp() * 1000)}"
        if category_id in self._builtin_by_id or category_id in self._custom:
            raise ValueError(f"Category id '{category_id}' already exists")

        category = CustomCategory(
            id=category_id,
            name=name,
            icon=icon,
            color=color,
            type=CategoryType(type),
            order=len(self._custom) + self.order_start,
        )
        self._custom[category_id] = category
        logger.info("Added custom category %s (%s)", category_id, name)
        return category

    def update_custom_category(self, category_id: str, **changes) -> CustomCategory:
        """Update name, icon, color, type or order of a custom category.

        Raises:
            KeyError: If no custom category has this id
            ValueError: If the id is built-in or a field is not editable
        """
        current = self._require_custom(category_id)
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if 'type' in changes:
            changes['type'] = CategoryType(changes['type'])

        updated = replace(current, **changes)
        self._custom[category_id] = updated
        logger.info("Updated custom category %s", category_id)
        return updated

    def delete_custom_category(self, category_id: str) -> CustomCategory:
        """Soft delete: the category stays resolvable but leaves the active views.

        Raises:
            KeyError: If no custom category has this id
            ValueError: If the id is built-in
        """
        deleted = replace(self._require_custom(category_id), is_deleted=True)
        self._custom[category_id] = deleted
        logger.info("Soft-deleted custom category %s", category_id)
        return deleted
