"""Amount formatting for generated insight text."""

from __future__ import annotations

from typing import Union


def format_currency(cents: Union[float, int], show_cents: bool = True, include_sign: bool = True) -> str:
    """Format an amount in cents as dollars.

    Args:
        cents: The amount in minor units (e.g. 244800 for $2,448.00)
        show_cents: Whether to keep two decimal places
        include_sign: Whether to include the dollar sign

    Returns:
        Formatted currency string (e.g., "$2,448.00" or "2,448")

    Example:
        >>> format_currency(244800)
        '$2,448.00'
        >>> format_currency(244820, show_cents=False, include_sign=False)
        '2,448'
    """
    dollars = cents / 100
    formatted = f"{dollars:,.2f}" if show_cents else f"{dollars:,.0f}"
    return f"${formatted}" if include_sign else formatted
