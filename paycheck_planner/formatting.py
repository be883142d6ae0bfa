"""Formatting utilities for currency and percent display."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

Number = Union[Decimal, float, int]


def escape_dollar_for_markdown(amount: Number) -> str:
    """Format a dollar amount and escape the dollar sign for markdown rendering.

    Streamlit markdown treats ``$`` as a LaTeX delimiter, so it has to be
    escaped.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return format_currency(amount).replace("$", "\\$")


def format_currency(amount: Number, include_sign: bool = True) -> str:
    """Format a currency amount with two decimals and thousands separators.

    Negative amounts are written as ``-$12.50``.

    Example:
        >>> format_currency(Decimal('1234.5'))
        '$1,234.50'
        >>> format_currency(-12.5)
        '-$12.50'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    negative = amount < 0
    formatted = f"{abs(amount):,.2f}"
    if include_sign:
        formatted = f"${formatted}"
    return f"-{formatted}" if negative else formatted


def format_percent(value: float) -> str:
    return f"{value:.0f}%"
