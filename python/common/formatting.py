"""
KRW Formatting Module

Rounding and display helpers for Korean won amounts.
"""

from decimal import Decimal, ROUND_HALF_UP


def round_won(amount: Decimal | int | float | str) -> int:
    """Round an amount half-up to whole won.

    Args:
        amount: Amount in won, possibly fractional

    Returns:
        Whole-won integer
    """
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_krw(amount: Decimal | int | float) -> str:
    """Format an amount as a KRW display string, e.g. ``1,234,567원``."""
    return f"{round_won(amount):,}원"
