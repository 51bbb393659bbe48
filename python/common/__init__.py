"""
Common Module

KRW formatting and command-line helpers shared by the calculators.
"""

from .formatting import format_krw, round_won
from .cli import configure_logging, print_json, print_error, won_amount

__all__ = [
    "format_krw",
    "round_won",
    "configure_logging",
    "print_json",
    "print_error",
    "won_amount",
]
