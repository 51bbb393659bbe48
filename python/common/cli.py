"""
CLI Helpers Module

Logging setup and JSON output shared by the command-line entry points.
"""

import argparse
import json
import logging
import os
import sys
from decimal import Decimal, InvalidOperation
from typing import Any

from .formatting import round_won

_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Attach a single stderr handler to the root logger.

    Stdout carries the JSON result, so log records always go to stderr.

    Args:
        level: Level name; defaults to the LOG_LEVEL environment variable or WARNING
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    _CONFIGURED = True


def dumps(data: Any) -> str:
    """Serialize to pretty-printed JSON, keeping Hangul readable."""
    return json.dumps(data, ensure_ascii=False, indent=2)


def print_json(data: Any) -> None:
    """Print a result object to stdout."""
    print(dumps(data))


def print_error(message: str, **extra: Any) -> None:
    """Print a JSON error object to stderr."""
    print(dumps({"error": True, "message": message, **extra}), file=sys.stderr)


def print_usage(lines: list[str]) -> None:
    """Print usage text to stderr."""
    print("\n".join(lines), file=sys.stderr)


def won_amount(value: str) -> int:
    """Argparse type for a won amount; fractional input is rounded half-up.

    Raises:
        argparse.ArgumentTypeError: If the value is not a number
    """
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if not amount.is_finite():
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    return round_won(amount)
