"""
Tax Calendar Module

Korean tax and payroll filing deadlines for the year, with D-day counts
and filters for upcoming, per-month and per-type views.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import yaml

from common.cli import configure_logging, print_json, print_usage

logger = logging.getLogger(__name__)

CALENDAR_FILENAME = "tax_calendar.yaml"
DEFAULT_NEXT_COUNT = 5
EVENT_TYPES = ("vat", "withholding", "corporate", "insurance", "reporting")


@dataclass
class TaxDeadline:
    """A filing or payment deadline."""

    type: str
    name: str
    deadline: date
    description: str
    preparation: str
    d_day: int = 0

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "deadline": self.deadline.isoformat(),
            "description": self.description,
            "preparation": self.preparation,
            "dDay": self.d_day,
        }


def _today() -> date:
    return date.today()


class TaxCalendar:
    """Deadline table loaded from tax_calendar.yaml."""

    def __init__(self, config_dir: Path | str | None = None, today: date | None = None):
        """Load deadlines and compute D-days.

        Args:
            config_dir: Directory holding tax_calendar.yaml
            today: Reference date for D-day counts (defaults to today)
        """
        config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        calendar_file = config_dir / CALENDAR_FILENAME

        with open(calendar_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        self.year = int(data["year"])
        self.today = today or _today()
        self.deadlines = [self._build(entry) for entry in data["deadlines"]]
        logger.info(f"Loaded {len(self.deadlines)} deadlines for {self.year}")

    def _build(self, entry: dict) -> TaxDeadline:
        deadline = entry["deadline"]
        if not isinstance(deadline, date):
            deadline = date.fromisoformat(str(deadline))

        return TaxDeadline(
            type=entry["type"],
            name=entry["name"],
            deadline=deadline,
            description=entry["description"],
            preparation=entry["preparation"],
            d_day=(deadline - self.today).days,
        )

    def filter(self, event_type: str | None = None, month: str | None = None) -> list[TaxDeadline]:
        """Filter deadlines by type and by YYYY-MM month prefix."""
        deadlines = self.deadlines
        if event_type:
            deadlines = [d for d in deadlines if d.type == event_type]
        if month:
            deadlines = [d for d in deadlines if d.deadline.isoformat().startswith(month)]
        return deadlines

    @staticmethod
    def upcoming(deadlines: list[TaxDeadline], count: int = DEFAULT_NEXT_COUNT) -> list[TaxDeadline]:
        """Deadlines due today or later, nearest first.

        Args:
            deadlines: Deadlines to choose from
            count: Maximum number returned

        Returns:
            Up to count deadlines sorted by D-day
        """
        remaining = [d for d in deadlines if d.d_day >= 0]
        return sorted(remaining, key=lambda d: d.d_day)[:count]


USAGE = [
    "Usage: tax-calendar [options]",
    "",
    "Options:",
    "  --next              다음 마감일 조회 (기본 5개)",
    "  --count <N>         조회할 일정 수 (--next와 함께 사용)",
    "  --month YYYY-MM     특정 월의 일정 조회",
    f"  --type <type>       유형별 필터 ({'|'.join(EVENT_TYPES)})",
    "",
    "Examples:",
    "  tax-calendar --next",
    "  tax-calendar --next --count 3",
    "  tax-calendar --month 2026-03",
    "  tax-calendar --type vat",
]


def _parse_count(value: str | None) -> int:
    try:
        count = int(value) if value is not None else 0
    except ValueError:
        count = 0
    return count or DEFAULT_NEXT_COUNT


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    configure_logging()

    parser = argparse.ArgumentParser(description="Korean tax deadline calendar")
    parser.add_argument("--next", action="store_true", help="Show upcoming deadlines")
    parser.add_argument("--count", help="Number of upcoming deadlines (default 5)")
    parser.add_argument("--month", default="", help="Month filter (YYYY-MM)")
    parser.add_argument("--type", default="", help="Event type filter")
    args = parser.parse_args(argv)

    calendar = TaxCalendar(today=_today())
    deadlines = calendar.filter(args.type, args.month)

    if args.next:
        upcoming = calendar.upcoming(deadlines, _parse_count(args.count))
        if not upcoming:
            print_json({"message": f"{calendar.year}년 남은 세무 일정이 없습니다."})
            return 0
        print_json([d.to_dict() for d in upcoming])
        return 0

    if not args.month and not args.type:
        print_usage(USAGE)
        return 1

    print_json([d.to_dict() for d in deadlines])
    return 0


if __name__ == "__main__":
    sys.exit(main())
