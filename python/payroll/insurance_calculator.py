"""
Social Insurance Calculator Module

Computes the monthly four major social-insurance premiums (4대보험):
national pension, health insurance, long-term care and employment
insurance, for both the employee and the employer share.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path

import yaml

from common.cli import configure_logging, print_json, print_usage, won_amount
from common.formatting import format_krw, round_won

logger = logging.getLogger(__name__)

RATES_FILENAME = "insurance_rates.yaml"


class InsuranceSide(Enum):
    """Who pays a premium share."""
    EMPLOYEE = "employee"
    EMPLOYER = "employer"


@dataclass
class InsurancePortion:
    """Premiums paid by one side."""

    pension: int
    health: int
    long_term_care: int
    employment: int

    @property
    def total(self) -> int:
        return self.pension + self.health + self.long_term_care + self.employment

    def to_dict(self) -> dict:
        return {
            "국민연금": format_krw(self.pension),
            "건강보험": format_krw(self.health),
            "장기요양보험": format_krw(self.long_term_care),
            "고용보험": format_krw(self.employment),
            "합계": format_krw(self.total),
            "pension": self.pension,
            "health": self.health,
            "longTermCare": self.long_term_care,
            "employment": self.employment,
            "total": self.total,
        }


@dataclass
class InsuranceResult:
    """Premiums for a monthly salary."""

    salary: int
    employee: InsurancePortion
    employer: InsurancePortion

    @property
    def grand_total(self) -> int:
        return self.employee.total + self.employer.total

    def to_dict(self) -> dict:
        employee = self.employee.to_dict()
        employer = self.employer.to_dict()
        return {
            "월보수액": format_krw(self.salary),
            "salary": self.salary,
            "근로자부담": employee,
            "사업주부담": employer,
            "employee": employee,
            "employer": employer,
            "총합계": format_krw(self.grand_total),
            "grandTotal": self.grand_total,
        }


class InsuranceCalculator:
    """Four major insurances premium calculator."""

    DEFAULT_RATES = {
        "pension": {
            "employee": 0.0475,
            "employer": 0.0475,
            "base_min": 370_000,
            "base_max": 6_170_000,
        },
        "health": {"employee": 0.03595, "employer": 0.03595},
        "long_term_care": {"rate": 0.1314},
        "employment": {"employee": 0.009, "employer": 0.009},
    }

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize calculator with premium rates.

        Args:
            config_dir: Directory holding insurance_rates.yaml
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self.rates = self._load_rates()

    def _load_rates(self) -> dict:
        """Load premium rates from YAML."""
        rates_file = self.config_dir / RATES_FILENAME

        if not rates_file.exists():
            logger.warning(f"Insurance rates file not found: {rates_file}, using defaults")
            return self.DEFAULT_RATES

        with open(rates_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        logger.info(f"Loaded insurance rates from {rates_file}")
        return data.get("insurance", self.DEFAULT_RATES)

    def _rate(self, insurance: str, side: InsuranceSide) -> Decimal:
        return Decimal(str(self.rates[insurance][side.value]))

    def calculate_portion(self, salary: int, side: InsuranceSide) -> InsurancePortion:
        """Compute one side's premiums.

        The pension base is clamped to the monthly income floor and ceiling;
        long-term care is a share of the health premium. Each premium is
        rounded to whole won on its own.

        Args:
            salary: Monthly salary in won
            side: Employee or employer

        Returns:
            InsurancePortion
        """
        amount = Decimal(str(salary))
        pension_rules = self.rates["pension"]
        pension_base = min(
            max(amount, Decimal(str(pension_rules["base_min"]))),
            Decimal(str(pension_rules["base_max"])),
        )

        pension = round_won(pension_base * self._rate("pension", side))
        health = round_won(amount * self._rate("health", side))
        long_term_care = round_won(
            Decimal(health) * Decimal(str(self.rates["long_term_care"]["rate"]))
        )
        employment = round_won(amount * self._rate("employment", side))

        return InsurancePortion(
            pension=pension,
            health=health,
            long_term_care=long_term_care,
            employment=employment,
        )

    def calculate(self, salary: int) -> InsuranceResult:
        """Compute employee and employer premiums for a monthly salary."""
        return InsuranceResult(
            salary=salary,
            employee=self.calculate_portion(salary, InsuranceSide.EMPLOYEE),
            employer=self.calculate_portion(salary, InsuranceSide.EMPLOYER),
        )


USAGE = [
    "Usage: calc-insurance --salary <월보수액>",
    "",
    "Examples:",
    "  calc-insurance --salary 3000000",
    "  calc-insurance --salary 5000000",
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    configure_logging()

    parser = argparse.ArgumentParser(description="Calculate four major insurance premiums")
    parser.add_argument("--salary", type=won_amount, default=0, help="Monthly salary in won")
    args = parser.parse_args(argv)

    if args.salary <= 0:
        print_usage(USAGE)
        return 1

    result = InsuranceCalculator().calculate(args.salary)
    print_json(result.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
