"""
Withholding Tax Calculator Module

Estimates monthly wage withholding (근로소득 원천징수) from a simplified
wage table, adjusted for the number of dependents.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from common.cli import configure_logging, print_json, print_usage, won_amount
from common.formatting import format_krw, round_won

from .rules import load_rules

logger = logging.getLogger(__name__)

MIN_DEPENDENTS = 1
MAX_DEPENDENTS = 5

DEFAULT_RULES = {
    "wage_table": [
        {"salary": 1_500_000, "tax": 0},
        {"salary": 2_000_000, "tax": 19_520},
        {"salary": 2_500_000, "tax": 39_960},
        {"salary": 3_000_000, "tax": 66_360},
        {"salary": 3_500_000, "tax": 99_960},
        {"salary": 4_000_000, "tax": 140_790},
        {"salary": 4_500_000, "tax": 182_790},
        {"salary": 5_000_000, "tax": 225_990},
        {"salary": 5_500_000, "tax": 277_990},
        {"salary": 6_000_000, "tax": 330_570},
        {"salary": 7_000_000, "tax": 449_340},
        {"salary": 8_000_000, "tax": 582_170},
        {"salary": 9_000_000, "tax": 725_170},
        {"salary": 10_000_000, "tax": 882_170},
    ],
    "dependent_discount": {1: 0, 2: 0.30, 3: 0.50, 4: 0.65, 5: 0.75},
    "local_tax_rate": 0.1,
}


@dataclass
class WithholdingResult:
    """Monthly withholding computation result."""

    salary: int
    dependents: int
    income_tax: int
    local_tax: int

    @property
    def total_withholding(self) -> int:
        return self.income_tax + self.local_tax

    def to_dict(self) -> dict:
        return {
            "급여": format_krw(self.salary),
            "공제대상가족수": self.dependents,
            "소득세": format_krw(self.income_tax),
            "지방소득세": format_krw(self.local_tax),
            "원천징수합계": format_krw(self.total_withholding),
            "salary": self.salary,
            "dependents": self.dependents,
            "incomeTax": self.income_tax,
            "localTax": self.local_tax,
            "totalWithholding": self.total_withholding,
        }


class WithholdingCalculator:
    """Wage withholding calculator based on the simplified tax table."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize calculator with the wage table.

        Args:
            config_dir: Directory holding tax_rules.yaml
        """
        rules = load_rules(config_dir, "withholding", DEFAULT_RULES)
        self.wage_table = [
            (Decimal(str(row["salary"])), Decimal(str(row["tax"])))
            for row in rules["wage_table"]
        ]
        self.dependent_discount = {
            int(k): Decimal(str(v)) for k, v in rules["dependent_discount"].items()
        }
        self.local_tax_rate = Decimal(str(rules["local_tax_rate"]))

    def interpolate_tax(self, salary: int) -> int:
        """Look up the one-dependent tax for a monthly salary.

        Salaries between table rows are interpolated linearly; salaries above
        the table continue the slope of the last two rows.

        Args:
            salary: Monthly salary in won

        Returns:
            Income tax for one dependent
        """
        amount = Decimal(str(salary))
        first_salary, _ = self.wage_table[0]
        if amount <= first_salary:
            return 0

        last_salary, last_tax = self.wage_table[-1]
        if amount >= last_salary:
            prev_salary, prev_tax = self.wage_table[-2]
            slope = (last_tax - prev_tax) / (last_salary - prev_salary)
            return round_won(last_tax + (amount - last_salary) * slope)

        for (lower_salary, lower_tax), (upper_salary, upper_tax) in zip(
            self.wage_table, self.wage_table[1:]
        ):
            if amount <= upper_salary:
                ratio = (amount - lower_salary) / (upper_salary - lower_salary)
                return round_won(lower_tax + ratio * (upper_tax - lower_tax))

        return 0

    def calculate(self, salary: int, dependents: int = 1) -> WithholdingResult:
        """Compute monthly income tax and local income tax.

        Args:
            salary: Monthly salary in won
            dependents: Number of dependents including the employee

        Returns:
            WithholdingResult (dependents reported as given)
        """
        base_tax = self.interpolate_tax(salary)

        clamped = min(max(dependents, MIN_DEPENDENTS), MAX_DEPENDENTS)
        discount = self.dependent_discount.get(clamped, Decimal("0"))
        income_tax = max(0, round_won(base_tax * (1 - discount)))
        local_tax = round_won(income_tax * self.local_tax_rate)

        return WithholdingResult(
            salary=salary,
            dependents=dependents,
            income_tax=income_tax,
            local_tax=local_tax,
        )


USAGE = [
    "Usage: calc-withholding --salary <월급여> [--dependents <가족수>]",
    "",
    "Examples:",
    "  calc-withholding --salary 3000000",
    "  calc-withholding --salary 5000000 --dependents 3",
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    configure_logging()

    parser = argparse.ArgumentParser(description="Calculate monthly wage withholding")
    parser.add_argument("--salary", type=won_amount, default=0, help="Monthly salary in won")
    parser.add_argument("--dependents", type=int, default=1, help="Number of dependents")
    args = parser.parse_args(argv)

    if args.salary <= 0:
        print_usage(USAGE)
        return 1

    result = WithholdingCalculator().calculate(args.salary, args.dependents)
    print_json(result.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
