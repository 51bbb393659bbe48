"""
Corporate Income Tax Calculator Module

Computes Korean corporate income tax (법인세) on a taxable base using the
progressive bracket table, with SME reductions and local income tax.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path

from common.cli import configure_logging, print_json, print_usage, won_amount
from common.formatting import format_krw, round_won

from .rules import load_rules

logger = logging.getLogger(__name__)

DEFAULT_RULES = {
    "brackets": [
        {"upper": 200_000_000, "rate": 0.10, "cumulative": 0},
        {"upper": 20_000_000_000, "rate": 0.20, "cumulative": 20_000_000},
        {"upper": 300_000_000_000, "rate": 0.22, "cumulative": 3_980_000_000},
        {"upper": None, "rate": 0.25, "cumulative": 65_560_000_000},
    ],
    "sme_reduction_rate": 0.5,
    "youth_startup_reduction_rate": 1.0,
    "local_tax_rate": 0.1,
}


@dataclass
class TaxBracket:
    """One progressive bracket; upper is None for the top bracket."""

    upper: Decimal | None
    rate: Decimal
    cumulative: Decimal


@dataclass
class CorporateTaxResult:
    """Corporate income tax computation result."""

    taxable_income: int
    corporate_tax: int
    local_tax: int
    total_tax: int
    effective_rate: str
    sme_deduction: int | None = None

    def to_dict(self) -> dict:
        result = {
            "과세표준": format_krw(self.taxable_income),
            "법인세": format_krw(self.corporate_tax),
            "지방소득세": format_krw(self.local_tax),
            "총세금": format_krw(self.total_tax),
            "실효세율": self.effective_rate,
            "taxableIncome": self.taxable_income,
            "corporateTax": self.corporate_tax,
            "localTax": self.local_tax,
            "totalTax": self.total_tax,
            "effectiveRate": self.effective_rate,
        }
        if self.sme_deduction is not None:
            result["중소기업감면"] = format_krw(self.sme_deduction)
            result["smeDeduction"] = self.sme_deduction
        return result


class CorporateTaxCalculator:
    """Korean corporate income tax calculator."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize calculator with bracket rules.

        Args:
            config_dir: Directory holding tax_rules.yaml
        """
        self.rules = load_rules(config_dir, "corporate_tax", DEFAULT_RULES)
        self.brackets = [
            TaxBracket(
                upper=Decimal(str(b["upper"])) if b.get("upper") is not None else None,
                rate=Decimal(str(b["rate"])),
                cumulative=Decimal(str(b.get("cumulative", 0))),
            )
            for b in self.rules["brackets"]
        ]

    def compute_base_tax(self, taxable_income: int) -> int:
        """Apply the progressive brackets to a taxable base.

        Args:
            taxable_income: Taxable base in won

        Returns:
            Tax before reductions, rounded to whole won
        """
        income = Decimal(str(taxable_income))
        prev_upper = Decimal("0")

        for bracket in self.brackets:
            if bracket.upper is None or income <= bracket.upper:
                return round_won(bracket.cumulative + (income - prev_upper) * bracket.rate)
            prev_upper = bracket.upper

        return 0

    def calculate(
        self,
        taxable_income: int,
        sme: bool = False,
        youth: bool = False
    ) -> CorporateTaxResult:
        """Compute corporate tax, SME reduction and local income tax.

        Args:
            taxable_income: Taxable base (과세표준)
            sme: Apply the SME tax reduction
            youth: Youth start-up SME (full reduction); only with sme

        Returns:
            CorporateTaxResult
        """
        if taxable_income <= 0:
            return CorporateTaxResult(
                taxable_income=0,
                corporate_tax=0,
                local_tax=0,
                total_tax=0,
                effective_rate="0%",
            )

        corporate_tax = self.compute_base_tax(taxable_income)

        sme_deduction = None
        if sme:
            key = "youth_startup_reduction_rate" if youth else "sme_reduction_rate"
            reduction_rate = Decimal(str(self.rules[key]))
            sme_deduction = round_won(corporate_tax * reduction_rate)
            corporate_tax -= sme_deduction

        local_tax = round_won(corporate_tax * Decimal(str(self.rules["local_tax_rate"])))
        total_tax = corporate_tax + local_tax

        rate = (Decimal(total_tax) / Decimal(str(taxable_income)) * 100).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )

        return CorporateTaxResult(
            taxable_income=taxable_income,
            corporate_tax=corporate_tax,
            local_tax=local_tax,
            total_tax=total_tax,
            effective_rate=f"{rate}%",
            sme_deduction=sme_deduction,
        )


USAGE = [
    "Usage: calc-corporate-tax --income <과세표준>",
    "",
    "Options:",
    "  --sme     중소기업 세액감면 적용 (50%)",
    "  --youth   청년창업 중소기업 감면 (100%, --sme와 함께 사용)",
    "",
    "Examples:",
    "  calc-corporate-tax --income 100000000",
    "  calc-corporate-tax --income 500000000 --sme",
    "  calc-corporate-tax --income 200000000 --sme --youth",
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    configure_logging()

    parser = argparse.ArgumentParser(description="Calculate Korean corporate income tax")
    parser.add_argument("--income", type=won_amount, default=0, help="Taxable base in won")
    parser.add_argument("--sme", action="store_true", help="Apply SME reduction")
    parser.add_argument("--youth", action="store_true", help="Youth start-up SME")
    args = parser.parse_args(argv)

    if args.income <= 0:
        print_usage(USAGE)
        return 1

    result = CorporateTaxCalculator().calculate(args.income, args.sme, args.youth)
    print_json(result.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
