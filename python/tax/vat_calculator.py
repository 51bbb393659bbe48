"""
VAT Calculator Module

Computes Korean VAT (부가가치세) payable for a filing period, with
zero-rated/exempt handling and the credit-card sales tax credit.
Sales and purchase totals can be pulled from Ecount.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

import requests
from dotenv import load_dotenv

from common.cli import configure_logging, print_error, print_json, print_usage, won_amount
from common.formatting import format_krw, round_won
from ecount.client import EcountClient, EcountError, slip_rows

from .rules import load_rules

logger = logging.getLogger(__name__)

QUARTERS_PER_YEAR = 4

DEFAULT_RULES = {
    "standard_rate": 0.1,
    "card_sales_credit": {
        "label": "신용카드매출전표 발행 세액공제 (1.3%)",
        "rate": 0.013,
        "annual_cap": 10_000_000,
        "annual_sales_limit": 1_000_000_000,
    },
}


@dataclass
class VATDeduction:
    """A tax credit applied against VAT payable."""

    item: str
    amount: int

    def to_dict(self) -> dict:
        return {
            "항목": self.item,
            "금액": format_krw(self.amount),
            "amount": self.amount,
        }


@dataclass
class VATResult:
    """VAT computation result."""

    sales_amount: int
    purchase_amount: int
    output_tax: int
    input_tax: int
    deductions: list[VATDeduction] = field(default_factory=list)

    @property
    def payable_tax(self) -> int:
        return self.output_tax - self.input_tax

    @property
    def total_deduction(self) -> int:
        return sum(d.amount for d in self.deductions)

    @property
    def final_tax(self) -> int:
        return max(0, self.payable_tax - self.total_deduction)

    def to_dict(self) -> dict:
        deductions = [d.to_dict() for d in self.deductions]
        return {
            "매출액": format_krw(self.sales_amount),
            "매입액": format_krw(self.purchase_amount),
            "매출세액": format_krw(self.output_tax),
            "매입세액": format_krw(self.input_tax),
            "납부세액": format_krw(self.payable_tax),
            "공제내역": deductions,
            "공제합계": format_krw(self.total_deduction),
            "최종납부세액": format_krw(self.final_tax),
            "salesAmount": self.sales_amount,
            "purchaseAmount": self.purchase_amount,
            "outputTax": self.output_tax,
            "inputTax": self.input_tax,
            "payableTax": self.payable_tax,
            "deductions": deductions,
            "finalTax": self.final_tax,
        }


class VATCalculator:
    """Korean VAT calculator."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize calculator with VAT rules.

        Args:
            config_dir: Directory holding tax_rules.yaml
        """
        self.rules = load_rules(config_dir, "vat", DEFAULT_RULES)
        self.standard_rate = Decimal(str(self.rules["standard_rate"]))

    def card_sales_credit(self, sales_amount: int, annual_sales: int | None = None) -> VATDeduction | None:
        """Compute the credit-card sales slip tax credit.

        Args:
            sales_amount: Sales for the period
            annual_sales: Annual sales; estimated as period sales x 4 when omitted

        Returns:
            VATDeduction, or None when annual sales exceed the eligibility limit
        """
        credit_rules = self.rules["card_sales_credit"]
        if annual_sales is None:
            annual_sales = sales_amount * QUARTERS_PER_YEAR

        if annual_sales > credit_rules["annual_sales_limit"]:
            logger.info(f"Annual sales {annual_sales} above card credit limit")
            return None

        credit = min(
            round_won(Decimal(sales_amount) * Decimal(str(credit_rules["rate"]))),
            int(credit_rules["annual_cap"]),
        )
        return VATDeduction(item=credit_rules["label"], amount=credit)

    def calculate(
        self,
        sales_amount: int,
        purchase_amount: int,
        zero_rate: bool = False,
        exempt: bool = False,
        card_sales: bool = False,
        annual_sales: int | None = None
    ) -> VATResult:
        """Compute VAT payable for a period.

        Args:
            sales_amount: Supply value of sales
            purchase_amount: Supply value of purchases
            zero_rate: Sales are zero-rated (output tax 0%)
            exempt: Business is VAT exempt (no output or input tax)
            card_sales: Apply the credit-card sales tax credit
            annual_sales: Annual sales for the credit eligibility check

        Returns:
            VATResult
        """
        output_rate = Decimal("0") if zero_rate or exempt else self.standard_rate
        input_rate = Decimal("0") if exempt else self.standard_rate

        result = VATResult(
            sales_amount=sales_amount,
            purchase_amount=purchase_amount,
            output_tax=round_won(Decimal(sales_amount) * output_rate),
            input_tax=round_won(Decimal(purchase_amount) * input_rate),
        )

        if card_sales:
            credit = self.card_sales_credit(sales_amount, annual_sales)
            if credit:
                result.deductions.append(credit)

        return result


def _sum_supply_amounts(response: dict) -> int:
    total = Decimal("0")
    for slip in slip_rows(response):
        value = slip.get("SUPPLY_AMT")
        if value is None:
            value = slip.get("TOTAL_AMT")
        total += Decimal(str(value)) if value not in (None, "") else Decimal("0")
    return round_won(total)


def fetch_from_ecount(
    start_date: str,
    end_date: str,
    client: EcountClient | None = None
) -> tuple[int, int]:
    """Sum sales and purchase slips for a period.

    Args:
        start_date: Period start (YYYY-MM-DD)
        end_date: Period end (YYYY-MM-DD)
        client: Ecount client (created from the environment when omitted)

    Returns:
        Tuple of (sales_total, purchase_total)
    """
    client = client or EcountClient()
    session = client.login()

    sales = client.get_sales_slips(session, start_date, end_date)
    purchases = client.get_purchase_slips(session, start_date, end_date)

    sales_total = _sum_supply_amounts(sales)
    purchase_total = _sum_supply_amounts(purchases)
    logger.info(f"Ecount totals {start_date}~{end_date}: sales={sales_total}, purchases={purchase_total}")
    return sales_total, purchase_total


USAGE = [
    "Usage: calc-vat --sales-amount <금액> --purchase-amount <금액>",
    "  OR:  calc-vat --start-date YYYY-MM-DD --end-date YYYY-MM-DD",
    "",
    "Options:",
    "  --zero-rate         영세율 적용",
    "  --exempt            면세 적용",
    "  --card-sales        신용카드매출전표 세액공제 적용",
    "  --annual-sales <금액>  연매출액 (공제율 판단용)",
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    load_dotenv()
    configure_logging()

    parser = argparse.ArgumentParser(description="Calculate Korean VAT payable")
    parser.add_argument("--sales-amount", type=won_amount, default=0)
    parser.add_argument("--purchase-amount", type=won_amount, default=0)
    parser.add_argument("--start-date", default="")
    parser.add_argument("--end-date", default="")
    parser.add_argument("--zero-rate", action="store_true")
    parser.add_argument("--exempt", action="store_true")
    parser.add_argument("--card-sales", action="store_true")
    parser.add_argument("--annual-sales", type=won_amount)
    args = parser.parse_args(argv)

    sales_amount = args.sales_amount
    purchase_amount = args.purchase_amount

    if args.start_date and args.end_date:
        try:
            sales_amount, purchase_amount = fetch_from_ecount(args.start_date, args.end_date)
        except (EcountError, requests.RequestException) as e:
            print_error(str(e))
            return 1

    if sales_amount == 0 and purchase_amount == 0:
        print_usage(USAGE)
        return 1

    result = VATCalculator().calculate(
        sales_amount,
        purchase_amount,
        zero_rate=args.zero_rate,
        exempt=args.exempt,
        card_sales=args.card_sales,
        annual_sales=args.annual_sales,
    )
    print_json(result.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
