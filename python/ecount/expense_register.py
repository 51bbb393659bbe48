"""
Expense Registration Module

Registers a card expense in Ecount as a purchase slip, splitting the
payment into supply amount and VAT.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from decimal import Decimal

import requests
from dotenv import load_dotenv

from common.cli import configure_logging, print_error, print_json, print_usage, won_amount
from common.formatting import format_krw, round_won

from .client import EcountClient, EcountError, PurchaseSlipItem, PurchaseSlipRequest

logger = logging.getLogger(__name__)

VAT_RATE = Decimal("0.1")


@dataclass
class ExpenseArgs:
    """Expense to register."""

    date: str  # YYYY-MM-DD
    amount: int
    vendor: str
    description: str
    user: str | None = None
    card_company: str | None = None
    card_number: str | None = None
    approval_number: str | None = None
    account_code: str | None = None
    vat_included: bool = True


@dataclass
class ExpenseResult:
    """Registered expense summary."""

    date: str
    vendor: str
    description: str
    supply_amount: int
    vat_amount: int
    total_amount: int
    user: str | None = None
    card_company: str | None = None
    approval_number: str | None = None
    success: bool = True

    def to_dict(self) -> dict:
        result = {
            "success": self.success,
            "date": self.date,
            "vendor": self.vendor,
            "description": self.description,
            "user": self.user,
            "supplyAmount": self.supply_amount,
            "vatAmount": self.vat_amount,
            "totalAmount": self.total_amount,
            "supplyAmountFormatted": format_krw(self.supply_amount),
            "vatAmountFormatted": format_krw(self.vat_amount),
            "totalAmountFormatted": format_krw(self.total_amount),
            "cardCompany": self.card_company,
            "approvalNumber": self.approval_number,
        }
        return {k: v for k, v in result.items() if v is not None}


def split_vat(total_amount: int, vat_included: bool) -> tuple[int, int]:
    """Split an amount into supply amount and VAT.

    Args:
        total_amount: Payment amount in won
        vat_included: Whether the amount already includes VAT

    Returns:
        Tuple of (supply, vat)
    """
    if vat_included:
        supply = round_won(Decimal(total_amount) / (1 + VAT_RATE))
        return supply, total_amount - supply

    return total_amount, round_won(Decimal(total_amount) * VAT_RATE)


def register_expense(args: ExpenseArgs, client: EcountClient | None = None) -> ExpenseResult:
    """Register an expense as an Ecount purchase slip.

    Args:
        args: Expense details
        client: Ecount client (created from the environment when omitted)

    Returns:
        ExpenseResult

    Raises:
        EcountError: If login or slip creation fails
    """
    client = client or EcountClient()
    supply, vat = split_vat(args.amount, args.vat_included)
    total_amount = args.amount if args.vat_included else supply + vat

    session = client.login()

    description = f"[{args.user}] {args.description}" if args.user else args.description
    request = PurchaseSlipRequest(
        slip_date=args.date,
        vendor_name=args.vendor,
        items=[
            PurchaseSlipItem(
                description=description,
                amount=supply,
                vat_amount=vat,
                account_code=args.account_code,
            )
        ],
        card_company_code=args.card_company,
        card_number=args.card_number,
        approval_number=args.approval_number,
        approval_date=args.date,
    )
    client.create_purchase_slip(session, request)

    return ExpenseResult(
        date=args.date,
        vendor=args.vendor,
        description=args.description,
        supply_amount=supply,
        vat_amount=vat,
        total_amount=total_amount,
        user=args.user,
        card_company=args.card_company,
        approval_number=args.approval_number,
    )


USAGE = [
    "Usage: register-expense --date YYYY-MM-DD --amount <금액> --vendor <가맹점> --description <적요> [--user <사용자>]",
    "",
    "Required:",
    "  --date <YYYY-MM-DD>      결제 날짜",
    "  --amount <금액>           결제 금액 (VAT 포함, 기본값)",
    "  --vendor <가맹점>         가맹점명",
    "  --description <적요>      비용 설명",
    "  --user <사용자>          카드 사용자 (대표, 직원명 등)",
    "",
    "Optional:",
    "  --card-company <카드사>    카드사명",
    "  --card-number <번호>      카드번호",
    "  --approval-number <번호>  승인번호",
    "  --account-code <코드>     계정과목 코드 (접대비, 복리후생비, 소모품비 등)",
    "  --vat-excluded            금액이 VAT 미포함인 경우",
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    load_dotenv()
    configure_logging()

    parser = argparse.ArgumentParser(description="Register a card expense in Ecount")
    parser.add_argument("--date", default="")
    parser.add_argument("--amount", type=won_amount, default=0)
    parser.add_argument("--vendor", default="")
    parser.add_argument("--description", default="")
    parser.add_argument("--user")
    parser.add_argument("--card-company")
    parser.add_argument("--card-number")
    parser.add_argument("--approval-number")
    parser.add_argument("--account-code")
    parser.add_argument("--vat-excluded", action="store_true")
    args = parser.parse_args(argv)

    if not (args.date and args.amount and args.vendor and args.description):
        print_usage(USAGE)
        return 1

    expense = ExpenseArgs(
        date=args.date,
        amount=args.amount,
        vendor=args.vendor,
        description=args.description,
        user=args.user,
        card_company=args.card_company,
        card_number=args.card_number,
        approval_number=args.approval_number,
        account_code=args.account_code,
        vat_included=not args.vat_excluded,
    )

    try:
        result = register_expense(expense)
    except (EcountError, requests.RequestException) as e:
        print_error(str(e))
        return 1

    print_json(result.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
