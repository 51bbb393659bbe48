"""
Ecount API Client Module

Session-based client for the Ecount ERP Open API: login, sales/purchase
slip listing, payroll lookup and purchase slip creation.
"""

import argparse
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from typing import Any

import requests
from dotenv import load_dotenv

from common.cli import configure_logging, print_error, print_json, print_usage

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = [
    "ECOUNT_COM_CODE",
    "ECOUNT_USER_ID",
    "ECOUNT_API_CERT_KEY",
    "ECOUNT_ZONE",
]

LOGIN_PATH = "/OAPI/V2/OAPILogin"
SALES_SLIPS_PATH = "/OAPI/V2/Sale/GetListSaleSlipAll"
PURCHASE_SLIPS_PATH = "/OAPI/V2/Sale/GetListPurchaseSlipAll"
PAYROLL_PATH = "/OAPI/V2/HRSalary/GetListSalarySlip"
SAVE_PURCHASES_PATH = "/OAPI/V2/Purchases/SavePurchases"

OK_STATUSES = ("200", "200 OK")
REQUEST_TIMEOUT = 30  # seconds
YEAR_MONTH_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}")


class EcountError(Exception):
    """Raised for missing credentials or a failed Ecount API call."""


@dataclass
class EcountConfig:
    """Ecount API credentials."""

    com_code: str
    user_id: str
    api_cert_key: str
    zone: str

    @classmethod
    def from_env(cls) -> "EcountConfig":
        """Load credentials from ECOUNT_* environment variables."""
        values = {name: os.getenv(name) for name in REQUIRED_ENV_VARS}
        if not all(values.values()):
            raise EcountError(
                f"Missing required environment variables: {', '.join(REQUIRED_ENV_VARS)}"
            )

        return cls(
            com_code=values["ECOUNT_COM_CODE"],
            user_id=values["ECOUNT_USER_ID"],
            api_cert_key=values["ECOUNT_API_CERT_KEY"],
            zone=values["ECOUNT_ZONE"],
        )


@dataclass
class EcountSession:
    """Authenticated Ecount session."""

    session_id: str
    zone: str


@dataclass
class PurchaseSlipItem:
    """Line item of a purchase slip."""

    description: str
    amount: int  # supply amount
    vat_amount: int
    account_code: str | None = None
    quantity: int = 1


@dataclass
class PurchaseSlipRequest:
    """Purchase slip (매입전표) to create."""

    slip_date: str  # YYYY-MM-DD
    vendor_name: str
    items: list[PurchaseSlipItem] = field(default_factory=list)
    card_company_code: str | None = None
    card_number: str | None = None
    approval_number: str | None = None
    approval_date: str | None = None

    def to_payload(self) -> dict:
        """Build the SavePurchases request body."""
        purchases = []
        for item in self.items:
            bulk_data = {
                "IO_DATE": self.slip_date.replace("-", ""),
                "CUST_NM": self.vendor_name,
                "PROD_DES": item.description,
                "QTY": str(item.quantity),
                "AMT": str(item.amount),
                "VAT_AMT": str(item.vat_amount),
                "ACCT_CD": item.account_code or "",
                "CARD_CD": self.card_company_code or "",
                "CARD_NO": self.card_number or "",
                "APPR_NO": self.approval_number or "",
                "APPR_DATE": (self.approval_date or "").replace("-", ""),
            }
            purchases.append({"BulkDatas": bulk_data})
        return {"PurchasesList": purchases}


def base_url(zone: str) -> str:
    return f"https://sboapi{zone}.ecount.com"


def _date_range_body(start_date: str, end_date: str) -> dict:
    return {
        "BASE_DATE_FROM": start_date.replace("-", ""),
        "BASE_DATE_TO": end_date.replace("-", ""),
    }


class EcountClient:
    """Ecount Open API client."""

    def __init__(
        self,
        config: EcountConfig | None = None,
        session: requests.Session | None = None
    ):
        """Initialize the client.

        Args:
            config: API credentials; read from the environment on login when omitted
            session: HTTP session to reuse
        """
        self.config = config
        self.http = session or requests.Session()

    def login(self) -> EcountSession:
        """Log in and open an API session.

        Returns:
            EcountSession with session id and zone

        Raises:
            EcountError: If credentials are missing or login is rejected
        """
        config = self.config or EcountConfig.from_env()
        url = f"{base_url(config.zone)}{LOGIN_PATH}"
        logger.debug(f"POST {url}")

        response = self.http.post(
            url,
            json={
                "COM_CODE": config.com_code,
                "USER_ID": config.user_id,
                "API_CERT_KEY": config.api_cert_key,
                "LAN_TYPE": "ko-KR",
            },
            timeout=REQUEST_TIMEOUT,
        )

        if not response.ok:
            logger.error(f"Ecount login HTTP error: {response.status_code}")
            raise EcountError(f"Login failed: HTTP {response.status_code} {response.reason}")

        data = response.json()
        if data.get("Status") not in OK_STATUSES:
            raise EcountError(f"Login failed: {data.get('Error') or data.get('Status')}")

        datas = (data.get("Data") or {}).get("Datas")
        if not isinstance(datas, dict) or not datas.get("SESSION_ID"):
            raise EcountError(f"Login failed: {data.get('Error') or data.get('Status')}")

        return EcountSession(
            session_id=datas["SESSION_ID"],
            zone=datas.get("ZONE") or config.zone,
        )

    def _authenticated_post(
        self,
        session: EcountSession,
        path: str,
        body: dict[str, Any]
    ) -> dict:
        url = f"{base_url(session.zone)}{path}"
        logger.debug(f"POST {url}")

        response = self.http.post(
            url,
            json=body,
            headers={"SESSION_ID": session.session_id},
            timeout=REQUEST_TIMEOUT,
        )

        if not response.ok:
            logger.error(f"Ecount API HTTP error on {path}: {response.status_code}")
            raise EcountError(
                f"API call failed: HTTP {response.status_code} {response.reason}"
            )

        return response.json()

    def get_sales_slips(self, session: EcountSession, start_date: str, end_date: str) -> dict:
        """List sales slips between two YYYY-MM-DD dates."""
        return self._authenticated_post(
            session, SALES_SLIPS_PATH, _date_range_body(start_date, end_date)
        )

    def get_purchase_slips(self, session: EcountSession, start_date: str, end_date: str) -> dict:
        """List purchase slips between two YYYY-MM-DD dates."""
        return self._authenticated_post(
            session, PURCHASE_SLIPS_PATH, _date_range_body(start_date, end_date)
        )

    def get_payroll(self, session: EcountSession, year_month: str) -> dict:
        """List salary slips for a YYYY-MM month.

        Raises:
            EcountError: If the month is not in YYYY-MM form
        """
        if not YEAR_MONTH_PATTERN.fullmatch(year_month or ""):
            raise EcountError("--month is required for payroll action (format: YYYY-MM)")
        year, month = year_month.split("-")
        return self._authenticated_post(session, PAYROLL_PATH, {"YEAR": year, "MONTH": month})

    def create_purchase_slip(
        self,
        session: EcountSession,
        request: PurchaseSlipRequest
    ) -> dict:
        """Create a purchase slip.

        Args:
            session: Authenticated session
            request: Slip contents

        Returns:
            API response data

        Raises:
            EcountError: If the API rejects the slip
        """
        url = f"{base_url(session.zone)}{SAVE_PURCHASES_PATH}"
        logger.debug(f"POST {url}")

        response = self.http.post(
            url,
            params={"SESSION_ID": session.session_id},
            json=request.to_payload(),
            timeout=REQUEST_TIMEOUT,
        )

        if not response.ok:
            raise EcountError(
                f"Purchase slip creation failed: HTTP {response.status_code} {response.reason}"
            )

        data = response.json()
        if data.get("Status") not in OK_STATUSES:
            logger.error(f"Purchase slip rejected: {data.get('Error')}")
            raise EcountError(
                f"Purchase slip creation failed: {data.get('Error') or data.get('Status')}"
            )

        logger.info(f"Created purchase slip for {request.vendor_name}")
        return data


def slip_rows(response: dict) -> list[dict]:
    """Return the slip rows of a list response, tolerating empty payloads."""
    data = response.get("Data") or {}
    return data.get("Datas") or []


# ==================== CLI ====================

USAGE = [
    "Usage: ecount-client --action login|sales|purchases|payroll [options]",
    "  --test                    Test login connection",
    "  --action login            Login and get session",
    "  --action sales            Get sales slips (requires --start-date, --end-date)",
    "  --action purchases        Get purchase slips (requires --start-date, --end-date)",
    "  --action payroll          Get payroll (requires --month YYYY-MM)",
]


def run_action(client: EcountClient, args: argparse.Namespace) -> dict:
    """Run a CLI action and return the JSON-ready result."""
    session = client.login()

    if args.action == "login":
        return {"success": True, "sessionId": session.session_id, "zone": session.zone}

    if args.action in ("sales", "purchases"):
        if not args.start_date or not args.end_date:
            raise EcountError(f"--start-date and --end-date are required for {args.action} action")
        if args.action == "sales":
            return client.get_sales_slips(session, args.start_date, args.end_date)
        return client.get_purchase_slips(session, args.start_date, args.end_date)

    if args.action == "payroll":
        if not args.month:
            raise EcountError("--month is required for payroll action (format: YYYY-MM)")
        return client.get_payroll(session, args.month)

    raise EcountError(f"Unknown action: {args.action}. Use login|sales|purchases|payroll")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    load_dotenv()
    configure_logging()

    parser = argparse.ArgumentParser(description="Ecount Open API client")
    parser.add_argument("--action", default="", help="login|sales|purchases|payroll")
    parser.add_argument("--start-date", default="", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end-date", default="", help="End date (YYYY-MM-DD)")
    parser.add_argument("--month", default="", help="Payroll month (YYYY-MM)")
    parser.add_argument("--test", action="store_true", help="Test login connection")
    args = parser.parse_args(argv)

    if not args.test and not args.action:
        print_usage(USAGE)
        return 1

    client = EcountClient()
    try:
        if args.test:
            session = client.login()
            result = {
                "success": True,
                "message": "로그인 성공",
                "sessionId": session.session_id[:8] + "...",
                "zone": session.zone,
            }
        else:
            result = run_action(client, args)
    except (EcountError, requests.RequestException) as e:
        print_error(str(e))
        return 1

    print_json(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
