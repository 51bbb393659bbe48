"""
Card Notification Parser Module

Parses Korean card-company SMS/push notifications into structured records.
Each field has its own extractor; only the amount is mandatory.
"""

import argparse
import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from common.cli import configure_logging, print_error, print_json, print_usage
from common.formatting import format_krw

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


class TransactionType(Enum):
    """Notification transaction types."""
    APPROVAL = "승인"
    CANCELLATION = "취소"
    UNKNOWN = "unknown"


# Checked in order; the first company with a matching keyword wins.
CARD_COMPANY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("삼성카드", ("삼성카드", "삼성체크", "삼성법인", "삼성가족카드")),
    ("신한카드", ("신한카드", "신한체크")),
    ("KB국민카드", ("KB국민카드", "국민카드", "KB카드", "KB*카드", "[KB]")),
    ("현대카드", ("현대카드",)),
    ("롯데카드", ("롯데카드",)),
    ("하나카드", ("하나카드", "하나SK", "KEB하나", "하나(")),
    ("BC카드", ("BC카드", "비씨카드", "BC(")),
    ("NH농협카드", ("NH카드", "농협카드", "NH농협", "농협BC")),
    ("우리카드", ("우리카드",)),
    ("씨티카드", ("씨티카드", "씨티BC")),
)

CANCELLATION_KEYWORD = "취소"
APPROVAL_KEYWORDS = ("승인", "출금", "사용")

LUMP_SUM = "일시불"
CUMULATIVE = "누적"
BALANCE = "잔액"

# Per-line amount patterns, tried top to bottom
AMOUNT_LINE_PATTERNS = (
    re.compile(r"^([0-9][0-9,]*)\s*원"),             # 45,000원 / 45,000원(일시불)
    re.compile(r"\(일시불\)\s*([0-9][0-9,]*)\s*원"),  # (일시불)45,000원
    re.compile(r"일시불\s*([0-9][0-9,]*)\s*원"),      # 일시불 45,000원
    re.compile(r"([0-9][0-9,]*)\s*원[\s(]"),         # 45,000원 스타벅스
)
AMOUNT_PATTERN = re.compile(r"([0-9][0-9,]*)\s*원")
CUMULATIVE_STRIP_PATTERN = re.compile(r"누적[\s:\-]?[0-9,]+원?")
BALANCE_STRIP_PATTERN = re.compile(r"잔액[0-9,\s]+원?")

DATE_TIME_PATTERNS = (
    re.compile(r"([0-9]{1,2})/([0-9]{1,2})\s+([0-9]{2}):([0-9]{2})"),
    re.compile(r"([0-9]{1,2})월\s*([0-9]{1,2})일\s*([0-9]{2}):([0-9]{2})"),
    re.compile(r"([0-9]{1,2})/([0-9]{1,2})"),
)

CARD_HOLDER_PATTERN = re.compile(r"([가-힣*]{2,4})님")
CUMULATIVE_PATTERN = re.compile(r"누적[\s:\-]?([0-9][0-9,]*)\s*원?")
BALANCE_PATTERN = re.compile(r"잔액\s*([0-9][0-9,]*)\s*원?")
INSTALLMENT_PATTERN = re.compile(r"([0-9]{1,2})\s*개월")
APPROVAL_NUMBER_PATTERN = re.compile(r"승인번호?\s*:?\s*([0-9]{6,10})")

# Lines that carry a known field and can never be the vendor
VENDOR_SKIP_PATTERNS = (
    re.compile(r"^\[Web발신\]$"),
    re.compile(r"^\(Web발신\)$"),
    re.compile(r"^\[.*카드\]"),
    re.compile(r"카드"),
    re.compile(r"은행"),
    re.compile(r"님\s*(승인|취소|사용|출금)?$"),
    re.compile(r"^[0-9]{1,2}/[0-9]{1,2}\s+[0-9]{2}:[0-9]{2}$"),
    re.compile(r"^[0-9]{1,2}/[0-9]{1,2}$"),
    re.compile(r"^[0-9,]+\s*원"),
    re.compile(r"^일시불"),
    re.compile(r"^\(일시불\)"),
    re.compile(r"^누적"),
    re.compile(r"^잔액"),
    re.compile(r"^승인$"),
    re.compile(r"^취소$"),
    re.compile(r"^체크카드"),
    re.compile(r"^[0-9]{6,}"),
    re.compile(r"^[*0-9]{4,}$"),
)
VENDOR_TRAILING_TYPE_PATTERN = re.compile(r"\s*(취소|사용|승인)\s*$")
VENDOR_ONELINE_PATTERN = re.compile(
    r"[0-9,]+\s*원\s+([가-힣a-zA-Z0-9()\s]{2,20}?)(?:\s+누적|\s*$)"
)


@dataclass(frozen=True)
class DateTimeParts:
    """Date/time fields found in a notification; the year is inferred later."""

    month: int
    day: int
    hour: int = 0
    minute: int = 0


@dataclass(frozen=True)
class CardNotification:
    """Structured card notification."""

    card_company: str
    transaction_type: TransactionType
    amount: int
    vendor: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    raw: str
    card_holder: str | None = None
    approval_number: str | None = None
    installment: int | None = None  # 0 = lump sum
    cumulative: int | None = None
    balance: int | None = None

    def to_dict(self) -> dict:
        return {
            "cardCompany": self.card_company,
            "type": self.transaction_type.value,
            "amount": self.amount,
            "vendor": self.vendor,
            "date": self.date,
            "time": self.time,
            "cardHolder": self.card_holder,
            "approvalNumber": self.approval_number,
            "installment": self.installment,
            "cumulative": self.cumulative,
            "balance": self.balance,
            "raw": self.raw,
        }

    def format_result(self) -> dict[str, Any]:
        """Build the CLI output with Korean labels followed by canonical keys."""
        result: dict[str, Any] = {
            "카드사": self.card_company,
            "유형": self.transaction_type.value,
            "금액": format_krw(self.amount),
            "가맹점": self.vendor,
            "날짜": self.date,
            "시간": self.time,
        }
        if self.card_holder:
            result["카드소유자"] = self.card_holder
        if self.approval_number:
            result["승인번호"] = self.approval_number
        if self.installment is not None:
            result["할부"] = LUMP_SUM if self.installment == 0 else f"{self.installment}개월"
        if self.cumulative is not None:
            result["누적사용액"] = format_krw(self.cumulative)
        if self.balance is not None:
            result["잔액"] = format_krw(self.balance)

        result.update({
            "amount": self.amount,
            "vendor": self.vendor,
            "date": self.date,
            "time": self.time,
            "cardCompany": self.card_company,
            "type": self.transaction_type.value,
        })
        return result


def _to_int(number: str) -> int:
    return int(number.replace(",", ""))


# ==================== Field Extractors ====================

def detect_card_company(text: str) -> str:
    """Return the first card company whose keyword appears in the text."""
    for name, keywords in CARD_COMPANY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return name
    return UNKNOWN


def detect_transaction_type(text: str) -> TransactionType:
    """Classify the notification; cancellation beats approval."""
    if CANCELLATION_KEYWORD in text:
        return TransactionType.CANCELLATION
    if any(keyword in text for keyword in APPROVAL_KEYWORDS):
        return TransactionType.APPROVAL
    return TransactionType.UNKNOWN


def extract_amount(text: str) -> int:
    """Extract the transaction amount, ignoring cumulative and balance figures.

    Args:
        text: Notification text

    Returns:
        Amount in won, or 0 when no amount can be found
    """
    for line in text.split("\n"):
        line = line.strip()
        if line.startswith(BALANCE) or CUMULATIVE in line:
            continue

        for pattern in AMOUNT_LINE_PATTERNS:
            match = pattern.search(line)
            if match:
                return _to_int(match.group(1))

    cleaned = CUMULATIVE_STRIP_PATTERN.sub("", text)
    cleaned = BALANCE_STRIP_PATTERN.sub("", cleaned)
    match = AMOUNT_PATTERN.search(cleaned)
    if match:
        return _to_int(match.group(1))

    return 0


def extract_date_time(text: str) -> DateTimeParts | None:
    """Find the first date/time token.

    Month and day are returned as written; they are validated when the
    full date is resolved.
    """
    for pattern in DATE_TIME_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        groups = [int(g) for g in match.groups()]
        return DateTimeParts(*groups)
    return None


def extract_card_holder(text: str) -> str | None:
    match = CARD_HOLDER_PATTERN.search(text)
    return match.group(1) if match else None


def extract_cumulative(text: str) -> int | None:
    match = CUMULATIVE_PATTERN.search(text)
    return _to_int(match.group(1)) if match else None


def extract_balance(text: str) -> int | None:
    match = BALANCE_PATTERN.search(text)
    return _to_int(match.group(1)) if match else None


def extract_installment(text: str) -> int | None:
    """Return installment months, 0 for lump sum, None when not stated."""
    if LUMP_SUM in text:
        return 0
    match = INSTALLMENT_PATTERN.search(text)
    return int(match.group(1)) if match else None


def extract_approval_number(text: str) -> str | None:
    match = APPROVAL_NUMBER_PATTERN.search(text)
    return match.group(1) if match else None


def extract_vendor(text: str) -> str:
    """Extract the merchant name.

    The first line that is not a known field is the vendor. Single-line
    notifications fall back to the token after the amount.

    Args:
        text: Notification text

    Returns:
        Vendor name, or "unknown"
    """
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]

    for line in lines:
        if any(pattern.search(line) for pattern in VENDOR_SKIP_PATTERNS):
            continue

        if len(line) >= 2:
            cleaned = VENDOR_TRAILING_TYPE_PATTERN.sub("", line).strip()
            if len(cleaned) >= 2:
                return cleaned

    oneline = text.replace("\n", " ")
    match = VENDOR_ONELINE_PATTERN.search(oneline)
    if match:
        return match.group(1).strip()

    return UNKNOWN


def infer_year(month: int, now: datetime) -> int:
    """Infer the year of a notification from its month.

    A December notification processed in January or February belongs to
    the previous year.
    """
    if month == 12 and now.month <= 2:
        return now.year - 1
    return now.year


def _resolve_date_time(parts: DateTimeParts | None, now: datetime) -> tuple[str, str]:
    if parts:
        try:
            resolved = datetime(
                infer_year(parts.month, now), parts.month, parts.day,
                parts.hour, parts.minute
            )
            return resolved.strftime("%Y-%m-%d"), resolved.strftime("%H:%M")
        except ValueError:
            logger.debug(f"Ignoring invalid date/time in notification: {parts}")

    return now.strftime("%Y-%m-%d"), now.strftime("%H:%M")


# ==================== Main Parser ====================

def parse_card_notification(
    text: str,
    now: datetime | None = None
) -> CardNotification | None:
    """Parse a card notification.

    Args:
        text: Raw notification text
        now: Processing time, used for year inference and missing dates

    Returns:
        CardNotification, or None when no amount can be determined
    """
    if not text or not text.strip():
        return None

    amount = extract_amount(text)
    if amount == 0:
        logger.info("No amount found in notification")
        return None

    now = now or datetime.now()
    date_str, time_str = _resolve_date_time(extract_date_time(text), now)

    return CardNotification(
        card_company=detect_card_company(text),
        transaction_type=detect_transaction_type(text),
        amount=amount,
        vendor=extract_vendor(text),
        date=date_str,
        time=time_str,
        raw=text,
        card_holder=extract_card_holder(text),
        approval_number=extract_approval_number(text),
        installment=extract_installment(text),
        cumulative=extract_cumulative(text),
        balance=extract_balance(text),
    )


# ==================== CLI ====================

USAGE = [
    "Usage: parse-card-notification --text <카드 승인 문자>",
    "",
    "Examples:",
    '  parse-card-notification --text "[Web발신] [신한카드] 홍*동님 02/28 15:30 45,000원 스타벅스강남점 승인"',
]


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    configure_logging()

    parser = argparse.ArgumentParser(description="Parse a card approval notification")
    parser.add_argument("--text", default="", help="Notification text")
    parser.add_argument("words", nargs="*", help="Notification text as positional words")
    args = parser.parse_args(argv)

    text = args.text or " ".join(args.words)
    if not text:
        print_usage(USAGE)
        return 1

    parsed = parse_card_notification(text)
    if parsed is None:
        print_error("카드 승인 문자를 파싱할 수 없습니다.", raw=text)
        return 1

    print_json(parsed.format_result())
    return 0


if __name__ == "__main__":
    sys.exit(main())
