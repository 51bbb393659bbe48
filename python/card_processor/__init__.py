"""
Card Processor Module

Parses Korean card-company approval/cancellation notifications
(SMS, push) into structured transaction records.
"""

from .notification_parser import (
    CardNotification,
    DateTimeParts,
    TransactionType,
    CARD_COMPANY_KEYWORDS,
    UNKNOWN,
    detect_card_company,
    detect_transaction_type,
    extract_amount,
    extract_date_time,
    extract_vendor,
    infer_year,
    parse_card_notification,
)

__all__ = [
    # Records
    "CardNotification",
    "DateTimeParts",
    "TransactionType",
    # Lookup tables
    "CARD_COMPANY_KEYWORDS",
    "UNKNOWN",
    # Extractors
    "detect_card_company",
    "detect_transaction_type",
    "extract_amount",
    "extract_date_time",
    "extract_vendor",
    "infer_year",
    # Parser
    "parse_card_notification",
]
