"""
Pytest configuration and fixtures for tax automation tests.
"""

import sys
from datetime import date, datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "python"))

ECOUNT_ENV_VARS = ("ECOUNT_COM_CODE", "ECOUNT_USER_ID", "ECOUNT_API_CERT_KEY", "ECOUNT_ZONE")


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixed_now() -> datetime:
    """Processing time used for date resolution."""
    return datetime(2026, 3, 1, 9, 15)


@pytest.fixture
def calendar_today() -> date:
    """Reference date for D-day counts."""
    return date(2026, 1, 5)


@pytest.fixture
def samsung_notification() -> str:
    """Return a multi-line Samsung card approval notification."""
    return """[Web발신]
[삼성카드]
홍*동님
02/28 15:30
45,000원
스타벅스강남점
일시불
누적 1,234,567원"""


@pytest.fixture
def ecount_env(monkeypatch):
    """Set Ecount credentials in the environment."""
    monkeypatch.setenv("ECOUNT_COM_CODE", "123456")
    monkeypatch.setenv("ECOUNT_USER_ID", "tester")
    monkeypatch.setenv("ECOUNT_API_CERT_KEY", "cert-key")
    monkeypatch.setenv("ECOUNT_ZONE", "CC")


@pytest.fixture
def no_ecount_env(monkeypatch):
    """Remove Ecount credentials from the environment."""
    for name in ECOUNT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_response(payload: dict | None = None, status_code: int = 200, reason: str = "OK") -> Mock:
    """Build a mock requests.Response."""
    response = Mock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload or {}
    return response


def login_payload(session_id: str = "abcdef1234567890", zone: str = "CC") -> dict:
    """Successful Ecount login response body."""
    return {
        "Status": "200",
        "Data": {"Datas": {"SESSION_ID": session_id, "ZONE": zone}},
    }
