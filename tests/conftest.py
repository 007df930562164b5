"""
Pytest configuration and fixtures for the Opayo client tests.
"""
from __future__ import annotations

import hashlib
import os
from typing import Dict, List, Optional, Tuple

import pytest

from opayo.core.config import OpayoConfig
from opayo.schemas.opayo import HttpOptions
from opayo.services.notification_service import NotificationCallbacks

ENCRYPTION_PASSWORD = "1234567890123456"
VENDOR_NAME = "testvendor"
SECURITY_KEY = "test-security-key"
BASE_URL = "https://example.com"

SIGNED_FIELDS = [
    "VPSTxId", "VendorTxCode", "Status", "TxAuthNo", "VendorName",
    "AVSCV2", "SecurityKey", "AddressResult", "PostCodeResult", "CV2Result",
    "GiftAid", "3DSecureStatus", "CAVV", "AddressStatus", "PayerStatus",
    "CardType", "Last4Digits", "DeclineCode", "ExpiryDate", "FraudResponse",
    "BankAuthCode",
]


def sign(data: Dict[str, str], security_key: str = SECURITY_KEY, vendor_name: str = VENDOR_NAME) -> str:
    """Reference signature, computed the way the gateway does."""
    parts = []
    for field in SIGNED_FIELDS:
        if field == "VendorName":
            parts.append(vendor_name.lower())
        elif field == "SecurityKey":
            parts.append(security_key)
        else:
            parts.append(data.get(field, ""))
    return hashlib.md5("".join(parts).encode("utf-8")).hexdigest().upper()


def complete_notification() -> Dict[str, str]:
    return {
        "VPSTxId": "{12345678-1234-1234-1234-123456789012}",
        "VendorTxCode": "TX-123",
        "Status": "OK",
        "TxAuthNo": "12345",
        "AVSCV2": "ALL MATCH",
        "AddressResult": "MATCHED",
        "PostCodeResult": "MATCHED",
        "CV2Result": "MATCHED",
        "GiftAid": "0",
        "3DSecureStatus": "OK",
        "CAVV": "",
        "AddressStatus": "NONE",
        "PayerStatus": "VERIFIED",
        "CardType": "VISA",
        "Last4Digits": "1234",
        "DeclineCode": "00",
        "ExpiryDate": "1225",
        "FraudResponse": "ACCEPT",
        "BankAuthCode": "ABC123",
    }


class RecordingCallbacks(NotificationCallbacks):
    """NotificationCallbacks that records every call."""

    def __init__(
        self,
        security_key: str = SECURITY_KEY,
        processed: bool = False,
        redirect_path: str = "/success",
        fail_on: Optional[str] = None,
    ) -> None:
        self.security_key = security_key
        self.processed = processed
        self.redirect_path = redirect_path
        self.fail_on = fail_on
        self.calls: List[Tuple[str, tuple]] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if self.fail_on == name:
            raise RuntimeError(f"{name} exploded")

    def count(self, name: str) -> int:
        return sum(1 for called, _ in self.calls if called == name)

    def args_of(self, name: str) -> tuple:
        return next(args for called, args in self.calls if called == name)

    async def get_security_key(self, vendor_tx_code: str) -> str:
        self._record("get_security_key", vendor_tx_code)
        return self.security_key

    async def is_processed(self, vps_tx_id: str) -> bool:
        self._record("is_processed", vps_tx_id)
        return self.processed

    async def get_redirect_path(self, vendor_tx_code: str) -> str:
        self._record("get_redirect_path", vendor_tx_code)
        return self.redirect_path

    async def on_success(self, vendor_tx_code: str, payload: Dict[str, str]) -> None:
        self._record("on_success", vendor_tx_code, payload)

    async def on_failure(self, vendor_tx_code: str, payload: Dict[str, str]) -> None:
        self._record("on_failure", vendor_tx_code, payload)

    async def on_repeat(self, vendor_tx_code: str) -> None:
        self._record("on_repeat", vendor_tx_code)


class StubTransport:
    """Transport double returning a canned body or raising a canned error."""

    def __init__(self, body: str = "Status=OK", error: Optional[Exception] = None) -> None:
        self.body = body
        self.error = error
        self.calls: List[Tuple[str, str, Dict[str, str], HttpOptions]] = []

    async def send(self, method: str, url: str, form: Dict[str, str], options: HttpOptions) -> str:
        self.calls.append((method, url, form, options))
        if self.error is not None:
            raise self.error
        return self.body


@pytest.fixture(autouse=True)
def clean_opayo_env(monkeypatch):
    """Keep OPAYO_* variables from the host out of settings tests."""
    for name in list(os.environ):
        if name.startswith("OPAYO_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> OpayoConfig:
    return OpayoConfig.sandbox(VENDOR_NAME, ENCRYPTION_PASSWORD)


@pytest.fixture
def notification() -> Dict[str, str]:
    data = complete_notification()
    data["VPSSignature"] = sign(data)
    return data


@pytest.fixture
def callbacks() -> RecordingCallbacks:
    return RecordingCallbacks()


@pytest.fixture
def transaction_fields() -> Dict[str, str]:
    return {"Amount": "10.00", "Currency": "GBP", "Description": "Test"}
