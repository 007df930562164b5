"""
Pydantic models for the Opayo Server protocol (v3.00).

Covers the registration POST, the gateway's registration response,
the plain-text reply to notification callbacks, and the signature
debug trace.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

VPS_PROTOCOL_VERSION = "3.00"
TX_TYPE_PAYMENT = "PAYMENT"


# ──────────────────────────────────────────────────────────────────────
#  HTTP options
# ──────────────────────────────────────────────────────────────────────


class HttpOptions(BaseModel):
    """Timeouts (seconds) and TLS verification for the registration POST."""

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(30, gt=0)
    connect_timeout: float = Field(10, gt=0)
    verify: bool = True

    @classmethod
    def with_timeout(cls, timeout: float) -> "HttpOptions":
        return cls(timeout=timeout)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


# ──────────────────────────────────────────────────────────────────────
#  Registration – POST vspserver-register.vsp
# ──────────────────────────────────────────────────────────────────────


class RegistrationRequest(BaseModel):
    """
    Form fields posted to the registration endpoint.

    The gateway accepts exactly these four fields; all transaction data
    travels inside ``Crypt``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vps_protocol: str = Field(VPS_PROTOCOL_VERSION, alias="VPSProtocol")
    tx_type: str = Field(TX_TYPE_PAYMENT, alias="TxType")
    vendor: str = Field(..., alias="Vendor")
    crypt: str = Field(..., alias="Crypt")

    # VendorTxCode embedded in Crypt; never posted in the clear
    vendor_tx_code: str = Field("", exclude=True)

    def to_form(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class TransactionStatus(str, Enum):
    OK = "OK"
    THREE_D_AUTH = "3DAUTH"
    NOT_AUTHED = "NOTAUTHED"
    REJECTED = "REJECTED"
    ERROR = "ERROR"
    INVALID = "INVALID"


FAILED_STATUSES = frozenset(
    {
        TransactionStatus.NOT_AUTHED.value,
        TransactionStatus.REJECTED.value,
        TransactionStatus.ERROR.value,
        TransactionStatus.INVALID.value,
    }
)


class TransactionResponse(BaseModel):
    """
    Immutable view of a registration response.

    Every field of the response body is kept in ``data``, a read-only
    mapping over a private copy; classification is derived from ``Status``
    on each access.
    """

    model_config = ConfigDict(frozen=True)

    data: Mapping[str, str]

    @field_validator("data", mode="after")
    @classmethod
    def _read_only(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def to_dict(self) -> Dict[str, str]:
        return dict(self.data)

    @property
    def status(self) -> str:
        return self.data.get("Status", "")

    @property
    def status_detail(self) -> str:
        return self.data.get("StatusDetail", "")

    @property
    def vps_tx_id(self) -> str:
        return self.data.get("VPSTxId", "")

    @property
    def security_key(self) -> str:
        return self.data.get("SecurityKey", "")

    @property
    def next_url(self) -> str:
        return self.data.get("NextURL", "")

    @property
    def tx_auth_no(self) -> str:
        return self.data.get("TxAuthNo", "")

    @property
    def is_successful(self) -> bool:
        return self.status == TransactionStatus.OK.value

    @property
    def is_failed(self) -> bool:
        return self.status in FAILED_STATUSES

    @property
    def requires_3d_secure(self) -> bool:
        return self.status == TransactionStatus.THREE_D_AUTH.value

    @property
    def is_accepted(self) -> bool:
        return self.is_successful or self.requires_3d_secure


# ──────────────────────────────────────────────────────────────────────
#  Notification – reply to the gateway callback
# ──────────────────────────────────────────────────────────────────────


class NotificationStatus(str, Enum):
    OK = "OK"
    INVALID = "INVALID"
    ERROR = "ERROR"


class NotificationResponse(BaseModel):
    """Reply body the gateway expects from the notification URL."""

    model_config = ConfigDict(frozen=True)

    status: NotificationStatus
    status_detail: str
    redirect_url: str

    @classmethod
    def success(cls, redirect_url: str, detail: str = "Payment successful") -> "NotificationResponse":
        return cls(status=NotificationStatus.OK, status_detail=detail, redirect_url=redirect_url)

    @classmethod
    def invalid(cls, redirect_url: str, detail: str = "Invalid request") -> "NotificationResponse":
        return cls(status=NotificationStatus.INVALID, status_detail=detail, redirect_url=redirect_url)

    @classmethod
    def error(cls, redirect_url: str, detail: str = "Internal server error") -> "NotificationResponse":
        return cls(status=NotificationStatus.ERROR, status_detail=detail, redirect_url=redirect_url)

    @property
    def is_accepted(self) -> bool:
        return self.status is NotificationStatus.OK

    def format(self) -> str:
        return (
            f"Status={self.status.value}\r\n"
            f"StatusDetail={self.status_detail}\r\n"
            f"RedirectURL={self.redirect_url}\r\n"
        )


class SignatureTrace(BaseModel):
    """Signature computation details. Development use only."""

    signature_string: str
    field_values: Dict[str, str]
    expected_signature: str
    received_signature: str
    match: bool
