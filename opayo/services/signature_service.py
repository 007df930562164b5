"""
Notification signature verification (Opayo Server protocol 3.00).

The gateway signs each notification with an MD5 digest over 21 fields
concatenated in a fixed order. Two positions are not taken from the
payload: ``VendorName`` is the lower-cased configured vendor name and
``SecurityKey`` is the per-transaction key returned at registration.

MD5 is mandated by the gateway and must not be swapped for another hash.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Dict, Mapping, Tuple
from urllib.parse import unquote_plus

from opayo.core.exceptions import OpayoAuthenticationError
from opayo.schemas.opayo import SignatureTrace

# Order is part of the wire protocol.
SIGNATURE_FIELDS: Tuple[str, ...] = (
    "VPSTxId",
    "VendorTxCode",
    "Status",
    "TxAuthNo",
    "VendorName",
    "AVSCV2",
    "SecurityKey",
    "AddressResult",
    "PostCodeResult",
    "CV2Result",
    "GiftAid",
    "3DSecureStatus",
    "CAVV",
    "AddressStatus",
    "PayerStatus",
    "CardType",
    "Last4Digits",
    "DeclineCode",
    "ExpiryDate",
    "FraudResponse",
    "BankAuthCode",
)

SIGNATURE_KEY = "VPSSignature"


def decode_payload(payload: Mapping[str, str]) -> Dict[str, str]:
    """URL-decode every value (``+`` as space, percent escapes)."""
    return {key: unquote_plus(str(value)) for key, value in payload.items()}


def _field_values(
    decoded: Mapping[str, str], security_key: str, vendor_name: str
) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for field in SIGNATURE_FIELDS:
        if field == "VendorName":
            values[field] = vendor_name.lower()
        elif field == "SecurityKey":
            values[field] = security_key
        else:
            values[field] = decoded.get(field, "")
    return values


def _digest(signature_string: str) -> str:
    return hashlib.md5(signature_string.encode("utf-8")).hexdigest().upper()


def build_signature_string(
    payload: Mapping[str, str], security_key: str, vendor_name: str
) -> str:
    decoded = decode_payload(payload)
    return "".join(_field_values(decoded, security_key, vendor_name).values())


def compute_signature(
    payload: Mapping[str, str], security_key: str, vendor_name: str
) -> str:
    """Expected VPSSignature for ``payload`` as uppercase hex."""
    return _digest(build_signature_string(payload, security_key, vendor_name))


def verify_signature(
    payload: Mapping[str, str], security_key: str, vendor_name: str
) -> bool:
    decoded = decode_payload(payload)
    expected = _digest("".join(_field_values(decoded, security_key, vendor_name).values()))
    received = decoded.get(SIGNATURE_KEY, "").upper()
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


def require_valid_signature(
    payload: Mapping[str, str], security_key: str, vendor_name: str
) -> None:
    """Raise OpayoAuthenticationError on mismatch. The reason is not disclosed."""
    if not verify_signature(payload, security_key, vendor_name):
        raise OpayoAuthenticationError(
            "Signature mismatch", OpayoAuthenticationError.INVALID_SIGNATURE
        )


def explain_signature(
    payload: Mapping[str, str], security_key: str, vendor_name: str
) -> SignatureTrace:
    """
    Show every value that went into the signature.

    Development aid for troubleshooting mismatches. The trace contains the
    security key in clear; never return it from a production endpoint.
    """
    decoded = decode_payload(payload)
    field_values = _field_values(decoded, security_key, vendor_name)
    signature_string = "".join(field_values.values())
    expected = _digest(signature_string)
    received = decoded.get(SIGNATURE_KEY, "").upper()

    return SignatureTrace(
        signature_string=signature_string,
        field_values=field_values,
        expected_signature=expected,
        received_signature=received,
        match=hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8")),
    )
