"""
Builds the registration POST for the Opayo Server protocol.

All transaction fields are form-encoded, encrypted into ``Crypt``, and
wrapped in the fixed four-field envelope the gateway expects.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

from opayo.core.config import OpayoConfig
from opayo.schemas.opayo import (
    TX_TYPE_PAYMENT,
    VPS_PROTOCOL_VERSION,
    RegistrationRequest,
)
from opayo.services.crypto_service import CryptoService, crypto_service


def generate_vendor_tx_code() -> str:
    """Unique VendorTxCode: ``TX-<unix seconds>-<16 hex>``, 30 chars."""
    return f"TX-{int(time.time())}-{uuid.uuid4().hex[:16]}"


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def serialize_fields(fields: Mapping[str, Any]) -> str:
    """Form-encode fields in insertion order, skipping None values."""
    return urlencode(
        [(key, _stringify(value)) for key, value in fields.items() if value is not None]
    )


class TransactionRequestBuilder:
    def __init__(
        self,
        config: OpayoConfig,
        crypto: Optional[CryptoService] = None,
    ) -> None:
        self.config = config
        self.crypto = crypto or crypto_service

    def build(self, fields: Mapping[str, Any]) -> RegistrationRequest:
        """
        Build the registration envelope for ``fields``.

        The caller's mapping is left untouched; a VendorTxCode is generated
        into a working copy when missing or empty.
        """
        working = self.with_vendor_tx_code(fields)
        crypt = self._encrypt_fields(working)

        return RegistrationRequest(
            vps_protocol=VPS_PROTOCOL_VERSION,
            tx_type=TX_TYPE_PAYMENT,
            vendor=self.config.vendor,
            crypt=crypt,
            vendor_tx_code=str(working["VendorTxCode"]),
        )

    def with_vendor_tx_code(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Copy of ``fields`` with a VendorTxCode generated when missing or empty."""
        working: Dict[str, Any] = dict(fields)
        if not working.get("VendorTxCode"):
            working["VendorTxCode"] = generate_vendor_tx_code()
        return working

    def get_vendor_tx_code(self, fields: Mapping[str, Any]) -> str:
        """
        VendorTxCode for logging before build().

        Pass the result of with_vendor_tx_code() to get the code build()
        will embed; for fields without one a fresh code is generated.
        """
        code = fields.get("VendorTxCode")
        return str(code) if code else generate_vendor_tx_code()

    def _encrypt_fields(self, fields: Mapping[str, Any]) -> str:
        return self.crypto.encrypt(serialize_fields(fields), self.config.encryption_password)

    def decode_crypt(self, crypt: str) -> Dict[str, str]:
        """Decrypt a Crypt value back into its form fields."""
        plaintext = self.crypto.decrypt_to_str(crypt, self.config.encryption_password)
        return dict(parse_qsl(plaintext, keep_blank_values=True))
