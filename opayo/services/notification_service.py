"""
Opayo notification callback handling.

The gateway POSTs the final transaction status to the vendor's
notification URL and expects a three-line plain-text reply telling it
where to send the customer. Every path through handle() produces such a
reply; nothing is raised to the caller.

Steps:
  1. read VendorTxCode / VPSTxId / Status (missing → "")
  2. look up the SecurityKey for the VendorTxCode
  3. verify VPSSignature
  4. skip duplicates by VPSTxId (on_repeat)
  5. dispatch on Status: OK → on_success, anything else → on_failure

The already-processed check and whatever on_success persists must be
atomic on the caller's side, or two concurrent notifications for one
VPSTxId can both pass step 4.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional

from opayo.core.exceptions import OpayoAuthenticationError
from opayo.schemas.opayo import NotificationResponse, SignatureTrace
from opayo.services.signature_service import (
    decode_payload,
    explain_signature,
    require_valid_signature,
)

APPROVED_STATUS = "OK"
FAILURE_PATH = "/fail"


class NotificationCallbacks(ABC):
    """Caller-side storage and business hooks used by NotificationHandler."""

    @abstractmethod
    async def get_security_key(self, vendor_tx_code: str) -> str:
        """Return the SecurityKey stored at registration for this transaction."""

    @abstractmethod
    async def is_processed(self, vps_tx_id: str) -> bool:
        """Whether a notification for this VPSTxId was already handled."""

    @abstractmethod
    async def get_redirect_path(self, vendor_tx_code: str) -> str:
        """Path (relative to the handler base URL) for a successful payment."""

    @abstractmethod
    async def on_success(self, vendor_tx_code: str, payload: Dict[str, str]) -> None:
        pass

    @abstractmethod
    async def on_failure(self, vendor_tx_code: str, payload: Dict[str, str]) -> None:
        pass

    @abstractmethod
    async def on_repeat(self, vendor_tx_code: str) -> None:
        pass


class NotificationHandler:
    def __init__(
        self,
        vendor_name: str,
        base_url: str,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.vendor_name = vendor_name
        self.base_url = base_url.rstrip("/")
        self.logger = logger or logging.getLogger(__name__)

    def _redirect_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @property
    def failure_url(self) -> str:
        return self._redirect_url(FAILURE_PATH)

    async def handle(
        self,
        payload: Mapping[str, str],
        callbacks: NotificationCallbacks,
    ) -> NotificationResponse:
        try:
            return await self._handle(payload, callbacks)
        except Exception as e:
            self.logger.error(
                "[opayo] notification error",
                exc_info=True,
                extra={"error": str(e)},
            )
            return NotificationResponse.error(self.failure_url, "Internal server error")

    async def _handle(
        self,
        payload: Mapping[str, str],
        callbacks: NotificationCallbacks,
    ) -> NotificationResponse:
        decoded = decode_payload(payload)
        tx_code = decoded.get("VendorTxCode", "")
        vps_tx_id = decoded.get("VPSTxId", "")
        status = decoded.get("Status", "")

        self.logger.info(
            "[opayo] processing notification",
            extra={"vendor_tx_code": tx_code, "vps_tx_id": vps_tx_id, "status": status},
        )

        try:
            security_key = await callbacks.get_security_key(tx_code)
        except Exception as e:
            self.logger.error(
                "[opayo] failed to retrieve security key",
                extra={"vendor_tx_code": tx_code, "error": str(e)},
            )
            return NotificationResponse.error(self.failure_url, "Failed to retrieve security key")

        try:
            require_valid_signature(payload, security_key, self.vendor_name)
        except OpayoAuthenticationError as e:
            self.logger.warning(
                "[opayo] invalid signature",
                extra={
                    "vendor_tx_code": tx_code,
                    "vps_tx_id": vps_tx_id,
                    "error_code": e.error_code,
                },
            )
            return NotificationResponse.invalid(self.failure_url, "Signature mismatch")

        if await callbacks.is_processed(vps_tx_id):
            self.logger.info(
                "[opayo] duplicate notification",
                extra={"vendor_tx_code": tx_code, "vps_tx_id": vps_tx_id},
            )
            await callbacks.on_repeat(tx_code)
            redirect_url = self._redirect_url(await callbacks.get_redirect_path(tx_code))
            return NotificationResponse.success(redirect_url, "Already processed")

        if status == APPROVED_STATUS:
            await callbacks.on_success(tx_code, decoded)
            redirect_url = self._redirect_url(await callbacks.get_redirect_path(tx_code))
            return NotificationResponse.success(redirect_url, "Payment successful")

        await callbacks.on_failure(tx_code, decoded)
        return NotificationResponse.invalid(self.failure_url, "Transaction failed")

    def explain(self, payload: Mapping[str, str], security_key: str) -> SignatureTrace:
        """Signature debug trace. Development only; do not route it."""
        return explain_signature(payload, security_key, self.vendor_name)
