"""
Pre-flight validation of transaction fields before they are encrypted
and sent for registration.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Protocol

from opayo.core.exceptions import OpayoValidationError

REQUIRED_FIELDS: List[str] = ["Amount", "Currency", "Description"]

MAX_LENGTHS: Dict[str, int] = {
    "VendorTxCode": 40,
    "Description": 100,
    "BillingSurname": 20,
    "BillingFirstnames": 20,
    "BillingAddress1": 100,
    "BillingAddress2": 100,
    "BillingCity": 40,
    "BillingPostCode": 10,
    "BillingCountry": 2,
    "DeliverySurname": 20,
    "DeliveryFirstnames": 20,
    "DeliveryAddress1": 100,
    "DeliveryAddress2": 100,
    "DeliveryCity": 40,
    "DeliveryPostCode": 10,
    "DeliveryCountry": 2,
    "CustomerEMail": 255,
}

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
TOO_MANY_DECIMALS_RE = re.compile(r"\.\d{3,}")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FieldValidator(Protocol):
    def validate(self, fields: Mapping[str, Any]) -> None: ...


class TransactionValidator:
    """Checks required fields, amount, currency, lengths and e-mail format."""

    def validate(self, fields: Mapping[str, Any]) -> None:
        self._validate_required_fields(fields)
        self._validate_amount(fields)
        self._validate_currency(fields)
        self._validate_field_lengths(fields)
        self._validate_email(fields)

    def _validate_required_fields(self, fields: Mapping[str, Any]) -> None:
        for field in REQUIRED_FIELDS:
            if fields.get(field) is None or fields.get(field) == "":
                raise OpayoValidationError(
                    f"Required field '{field}' is missing",
                    OpayoValidationError.MISSING_REQUIRED_FIELD,
                    details={"field": field},
                )

    def _validate_amount(self, fields: Mapping[str, Any]) -> None:
        if fields.get("Amount") is None:
            return

        amount = fields["Amount"]
        try:
            if isinstance(amount, bool):
                raise InvalidOperation
            numeric_amount = Decimal(str(amount).strip())
            if not numeric_amount.is_finite():
                raise InvalidOperation
        except InvalidOperation:
            raise OpayoValidationError(
                "Amount must be numeric",
                OpayoValidationError.INVALID_AMOUNT,
                details={"amount": amount},
            ) from None

        if numeric_amount <= 0:
            raise OpayoValidationError(
                "Amount must be greater than zero",
                OpayoValidationError.INVALID_AMOUNT,
                details={"amount": amount},
            )

        if TOO_MANY_DECIMALS_RE.search(str(amount)):
            raise OpayoValidationError(
                "Amount cannot have more than 2 decimal places",
                OpayoValidationError.INVALID_AMOUNT,
                details={"amount": amount},
            )

    def _validate_currency(self, fields: Mapping[str, Any]) -> None:
        if fields.get("Currency") is None:
            return

        currency = fields["Currency"]
        if not isinstance(currency, str) or not CURRENCY_RE.match(currency):
            raise OpayoValidationError(
                "Currency must be a 3-letter ISO 4217 code (e.g., GBP, USD, EUR)",
                OpayoValidationError.INVALID_CURRENCY,
                details={"currency": currency},
            )

    def _validate_field_lengths(self, fields: Mapping[str, Any]) -> None:
        for field, max_length in MAX_LENGTHS.items():
            if fields.get(field) is None:
                continue

            length = len(str(fields[field]))
            if length > max_length:
                raise OpayoValidationError(
                    f"Field '{field}' exceeds maximum length of {max_length} characters (got {length})",
                    OpayoValidationError.FIELD_TOO_LONG,
                    details={
                        "field": field,
                        "max_length": max_length,
                        "actual_length": length,
                    },
                )

    def _validate_email(self, fields: Mapping[str, Any]) -> None:
        if fields.get("CustomerEMail") is None:
            return

        email = fields["CustomerEMail"]
        if not isinstance(email, str) or not EMAIL_RE.match(email):
            raise OpayoValidationError(
                "CustomerEMail must be a valid email address",
                OpayoValidationError.INVALID_FIELD_FORMAT,
                details={"field": "CustomerEMail", "value": email},
            )
