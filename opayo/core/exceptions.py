"""
Exception hierarchy for the Opayo client.

All library exceptions inherit from OpayoException so callers can catch
every gateway-related failure with a single handler, while still being
able to branch on the concrete subclass or on ``error_code``.
"""

from __future__ import annotations

from typing import Any


class OpayoException(Exception):
    """Base for all Opayo exceptions."""

    default_code = "OPAYO_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.cause = cause
        super().__init__(message)


class OpayoConfigError(OpayoException):
    """Raised when vendor credentials or endpoint configuration are unusable."""

    default_code = "CONFIG_ERROR"

    MISSING_VENDOR = "MISSING_VENDOR"
    MISSING_PASSWORD = "MISSING_PASSWORD"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    MISSING_ENDPOINT = "MISSING_ENDPOINT"
    INVALID_ENVIRONMENT = "INVALID_ENVIRONMENT"


class OpayoValidationError(OpayoException):
    """Raised when outbound transaction fields fail validation."""

    default_code = "VALIDATION_ERROR"

    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FIELD_FORMAT = "INVALID_FIELD_FORMAT"
    FIELD_TOO_LONG = "FIELD_TOO_LONG"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_CURRENCY = "INVALID_CURRENCY"


class OpayoNetworkError(OpayoException):
    """Raised when the gateway cannot be reached or answers with garbage."""

    default_code = "NETWORK_ERROR"

    CONNECTION_FAILED = "CONNECTION_FAILED"
    TIMEOUT = "TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, error_code, details, cause)


class InvalidResponseError(OpayoNetworkError):
    """Raised when a gateway response body is empty, malformed or lacks Status."""

    default_code = OpayoNetworkError.INVALID_RESPONSE


class OpayoCryptographyError(OpayoException):
    """Raised for key, ciphertext or padding problems. Never retriable."""

    default_code = "CRYPTOGRAPHY_ERROR"

    ENCRYPTION_FAILED = "ENCRYPTION_FAILED"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    INVALID_KEY = "INVALID_KEY"


class InvalidKeyError(OpayoCryptographyError):
    default_code = OpayoCryptographyError.INVALID_KEY


class DecryptionError(OpayoCryptographyError):
    default_code = OpayoCryptographyError.DECRYPTION_FAILED


class OpayoAuthenticationError(OpayoException):
    """Raised on signature or vendor mismatches in gateway notifications."""

    default_code = "AUTHENTICATION_ERROR"

    INVALID_VENDOR = "INVALID_VENDOR"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    UNAUTHORIZED = "UNAUTHORIZED"


class TransactionRejectedError(OpayoException):
    """Raised when the gateway explicitly declines a registration.

    ``details["response"]`` holds the full parsed response map.
    """

    default_code = "TRANSACTION_REJECTED"
