from opayo.core.config import OpayoConfig, OpayoSettings, get_settings
from opayo.core.exceptions import (
    DecryptionError,
    InvalidKeyError,
    InvalidResponseError,
    OpayoAuthenticationError,
    OpayoConfigError,
    OpayoCryptographyError,
    OpayoException,
    OpayoNetworkError,
    OpayoValidationError,
    TransactionRejectedError,
)
from opayo.schemas.opayo import (
    HttpOptions,
    NotificationResponse,
    NotificationStatus,
    RegistrationRequest,
    SignatureTrace,
    TransactionResponse,
    TransactionStatus,
)
from opayo.services.crypto_service import CryptoService
from opayo.services.notification_service import NotificationCallbacks, NotificationHandler
from opayo.services.opayo_service import OpayoClient
from opayo.services.request_builder import TransactionRequestBuilder
from opayo.services.response_parser import ResponseParser
from opayo.services.signature_service import compute_signature, verify_signature
from opayo.services.transport import HttpxTransport, Transport
from opayo.services.validator_service import TransactionValidator

__all__ = [
    "CryptoService",
    "DecryptionError",
    "HttpOptions",
    "HttpxTransport",
    "InvalidKeyError",
    "InvalidResponseError",
    "NotificationCallbacks",
    "NotificationHandler",
    "NotificationResponse",
    "NotificationStatus",
    "OpayoAuthenticationError",
    "OpayoClient",
    "OpayoConfig",
    "OpayoConfigError",
    "OpayoCryptographyError",
    "OpayoException",
    "OpayoNetworkError",
    "OpayoSettings",
    "OpayoValidationError",
    "RegistrationRequest",
    "ResponseParser",
    "SignatureTrace",
    "TransactionRejectedError",
    "TransactionRequestBuilder",
    "TransactionResponse",
    "TransactionStatus",
    "TransactionValidator",
    "Transport",
    "compute_signature",
    "get_settings",
    "verify_signature",
]
