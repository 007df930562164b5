from opayo.schemas.opayo import (
    FAILED_STATUSES,
    TX_TYPE_PAYMENT,
    VPS_PROTOCOL_VERSION,
    HttpOptions,
    NotificationResponse,
    NotificationStatus,
    RegistrationRequest,
    SignatureTrace,
    TransactionResponse,
    TransactionStatus,
)

__all__ = [
    "FAILED_STATUSES",
    "TX_TYPE_PAYMENT",
    "VPS_PROTOCOL_VERSION",
    "HttpOptions",
    "NotificationResponse",
    "NotificationStatus",
    "RegistrationRequest",
    "SignatureTrace",
    "TransactionResponse",
    "TransactionStatus",
]
