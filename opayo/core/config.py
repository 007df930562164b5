from __future__ import annotations

from functools import lru_cache
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from opayo.core.exceptions import OpayoConfigError

ENDPOINT_TEST = "https://test.sagepay.com/gateway/service/vspserver-register.vsp"
ENDPOINT_LIVE = "https://live.sagepay.com/gateway/service/vspserver-register.vsp"

# AES-128 key, also used as the IV
PASSWORD_LENGTH = 16

ENVIRONMENT_ENDPOINTS = {
    "sandbox": ENDPOINT_TEST,
    "test": ENDPOINT_TEST,
    "live": ENDPOINT_LIVE,
    "production": ENDPOINT_LIVE,
}


class OpayoSettings(BaseSettings):
    APP_NAME: str = "Opayo Server Client"
    APP_VERSION: str = "1.0.0"

    # ── Opayo vendor credentials ──
    # Required
    OPAYO_VENDOR: str = ""
    OPAYO_ENCRYPTION_PASSWORD: str = ""
    # Environment: "sandbox"/"test" or "live"/"production"
    OPAYO_ENVIRONMENT: str = "sandbox"
    # URL override, wins over OPAYO_ENVIRONMENT
    OPAYO_ENDPOINT: str = ""
    # Base URL the customer is redirected to after a notification
    OPAYO_NOTIFICATION_BASE_URL: str = "http://localhost:8000"

    # HTTP client settings
    OPAYO_HTTP_TIMEOUT: float = 30.0
    OPAYO_HTTP_CONNECT_TIMEOUT: float = 10.0
    OPAYO_HTTP_VERIFY: bool = True

    OPAYO_LOG_LEVEL: str = "INFO"
    OPAYO_LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_sandbox(self) -> bool:
        return self.OPAYO_ENVIRONMENT in ("sandbox", "test")

    @field_validator("OPAYO_ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        return v.strip().lower()

    def resolve_endpoint(self) -> str:
        if self.OPAYO_ENDPOINT.strip():
            return self.OPAYO_ENDPOINT.strip()
        try:
            return ENVIRONMENT_ENDPOINTS[self.OPAYO_ENVIRONMENT]
        except KeyError:
            raise OpayoConfigError(
                f"Invalid environment: {self.OPAYO_ENVIRONMENT}. Must be 'sandbox' or 'live'",
                OpayoConfigError.INVALID_ENVIRONMENT,
                details={"environment": self.OPAYO_ENVIRONMENT},
            ) from None


@lru_cache
def get_settings() -> OpayoSettings:
    return OpayoSettings()


class OpayoConfig(BaseModel):
    """
    Vendor credentials and registration endpoint.

    Construction fails fast with OpayoConfigError when any value is empty,
    so a misconfigured client never reaches the network.
    """

    model_config = ConfigDict(frozen=True)

    ENDPOINT_TEST: ClassVar[str] = ENDPOINT_TEST
    ENDPOINT_LIVE: ClassVar[str] = ENDPOINT_LIVE

    vendor: str
    encryption_password: str
    endpoint: str

    @model_validator(mode="after")
    def _require_values(self) -> "OpayoConfig":
        if not self.vendor:
            raise OpayoConfigError(
                "Vendor name is required", OpayoConfigError.MISSING_VENDOR
            )
        if not self.encryption_password:
            raise OpayoConfigError(
                "Encryption password is required", OpayoConfigError.MISSING_PASSWORD
            )
        if not self.endpoint:
            raise OpayoConfigError(
                "Endpoint URL is required", OpayoConfigError.MISSING_ENDPOINT
            )
        password_length = len(self.encryption_password.encode("utf-8"))
        if password_length != PASSWORD_LENGTH:
            raise OpayoConfigError(
                f"Encryption password must be {PASSWORD_LENGTH} bytes, got {password_length}",
                OpayoConfigError.INVALID_PASSWORD,
                details={"password_length": password_length},
            )
        return self

    @property
    def is_sandbox(self) -> bool:
        return self.endpoint == ENDPOINT_TEST

    @property
    def is_live(self) -> bool:
        return self.endpoint == ENDPOINT_LIVE

    @classmethod
    def sandbox(cls, vendor: str, encryption_password: str) -> "OpayoConfig":
        return cls(vendor=vendor, encryption_password=encryption_password, endpoint=ENDPOINT_TEST)

    @classmethod
    def live(cls, vendor: str, encryption_password: str) -> "OpayoConfig":
        return cls(vendor=vendor, encryption_password=encryption_password, endpoint=ENDPOINT_LIVE)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OpayoConfig":
        """Build from a plain dict with vendor/encryption_password/endpoint keys."""
        return cls(
            vendor=str(data.get("vendor") or ""),
            encryption_password=str(data.get("encryption_password") or ""),
            endpoint=str(data.get("endpoint") or ""),
        )

    @classmethod
    def from_settings(cls, settings: OpayoSettings | None = None) -> "OpayoConfig":
        """Build from OPAYO_* environment settings."""
        settings = settings or get_settings()
        if not settings.OPAYO_VENDOR.strip():
            raise OpayoConfigError(
                "OPAYO_VENDOR environment variable is not set",
                OpayoConfigError.MISSING_VENDOR,
            )
        if not settings.OPAYO_ENCRYPTION_PASSWORD:
            raise OpayoConfigError(
                "OPAYO_ENCRYPTION_PASSWORD environment variable is not set",
                OpayoConfigError.MISSING_PASSWORD,
            )
        return cls(
            vendor=settings.OPAYO_VENDOR.strip(),
            encryption_password=settings.OPAYO_ENCRYPTION_PASSWORD,
            endpoint=settings.resolve_endpoint(),
        )
