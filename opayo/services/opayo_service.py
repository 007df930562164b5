"""
Opayo transaction registration.

Sequences one registration: validate → build → transmit → parse →
classify. There are no retries here; a caller that wants them can
retry on OpayoNetworkError.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from opayo.core.config import OpayoConfig, OpayoSettings, get_settings
from opayo.core.exceptions import OpayoNetworkError, TransactionRejectedError
from opayo.schemas.opayo import HttpOptions, RegistrationRequest, TransactionResponse
from opayo.services.request_builder import TransactionRequestBuilder
from opayo.services.response_parser import ResponseParser
from opayo.services.transport import HttpxTransport, Transport
from opayo.services.validator_service import FieldValidator, TransactionValidator


class OpayoClient:
    def __init__(
        self,
        config: OpayoConfig,
        transport: Optional[Transport] = None,
        request_builder: Optional[TransactionRequestBuilder] = None,
        response_parser: Optional[ResponseParser] = None,
        validator: Optional[FieldValidator] = None,
        http_options: Optional[HttpOptions] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.transport = transport or HttpxTransport()
        self.request_builder = request_builder or TransactionRequestBuilder(config)
        self.response_parser = response_parser or ResponseParser()
        self.validator = validator or TransactionValidator()
        self.http_options = http_options or HttpOptions()
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings: Optional[OpayoSettings] = None, **kwargs: Any) -> "OpayoClient":
        settings = settings or get_settings()
        kwargs.setdefault(
            "http_options",
            HttpOptions(
                timeout=settings.OPAYO_HTTP_TIMEOUT,
                connect_timeout=settings.OPAYO_HTTP_CONNECT_TIMEOUT,
                verify=settings.OPAYO_HTTP_VERIFY,
            ),
        )
        return cls(OpayoConfig.from_settings(settings), **kwargs)

    async def register_transaction(self, fields: Mapping[str, Any]) -> TransactionResponse:
        """
        Register a payment with the gateway.

        Returns the response when it is accepted (``OK`` or ``3DAUTH``).

        Raises:
            OpayoValidationError: fields failed validation.
            OpayoNetworkError: transport failure or malformed response
                (InvalidResponseError).
            TransactionRejectedError: the gateway declined the registration.
        """
        self.validator.validate(fields)

        # One working copy so the logged code is the one that is sent
        working = self.request_builder.with_vendor_tx_code(fields)

        self.logger.info(
            "[opayo] registering transaction",
            extra={
                "vendor_tx_code": self.request_builder.get_vendor_tx_code(working),
                "amount": working.get("Amount"),
            },
        )

        request = self.request_builder.build(working)
        body = await self._send_request(request)
        response = self.response_parser.parse(body)

        self.logger.info(
            "[opayo] registration response",
            extra={
                "vendor_tx_code": request.vendor_tx_code,
                "status": response.status,
                "status_detail": response.status_detail,
                "vps_tx_id": response.vps_tx_id,
            },
        )

        if not response.is_accepted:
            raise TransactionRejectedError(
                f"Transaction failed: {response.status_detail}",
                details={"response": response.to_dict()},
            )

        return response

    async def _send_request(self, request: RegistrationRequest) -> str:
        endpoint = self.config.endpoint
        try:
            body = await self.transport.send(
                "POST", endpoint, request.to_form(), self.http_options
            )
        except httpx.TimeoutException as e:
            raise self._network_error(e, OpayoNetworkError.TIMEOUT) from e
        except httpx.HTTPStatusError as e:
            raise self._network_error(
                e, OpayoNetworkError.HTTP_ERROR, status_code=e.response.status_code
            ) from e
        except (httpx.HTTPError, OSError) as e:
            raise self._network_error(e, OpayoNetworkError.CONNECTION_FAILED) from e

        self.logger.debug("[opayo] raw response", extra={"body": body})
        return body

    def _network_error(
        self,
        error: Exception,
        code: str,
        status_code: Optional[int] = None,
    ) -> OpayoNetworkError:
        self.logger.error(
            "[opayo] HTTP request failed",
            extra={"error": str(error), "endpoint": self.config.endpoint},
        )
        return OpayoNetworkError(
            f"Failed to connect to Opayo: {error}",
            code,
            details={"endpoint": self.config.endpoint},
            cause=error,
            status_code=status_code,
        )
