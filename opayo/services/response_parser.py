import logging
from typing import Dict
from urllib.parse import parse_qsl

from opayo.core.exceptions import InvalidResponseError
from opayo.schemas.opayo import TransactionResponse

logger = logging.getLogger(__name__)


class ResponseParser:
    """Turns a form-encoded registration response into a TransactionResponse."""

    def parse(self, body: str | bytes) -> TransactionResponse:
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")

        data = self._parse_query_string(body)
        self._validate_response(data)
        return TransactionResponse(data=data)

    def _parse_query_string(self, body: str) -> Dict[str, str]:
        # Later duplicates win
        return dict(parse_qsl(body.strip(), keep_blank_values=True))

    def _validate_response(self, data: Dict[str, str]) -> None:
        if not data:
            raise InvalidResponseError("Invalid response from Opayo: empty or malformed")

        if "Status" not in data:
            logger.debug("[opayo] response without Status, keys=%s", list(data.keys()))
            raise InvalidResponseError(
                "Invalid response from Opayo: missing Status field",
                details={"keys": list(data.keys())},
            )


response_parser = ResponseParser()
