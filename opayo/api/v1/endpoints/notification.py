"""
Opayo Notification Route.

Endpoint:
  POST /api/v1/opayo/notification: receive notification callbacks from Opayo

The gateway posts the final transaction status as a form body and
expects a plain-text reply:

  Status=OK|INVALID|ERROR
  StatusDetail=...
  RedirectURL=...

The response is always HTTP 200; failures are reported in the body.

The body is split into raw pairs here and values are left encoded:
signature verification URL-decodes them exactly once.
"""

import logging
from typing import Dict
from urllib.parse import unquote_plus

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from opayo.services.notification_service import NotificationCallbacks, NotificationHandler

logger = logging.getLogger(__name__)


def parse_raw_form(raw_body: bytes) -> Dict[str, str]:
    """Split a form-urlencoded body into pairs, decoding keys but not values."""
    body_str = raw_body.decode("utf-8", errors="replace").strip()

    payload: Dict[str, str] = {}
    for pair in body_str.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        payload[unquote_plus(key)] = value
    return payload


def create_notification_router(
    handler: NotificationHandler,
    callbacks: NotificationCallbacks,
    path: str = "/notification",
) -> APIRouter:
    router = APIRouter()

    @router.post(
        path,
        response_class=PlainTextResponse,
        summary="Receive Opayo notification callbacks",
        description=(
            "Verify the VPSSignature of an Opayo Server notification, dispatch it "
            "to the vendor callbacks and reply with the redirect instruction."
        ),
        tags=["opayo", "notifications"],
    )
    async def handle_opayo_notification(request: Request) -> PlainTextResponse:
        payload = parse_raw_form(await request.body())

        logger.info(
            f"[opayo] notification received, keys={list(payload.keys())}"
        )

        outcome = await handler.handle(payload, callbacks)

        logger.info(
            f"[opayo] notification processed, status={outcome.status.value}"
        )

        return PlainTextResponse(outcome.format())

    return router
