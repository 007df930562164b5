from fastapi import APIRouter

from opayo.api.v1.endpoints.notification import create_notification_router
from opayo.services.notification_service import NotificationCallbacks, NotificationHandler


def build_api_router(
    handler: NotificationHandler,
    callbacks: NotificationCallbacks,
) -> APIRouter:
    api_router = APIRouter()

    # Opayo routes, prefix /opayo
    # Full path when mounted under /api/v1: /api/v1/opayo/notification
    api_router.include_router(
        create_notification_router(handler, callbacks),
        prefix="/opayo",
        tags=["opayo"],
    )

    return api_router
