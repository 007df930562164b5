"""
Tests for the notification route (opayo.api.v1).
"""
from __future__ import annotations

from urllib.parse import urlencode

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from opayo.api.v1.api import build_api_router
from opayo.api.v1.endpoints.notification import create_notification_router, parse_raw_form
from opayo.services.notification_service import NotificationHandler

from .conftest import BASE_URL, VENDOR_NAME, RecordingCallbacks, complete_notification, sign

NOTIFICATION_PATH = "/api/v1/opayo/notification"


@pytest.fixture
def client(callbacks) -> TestClient:
    app = FastAPI()
    app.include_router(
        build_api_router(NotificationHandler(VENDOR_NAME, BASE_URL), callbacks),
        prefix="/api/v1",
    )
    return TestClient(app)


class TestNotificationRoute:
    def test_valid_notification(self, client, callbacks, notification):
        resp = client.post(NOTIFICATION_PATH, data=notification)

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == (
            "Status=OK\r\n"
            "StatusDetail=Payment successful\r\n"
            "RedirectURL=https://example.com/success\r\n"
        )
        assert callbacks.count("on_success") == 1

    def test_tampered_notification_still_returns_200(self, client, callbacks, notification):
        notification["Last4Digits"] = "0000"

        resp = client.post(NOTIFICATION_PATH, data=notification)

        assert resp.status_code == 200
        assert resp.text.startswith("Status=INVALID\r\nStatusDetail=Signature mismatch\r\n")
        assert callbacks.count("on_success") == 0

    def test_callback_error_is_reported_in_body(self, notification):
        app = FastAPI()
        app.include_router(
            build_api_router(
                NotificationHandler(VENDOR_NAME, BASE_URL),
                RecordingCallbacks(fail_on="get_security_key"),
            )
        )

        resp = TestClient(app).post("/opayo/notification", data=notification)

        assert resp.status_code == 200
        assert resp.text.splitlines()[0] == "Status=ERROR"

    def test_custom_path(self, callbacks, notification):
        app = FastAPI()
        app.include_router(
            create_notification_router(
                NotificationHandler(VENDOR_NAME, BASE_URL), callbacks, path="/payments/opayo"
            )
        )

        resp = TestClient(app).post("/payments/opayo", data=notification)

        assert resp.text.startswith("Status=OK")

    def test_get_is_not_allowed(self, client):
        assert client.get(NOTIFICATION_PATH).status_code == 405


class TestBase64Values:
    """Encoded values must reach signature verification undecoded."""

    CAVV = "AAABBJg0+VhI0VniQEjRWAAAAAA="

    def _signed(self, **changes):
        data = complete_notification()
        data.update(changes)
        data["VPSSignature"] = sign(data)
        return data

    def test_cavv_with_plus_slash_and_equals(self, client, callbacks):
        payload = self._signed(CAVV=self.CAVV, BankAuthCode="AB/12=")

        resp = client.post(NOTIFICATION_PATH, data=payload)

        assert resp.text.startswith("Status=OK\r\n")
        _, received = callbacks.args_of("on_success")
        assert received["CAVV"] == self.CAVV
        assert received["BankAuthCode"] == "AB/12="

    def test_raw_urlencoded_body(self, client):
        payload = self._signed(CAVV=self.CAVV)

        resp = client.post(
            NOTIFICATION_PATH,
            content=urlencode(payload),
            headers={"content-type": "application/x-www-form-urlencoded"},
        )

        assert resp.text.startswith("Status=OK\r\n")


class TestParseRawForm:
    def test_values_stay_encoded(self):
        assert parse_raw_form(b"CAVV=AAAB%2BVh%3D&AVSCV2=ALL+MATCH") == {
            "CAVV": "AAAB%2BVh%3D",
            "AVSCV2": "ALL+MATCH",
        }

    def test_keys_are_decoded(self):
        assert parse_raw_form(b"%33DSecureStatus=OK") == {"3DSecureStatus": "OK"}

    def test_blank_and_valueless_pairs(self):
        assert parse_raw_form(b"Status=OK&&CAVV=&GiftAid\r\n") == {
            "Status": "OK",
            "CAVV": "",
            "GiftAid": "",
        }

    def test_empty_body(self):
        assert parse_raw_form(b"") == {}
