"""
Tests for the JSON endpoints.

Webhook tests sign the raw body with HMAC-SHA256 (X-Pass-Signature).
"""

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
from django.test import RequestFactory
from django.urls import reverse

from loyaltypass.models import LoyaltyUser, ProcessedEvent, RewardNotification, Visit
from loyaltypass.services.rewards import RewardService
from loyaltypass.views import (
    ClaimRewardView,
    HealthView,
    PassCreatedWebhookView,
    PassScannedWebhookView,
    RecordVisitView,
    UserByPhoneView,
    UserDetailView,
    UserNotificationsView,
    UserRegisterView,
    UserVisitsView,
)

pytestmark = pytest.mark.django_db

WEBHOOK_SECRET = "test-pass-webhook-secret"


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def factory():
    return RequestFactory()


def _json(response):
    return json.loads(response.content)


def _post(factory, path, payload, **extra):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return factory.post(path, data=body, content_type="application/json", **extra)


def _make_signature(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def _signed(factory, path, payload, signature=None, timestamp=None):
    body = json.dumps(payload).encode()
    sig = _make_signature(body) if signature is None else signature
    request = factory.post(path, data=body, content_type="application/json")
    if sig:
        request.META["HTTP_X_PASS_SIGNATURE"] = f"sha256={sig}"
    if timestamp is not None:
        request.META["HTTP_X_PASS_TIMESTAMP"] = str(timestamp)
    return request


# ═══════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════


class TestHealth:
    def test_health(self, factory):
        response = HealthView.as_view()(factory.get("/health/"))

        assert response.status_code == 200
        assert _json(response)["status"] == "ok"

    def test_routed(self, client):
        response = client.get(reverse("loyaltypass:health"))
        assert response.status_code == 200


class TestUserRegisterView:
    def test_register(self, factory):
        request = _post(
            factory,
            "/users/",
            {"first_name": "Ana", "last_name": "Lopez", "phone_number": "(415) 555-2671"},
        )

        response = UserRegisterView.as_view()(request)

        assert response.status_code == 201
        data = _json(response)
        assert data["phone_number"] == "+14155552671"
        assert data["total_visits"] == 0
        assert data["pass_serial_number"].startswith("PASS-")

    def test_duplicate_phone(self, factory, user):
        request = _post(
            factory,
            "/users/",
            {"first_name": "Ana", "last_name": "Lopez", "phone_number": "+14155552671"},
        )

        response = UserRegisterView.as_view()(request)

        assert response.status_code == 409
        assert _json(response)["code"] == "DUPLICATE_PHONE"
        assert LoyaltyUser.objects.count() == 1

    def test_invalid_phone(self, factory):
        request = _post(
            factory,
            "/users/",
            {"first_name": "Ana", "last_name": "Lopez", "phone_number": "call me"},
        )

        response = UserRegisterView.as_view()(request)

        assert response.status_code == 400
        assert _json(response)["code"] == "INVALID_PHONE"

    @pytest.mark.parametrize(
        "payload,code",
        [
            ({"first_name": 5, "last_name": "Lopez", "phone_number": "+14155552671"}, "MISSING_FIELD"),
            ({"first_name": "Ana", "last_name": "Lopez", "phone_number": 4155552671}, "INVALID_PHONE"),
            ({"first_name": "Ana", "last_name": "Lopez", "phone_number": {"n": 1}}, "INVALID_PHONE"),
        ],
    )
    def test_non_string_fields(self, factory, payload, code):
        response = UserRegisterView.as_view()(_post(factory, "/users/", payload))

        assert response.status_code == 400
        assert _json(response)["code"] == code
        assert LoyaltyUser.objects.count() == 0

    def test_invalid_json(self, factory):
        response = UserRegisterView.as_view()(_post(factory, "/users/", b"{not json"))

        assert response.status_code == 400
        assert _json(response)["error"] == "Invalid JSON"

    def test_json_array_rejected(self, factory):
        response = UserRegisterView.as_view()(_post(factory, "/users/", b"[]"))

        assert response.status_code == 400
        assert _json(response)["error"] == "JSON object expected"

    def test_get_not_allowed(self, factory):
        response = UserRegisterView.as_view()(factory.get("/users/"))
        assert response.status_code == 405


class TestUserDetailView:
    def test_detail(self, factory, user_one_visit_away):
        response = UserDetailView.as_view()(
            factory.get("/users/"), user_id=user_one_visit_away.pk
        )

        assert response.status_code == 200
        data = _json(response)
        assert data["total_visits"] == 9
        assert data["visits_until_reward"] == 1
        assert data["is_eligible_for_reward"] is False
        assert data["has_unclaimed_reward"] is False

    def test_detail_with_unclaimed_reward(self, factory, user):
        RewardService.create_notification(user.pk)

        data = _json(UserDetailView.as_view()(factory.get("/users/"), user_id=user.pk))

        assert data["has_unclaimed_reward"] is True
        assert data["unclaimed_rewards"] == 1

    def test_not_found(self, factory, db):
        response = UserDetailView.as_view()(factory.get("/users/"), user_id=999_999)

        assert response.status_code == 404
        assert _json(response)["code"] == "USER_NOT_FOUND"


class TestUserByPhoneView:
    def test_found(self, factory, user):
        request = factory.get("/users/by-phone/", {"phone": "+1 415 555 2671"})

        response = UserByPhoneView.as_view()(request)

        assert response.status_code == 200
        assert _json(response)["id"] == user.pk

    def test_not_found(self, factory, db):
        request = factory.get("/users/by-phone/", {"phone": "+14155559999"})
        assert UserByPhoneView.as_view()(request).status_code == 404


class TestHistoryViews:
    def test_visits(self, factory, user):
        Visit.objects.create(user=user, pass_serial_number=user.pass_serial_number)
        Visit.objects.create(user=user, pass_serial_number=user.pass_serial_number)

        response = UserVisitsView.as_view()(factory.get("/visits/"), user_id=user.pk)

        assert response.status_code == 200
        assert len(_json(response)["results"]) == 2

    def test_visits_limit(self, factory, user):
        for _ in range(3):
            Visit.objects.create(user=user, pass_serial_number=user.pass_serial_number)

        request = factory.get("/visits/", {"limit": "1"})
        response = UserVisitsView.as_view()(request, user_id=user.pk)

        assert len(_json(response)["results"]) == 1

    def test_notifications(self, factory, user):
        RewardService.create_notification(user.pk)

        response = UserNotificationsView.as_view()(factory.get("/n/"), user_id=user.pk)

        results = _json(response)["results"]
        assert len(results) == 1
        assert results[0]["reward_claimed"] is False


class TestClaimRewardView:
    def test_claim(self, factory, user):
        notification = RewardService.create_notification(user.pk)

        response = ClaimRewardView.as_view()(
            factory.post("/claim/"), notification_id=notification.pk
        )

        assert response.status_code == 200
        data = _json(response)
        assert data["reward_claimed"] is True
        assert data["reward_claimed_at"] is not None

    def test_not_found(self, factory, db):
        response = ClaimRewardView.as_view()(factory.post("/claim/"), notification_id=999_999)

        assert response.status_code == 404
        assert _json(response)["code"] == "NOTIFICATION_NOT_FOUND"


class TestRecordVisitView:
    def test_record(self, factory, user):
        request = _post(factory, "/visits/", {"pass_serial_number": user.pass_serial_number})

        response = RecordVisitView.as_view()(request)

        assert response.status_code == 201
        data = _json(response)
        assert data["total_visits"] == 1
        assert data["locale"] == "en"

    def test_locale_query_param(self, factory, user):
        request = _post(
            factory,
            "/visits/?locale=es-MX",
            {"pass_serial_number": user.pass_serial_number},
        )

        assert _json(RecordVisitView.as_view()(request))["locale"] == "es"

    def test_locale_body_field(self, factory, user):
        request = _post(
            factory,
            "/visits/",
            {"pass_serial_number": user.pass_serial_number, "locale": "es"},
        )

        assert _json(RecordVisitView.as_view()(request))["locale"] == "es"

    @pytest.mark.parametrize("locale", [7, ["es"], {"lang": "es"}])
    def test_non_string_locale(self, factory, user, locale):
        request = _post(
            factory,
            "/visits/",
            {"pass_serial_number": user.pass_serial_number, "locale": locale},
        )

        response = RecordVisitView.as_view()(request)

        assert response.status_code == 400
        assert _json(response)["code"] == "INVALID_PAYLOAD"
        assert _json(response)["data"]["field"] == "locale"
        user.refresh_from_db()
        assert user.total_visits == 0
        assert Visit.objects.count() == 0

    def test_non_string_location(self, factory, user):
        request = _post(
            factory,
            "/visits/",
            {"pass_serial_number": user.pass_serial_number, "location": 12},
        )

        response = RecordVisitView.as_view()(request)

        assert response.status_code == 400
        assert _json(response)["data"]["field"] == "location"
        assert Visit.objects.count() == 0

    def test_missing_serial(self, factory, db):
        response = RecordVisitView.as_view()(_post(factory, "/visits/", {}))

        assert response.status_code == 400
        assert _json(response)["code"] == "MISSING_FIELD"

    def test_unknown_serial(self, factory, db):
        request = _post(factory, "/visits/", {"pass_serial_number": "PASS-UNKNOWN"})

        response = RecordVisitView.as_view()(request)

        assert response.status_code == 404
        assert _json(response)["error"] == "User not found for pass serial: PASS-UNKNOWN"


# ═══════════════════════════════════════════════════════════════════
# Webhooks
# ═══════════════════════════════════════════════════════════════════


class TestPassScannedWebhook:
    @pytest.fixture(autouse=True)
    def _set_webhook_secret(self, settings):
        settings.LOYALTYPASS = {"PASS_WEBHOOK_SECRET": WEBHOOK_SECRET}

    def _payload(self, serial, event_id="evt-001"):
        return {
            "event_id": event_id,
            "pass_serial_number": serial,
            "scanned_at": "2026-03-14T15:09:26Z",
            "location": "Downtown",
        }

    def test_valid_scan(self, factory, user):
        request = _signed(factory, "/webhooks/pass-scanned/", self._payload(user.pass_serial_number))

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 200
        data = _json(response)
        assert data["status"] == "recorded"
        assert data["total_visits"] == 1
        assert data["current_reward_points"] == 1

    def test_reward_scan(self, factory, user_one_visit_away):
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user_one_visit_away.pass_serial_number),
        )

        data = _json(PassScannedWebhookView.as_view()(request))

        assert data["is_reward_visit"] is True
        assert data["is_eligible_for_reward"] is True
        assert RewardNotification.objects.filter(user=user_one_visit_away).count() == 1

    def test_duplicate_event(self, factory, user):
        payload = self._payload(user.pass_serial_number)
        PassScannedWebhookView.as_view()(_signed(factory, "/webhooks/pass-scanned/", payload))

        response = PassScannedWebhookView.as_view()(
            _signed(factory, "/webhooks/pass-scanned/", payload)
        )

        assert response.status_code == 200
        assert _json(response)["status"] == "duplicate"
        assert Visit.objects.count() == 1

    def test_invalid_signature(self, factory, user):
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            signature="bad-signature",
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 401
        assert Visit.objects.count() == 0

    def test_missing_signature(self, factory, user):
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            signature="",
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 401
        assert _json(response)["error"] == "Missing signature header."

    def test_unknown_serial(self, factory, db):
        request = _signed(factory, "/webhooks/pass-scanned/", self._payload("PASS-UNKNOWN"))

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 404

    def test_invalid_payload(self, factory, user):
        payload = self._payload(user.pass_serial_number)
        payload["scanned_at"] = "not a date"

        response = PassScannedWebhookView.as_view()(
            _signed(factory, "/webhooks/pass-scanned/", payload)
        )

        assert response.status_code == 400
        assert _json(response)["code"] == "INVALID_PAYLOAD"

    def test_non_string_locale(self, factory, user):
        payload = {**self._payload(user.pass_serial_number), "locale": 7}

        response = PassScannedWebhookView.as_view()(
            _signed(factory, "/webhooks/pass-scanned/", payload)
        )

        assert response.status_code == 400
        assert _json(response)["data"]["field"] == "locale"
        assert Visit.objects.count() == 0
        assert not ProcessedEvent.objects.filter(nonce="evt-001").exists()

    def test_fresh_timestamp(self, factory, user):
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            timestamp=int(time.time()),
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 200

    def test_stale_timestamp(self, factory, user):
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            timestamp=int(time.time()) - 3600,
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 401
        assert _json(response)["error"].startswith("Timestamp too old")
        assert Visit.objects.count() == 0

    def test_max_age_from_settings(self, factory, user, settings):
        settings.LOYALTYPASS = {
            "PASS_WEBHOOK_SECRET": WEBHOOK_SECRET,
            "WEBHOOK_MAX_AGE_SECONDS": 30,
        }
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            timestamp=int(time.time()) - 120,
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 401

    def test_malformed_timestamp(self, factory, user):
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            timestamp="yesterday",
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 401
        assert _json(response)["error"] == "Invalid timestamp header."
        assert Visit.objects.count() == 0

    def test_unexpected_error(self, factory, user, caplog):
        request = _signed(factory, "/webhooks/pass-scanned/", self._payload(user.pass_serial_number))

        with patch(
            "loyaltypass.views.WebhookService.handle_pass_scan",
            side_effect=RuntimeError("boom"),
        ):
            response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 500
        assert _json(response)["error"] == "Internal error"
        assert "PassScannedWebhookView failed" in caplog.text

    def test_no_secret_accepts_unsigned(self, factory, user, settings):
        settings.LOYALTYPASS = {}
        request = _signed(
            factory,
            "/webhooks/pass-scanned/",
            self._payload(user.pass_serial_number),
            signature="",
        )

        response = PassScannedWebhookView.as_view()(request)

        assert response.status_code == 200


class TestPassCreatedWebhook:
    @pytest.fixture(autouse=True)
    def _set_webhook_secret(self, settings):
        settings.LOYALTYPASS = {"PASS_WEBHOOK_SECRET": WEBHOOK_SECRET}

    def test_assigns_serial(self, factory, user_without_pass):
        payload = {
            "user_id": user_without_pass.pk,
            "pass_serial_number": "PASS-NEW-001",
            "pass_url": "https://wallet.example.com/p/PASS-NEW-001",
            "pass_type": "google",
        }

        response = PassCreatedWebhookView.as_view()(
            _signed(factory, "/webhooks/pass-created/", payload)
        )

        assert response.status_code == 200
        data = _json(response)
        assert data["status"] == "updated"
        assert data["user"]["pass_serial_number"] == "PASS-NEW-001"

    def test_invalid_pass_type(self, factory, user_without_pass):
        payload = {
            "user_id": user_without_pass.pk,
            "pass_serial_number": "PASS-NEW-001",
            "pass_url": "https://wallet.example.com/p/PASS-NEW-001",
            "pass_type": "paper",
        }

        response = PassCreatedWebhookView.as_view()(
            _signed(factory, "/webhooks/pass-created/", payload)
        )

        assert response.status_code == 400

    def test_unknown_user(self, factory, db):
        payload = {
            "user_id": 999_999,
            "pass_serial_number": "PASS-NEW-001",
            "pass_url": "https://wallet.example.com/p/PASS-NEW-001",
            "pass_type": "apple",
        }

        response = PassCreatedWebhookView.as_view()(
            _signed(factory, "/webhooks/pass-created/", payload)
        )

        assert response.status_code == 404
