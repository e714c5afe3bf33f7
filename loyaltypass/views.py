"""
Loyaltypass JSON endpoints.

Webhook flow:
    1. Validates HMAC signature (G2)
    2. Parses JSON body
    3. Calls WebhookService (replay protection G3 happens there)
    4. Returns 200 with the result

Errors raised as LoyaltyPassError are rendered as
{"error": message, "code": code, "data": {...}} with the error's http_status.
"""

from __future__ import annotations

import json
import logging

from django.http import JsonResponse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from loyaltypass.conf import loyaltypass_settings
from loyaltypass.exceptions import LoyaltyPassError, NotFoundError, ValidationError
from loyaltypass.gates import GateError, Gates
from loyaltypass.services.rewards import RewardService
from loyaltypass.services.users import UserService
from loyaltypass.services.visits import VisitService
from loyaltypass.services.webhooks import WebhookService

logger = logging.getLogger("loyaltypass.webhooks")

SIGNATURE_HEADER = "X-Pass-Signature"
TIMESTAMP_HEADER = "X-Pass-Timestamp"


# =============================================================================
# Serialization
# =============================================================================


def user_as_dict(user) -> dict:
    return {
        "id": user.pk,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone_number": user.phone_number,
        "total_visits": user.total_visits,
        "current_reward_points": user.current_reward_points,
        "pass_serial_number": user.pass_serial_number,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def visit_as_dict(visit) -> dict:
    return {
        "id": visit.pk,
        "user_id": visit.user_id,
        "pass_serial_number": visit.pass_serial_number,
        "visited_at": visit.visited_at,
        "reward_points_earned": visit.reward_points_earned,
        "is_reward_visit": visit.is_reward_visit,
        "location": visit.location,
    }


def notification_as_dict(notification) -> dict:
    return {
        "id": notification.pk,
        "user_id": notification.user_id,
        "notification_sent_at": notification.notification_sent_at,
        "reward_claimed": notification.reward_claimed,
        "reward_claimed_at": notification.reward_claimed_at,
    }


def error_response(exc: LoyaltyPassError) -> JsonResponse:
    return JsonResponse(
        {"error": exc.message, "code": exc.code, "data": exc.data},
        status=exc.http_status,
    )


def _parse_json(body: bytes) -> dict:
    try:
        data = json.loads(body or b"{}")
    except (json.JSONDecodeError, ValueError):
        raise ValidationError("INVALID_PAYLOAD", message="Invalid JSON")
    if not isinstance(data, dict):
        raise ValidationError("INVALID_PAYLOAD", message="JSON object expected")
    return data


def _header_timestamp(request) -> int | None:
    value = request.headers.get(TIMESTAMP_HEADER, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise GateError("G2_ProviderEventAuthenticity", "Invalid timestamp header.")


def _locale(request, data: dict):
    """Locale from ?locale= or the JSON body; validated downstream."""
    return request.GET.get("locale") or data.get("locale")


def _limit(request, default: int) -> int:
    try:
        return max(1, min(int(request.GET.get("limit", default)), 500))
    except (TypeError, ValueError):
        return default


# =============================================================================
# Base views
# =============================================================================


@method_decorator(csrf_exempt, name="dispatch")
class LoyaltyPassView(View):
    """Renders LoyaltyPassError as a JSON error response."""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except LoyaltyPassError as exc:
            return error_response(exc)


class ProviderWebhookView(LoyaltyPassView):
    """
    Base for pass provider webhooks.

    Expects:
        - X-Pass-Signature header with HMAC-SHA256 of the raw body
        - X-Pass-Timestamp header (optional, unix seconds)
        - JSON body

    Settings:
        LOYALTYPASS["PASS_WEBHOOK_SECRET"]: HMAC secret for signature validation.
        LOYALTYPASS["WEBHOOK_MAX_AGE_SECONDS"]: Maximum age when a timestamp is sent.
    """

    def post(self, request):
        body = request.body
        signature = request.headers.get(SIGNATURE_HEADER, "")

        # G2: Authenticity
        try:
            Gates.provider_event_authenticity(
                body,
                signature,
                loyaltypass_settings.PASS_WEBHOOK_SECRET,
                timestamp=_header_timestamp(request),
                max_age_seconds=loyaltypass_settings.WEBHOOK_MAX_AGE_SECONDS,
            )
        except GateError as exc:
            logger.warning("Pass webhook: G2 failed: %s", exc.message)
            return JsonResponse({"error": exc.message}, status=401)

        data = _parse_json(body)
        try:
            return self.handle(request, data)
        except LoyaltyPassError:
            raise
        except Exception:
            logger.exception("Pass webhook: %s failed", type(self).__name__)
            return JsonResponse({"error": "Internal error"}, status=500)

    def handle(self, request, data: dict) -> JsonResponse:
        raise NotImplementedError


# =============================================================================
# Endpoints
# =============================================================================


class HealthView(LoyaltyPassView):
    def get(self, request):
        return JsonResponse({"status": "ok", "timestamp": timezone.now().isoformat()})


class UserRegisterView(LoyaltyPassView):
    """POST: register a user and request their wallet pass."""

    def post(self, request):
        data = _parse_json(request.body)
        user = UserService.register(
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            phone_number=data.get("phone_number", ""),
        )
        return JsonResponse(user_as_dict(user), status=201)


class UserDetailView(LoyaltyPassView):
    """GET: user with reward progress."""

    def get(self, request, user_id: int):
        dashboard = UserService.get_with_stats(user_id)
        if dashboard is None:
            raise NotFoundError("USER_NOT_FOUND", user_id=user_id)
        return JsonResponse(dashboard.as_dict())


class UserByPhoneView(LoyaltyPassView):
    """GET ?phone=: lookup by phone number."""

    def get(self, request):
        phone = request.GET.get("phone", "")
        user = UserService.get_by_phone(phone)
        if user is None:
            raise NotFoundError("USER_NOT_FOUND", phone_number=phone)
        return JsonResponse(user_as_dict(user))


class UserVisitsView(LoyaltyPassView):
    """GET: visit history, most recent first."""

    def get(self, request, user_id: int):
        visits = VisitService.list_for_user(user_id, limit=_limit(request, 100))
        return JsonResponse({"results": [visit_as_dict(v) for v in visits]})


class UserNotificationsView(LoyaltyPassView):
    """GET: reward notification history, most recent first."""

    def get(self, request, user_id: int):
        notifications = RewardService.list_for_user(user_id, limit=_limit(request, 50))
        return JsonResponse({"results": [notification_as_dict(n) for n in notifications]})


class ClaimRewardView(LoyaltyPassView):
    """POST: mark a reward as claimed."""

    def post(self, request, notification_id: int):
        notification = RewardService.claim_reward(notification_id)
        return JsonResponse(notification_as_dict(notification))


class RecordVisitView(LoyaltyPassView):
    """POST {pass_serial_number, location?, locale?}: record a visit now."""

    def post(self, request):
        data = _parse_json(request.body)
        serial = data.get("pass_serial_number")
        if not isinstance(serial, str):
            raise ValidationError(
                "MISSING_FIELD",
                message="Pass serial number is required",
                field="pass_serial_number",
            )
        location = data.get("location") or ""
        if not isinstance(location, str):
            raise ValidationError("INVALID_PAYLOAD", message="location must be a string", field="location")
        result = WebhookService.process_scan(
            serial,
            location=location,
            locale=_locale(request, data),
        )
        return JsonResponse(result.as_dict(), status=201)


class PassCreatedWebhookView(ProviderWebhookView):
    """Provider reports the serial assigned to a user's new pass."""

    def handle(self, request, data: dict) -> JsonResponse:
        user = WebhookService.handle_pass_creation(data)
        return JsonResponse({"status": "updated", "user": user_as_dict(user)})


class PassScannedWebhookView(ProviderWebhookView):
    """Provider reports a pass scan at the store."""

    def handle(self, request, data: dict) -> JsonResponse:
        try:
            result = WebhookService.handle_pass_scan(
                data,
                locale=_locale(request, data),
            )
        except GateError:
            logger.debug("Pass webhook: duplicate event %s", data.get("event_id"))
            return JsonResponse({"status": "duplicate"}, status=200)
        return JsonResponse({"status": "recorded", **result.as_dict()})
