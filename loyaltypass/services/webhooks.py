"""
Webhook service: pass provider callbacks.

Flow for a scan:
    1. Validate payload, parse scanned_at
    2. Replay protection on event_id (same transaction as the accrual)
    3. VisitService.record_visit()
    4. Reward triggered → NotificationDispatcher (writes the ledger row)
    5. PassProvider.update_pass() with the new counters

Steps 4 and 5 run after the accrual has committed and are best-effort:
failures are logged, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from loyaltypass.adapters import get_notification_dispatcher, get_pass_provider
from loyaltypass.conf import loyaltypass_settings
from loyaltypass.exceptions import UpstreamServiceError, ValidationError
from loyaltypass.gates import Gates
from loyaltypass.models import LoyaltyUser
from loyaltypass.protocols.passes import PassUpdateRequest, RewardNotificationRequest
from loyaltypass.services.rewards import RewardService
from loyaltypass.services.users import UserService
from loyaltypass.services.visits import VisitService
from loyaltypass.utils import resolve_locale

logger = logging.getLogger(__name__)

PASS_TYPES = ("apple", "google")


@dataclass(frozen=True)
class ScanResult:
    """Response body for a processed scan."""

    visit_id: int
    user_id: int
    reward_points_earned: int
    total_visits: int
    current_reward_points: int
    is_reward_visit: bool
    # User holds at least one unclaimed reward (ledger)
    is_eligible_for_reward: bool
    # Next visit completes the cycle
    is_one_visit_away: bool
    locale: str

    def as_dict(self) -> dict:
        return asdict(self)


class WebhookService:
    """
    Service for pass provider webhooks.

    Uses @classmethod for extensibility (consistent with other services).
    """

    @classmethod
    def handle_pass_creation(cls, payload: dict) -> LoyaltyUser:
        """
        Pass-creation webhook: store the serial the provider assigned.

        Args:
            payload: {user_id, pass_serial_number, pass_url, pass_type}

        Raises:
            ValidationError: Malformed payload
            NotFoundError: Unknown user
            ConflictError: Serial already held by another user
        """
        user_id = payload.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise ValidationError("INVALID_PAYLOAD", message="user_id must be an integer", field="user_id")

        serial = payload.get("pass_serial_number")
        if not isinstance(serial, str):
            raise ValidationError(
                "INVALID_PAYLOAD",
                message="pass_serial_number must be a string",
                field="pass_serial_number",
            )

        if not isinstance(payload.get("pass_url"), str):
            raise ValidationError("INVALID_PAYLOAD", message="pass_url must be a string", field="pass_url")

        pass_type = payload.get("pass_type")
        if pass_type not in PASS_TYPES:
            raise ValidationError(
                "INVALID_PAYLOAD",
                message=f"pass_type must be one of {', '.join(PASS_TYPES)}",
                field="pass_type",
            )

        user = UserService.set_pass_serial(user_id, serial)
        logger.info("Pass assigned: user=%s serial=%s type=%s", user.pk, serial, pass_type)
        return user

    @classmethod
    def handle_pass_scan(cls, payload: dict, locale: str | None = None) -> ScanResult:
        """
        Pass-scan webhook: record a visit for the pass holder.

        Args:
            payload: {pass_serial_number, scanned_at, location?, event_id?}
            locale: Locale for the customer-facing reward message

        Raises:
            ValidationError: Malformed payload
            NotFoundError: No user holds this pass
            GateError: event_id already processed (G3)
        """
        serial = payload.get("pass_serial_number")
        if not isinstance(serial, str) or not serial.strip():
            raise ValidationError(
                "INVALID_PAYLOAD",
                message="pass_serial_number is required",
                field="pass_serial_number",
            )

        location = payload.get("location") or ""
        if not isinstance(location, str):
            raise ValidationError("INVALID_PAYLOAD", message="location must be a string", field="location")

        event_id = payload.get("event_id")

        return cls.process_scan(
            serial,
            visited_at=cls._parse_scanned_at(payload.get("scanned_at")),
            location=location,
            locale=locale,
            event_id=str(event_id) if event_id else None,
        )

    @classmethod
    def process_scan(
        cls,
        pass_serial_number: str,
        visited_at: datetime | None = None,
        location: str = "",
        locale: str | None = None,
        event_id: str | None = None,
    ) -> ScanResult:
        """Accrue one visit, then notify and sync the pass (best-effort)."""
        if locale is not None and not isinstance(locale, str):
            raise ValidationError("INVALID_PAYLOAD", message="locale must be a string", field="locale")
        locale = resolve_locale(locale)

        with transaction.atomic():
            if event_id:
                Gates.replay_protection(event_id, provider="pass_scan")
            result = VisitService.record_visit(
                pass_serial_number,
                visited_at=visited_at,
                location=location,
            )

        user = result.user

        if result.reward_triggered:
            cls._dispatch_reward_notification(user, locale)
        cls._push_pass_update(user, pass_serial_number)

        target = loyaltypass_settings.VISITS_PER_REWARD
        visits_until_reward = target - (user.current_reward_points % target)

        return ScanResult(
            visit_id=result.visit.pk,
            user_id=user.pk,
            reward_points_earned=result.visit.reward_points_earned,
            total_visits=user.total_visits,
            current_reward_points=user.current_reward_points,
            is_reward_visit=result.visit.is_reward_visit,
            is_eligible_for_reward=RewardService.has_unclaimed(user.pk),
            is_one_visit_away=visits_until_reward == 1,
            locale=locale,
        )

    @classmethod
    def _dispatch_reward_notification(cls, user: LoyaltyUser, locale: str) -> None:
        request = RewardNotificationRequest(
            user_id=user.pk,
            first_name=user.first_name,
            last_name=user.last_name,
            phone_number=user.phone_number,
            total_visits=user.total_visits,
            locale=locale,
        )
        try:
            outcome = get_notification_dispatcher().send_reward_notification(request)
        except Exception:
            # The visit is already committed; reconcile the reward by hand.
            error = UpstreamServiceError(
                "NOTIFICATION_FAILED",
                user_id=user.pk,
                total_visits=user.total_visits,
            )
            logger.exception(
                "%s: user=%s total_visits=%s",
                error,
                user.pk,
                user.total_visits,
                extra={"error": error.as_dict()},
            )
            return

        if not outcome.success:
            error = UpstreamServiceError(
                "NOTIFICATION_FAILED",
                message=f"Reward notification rejected: {outcome.message}",
                user_id=user.pk,
                total_visits=user.total_visits,
            )
            logger.error(
                "%s: user=%s total_visits=%s",
                error,
                user.pk,
                user.total_visits,
                extra={"error": error.as_dict()},
            )

    @classmethod
    def _push_pass_update(cls, user: LoyaltyUser, pass_serial_number: str) -> None:
        request = PassUpdateRequest(
            pass_serial_number=pass_serial_number,
            reward_points=user.current_reward_points,
            total_visits=user.total_visits,
        )
        try:
            outcome = get_pass_provider().update_pass(request)
        except Exception:
            error = UpstreamServiceError(
                "PASS_UPDATE_FAILED",
                message=f"Pass update failed for {pass_serial_number}",
                pass_serial_number=pass_serial_number,
            )
            logger.warning("%s", error, exc_info=True, extra={"error": error.as_dict()})
            return

        if not outcome.success:
            error = UpstreamServiceError(
                "PASS_UPDATE_FAILED",
                message=f"Pass update rejected for {pass_serial_number}: {outcome.message}",
                pass_serial_number=pass_serial_number,
            )
            logger.warning("%s", error, extra={"error": error.as_dict()})

    @staticmethod
    def _parse_scanned_at(value) -> datetime:
        """ISO-8601 string (or datetime) to an aware datetime."""
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str) and value.strip():
            try:
                parsed = parse_datetime(value.strip())
            except ValueError:
                parsed = None
        else:
            parsed = None

        if parsed is None:
            raise ValidationError(
                "INVALID_PAYLOAD",
                message="scanned_at must be an ISO-8601 datetime",
                field="scanned_at",
            )

        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed
