"""
Simulated wallet-pass and notification backends.

No network calls: serials are generated locally and "sent" messages are
only logged. The notification dispatcher still writes the real
RewardNotification ledger row.
"""

from __future__ import annotations

import logging
import secrets
import string
import time

from loyaltypass.protocols.passes import (
    AdapterResult,
    PassCreationRequest,
    PassCreationResult,
    PassUpdateRequest,
    RewardNotificationRequest,
)
from loyaltypass.utils import resolve_locale

logger = logging.getLogger(__name__)

_SERIAL_ALPHABET = string.ascii_uppercase + string.digits

_REWARD_MESSAGES = {
    "en": "Congratulations {name}! After {visits} visits you've earned a free reward. 🎁",
    "es": "¡Felicidades {name}! Después de {visits} visitas ganaste una recompensa gratis. 🎁",
}


def generate_pass_serial() -> str:
    """PASS-<epoch ms>-<6 uppercase alphanumerics>."""
    suffix = "".join(secrets.choice(_SERIAL_ALPHABET) for _ in range(6))
    return f"PASS-{int(time.time() * 1000)}-{suffix}"


def reward_message(locale: str | None, first_name: str, total_visits: int) -> str:
    template = _REWARD_MESSAGES.get(resolve_locale(locale), _REWARD_MESSAGES["en"])
    return template.format(name=first_name, visits=total_visits)


class StubPassProvider:
    """PassProvider that issues serials locally."""

    def create_pass(self, request: PassCreationRequest) -> PassCreationResult:
        if not (
            request.first_name.strip()
            and request.last_name.strip()
            and request.phone_number.strip()
        ):
            return PassCreationResult(
                success=False,
                message="Missing required fields: first_name, last_name, and phone_number are required",
            )

        if request.user_id <= 0:
            return PassCreationResult(
                success=False,
                message="Invalid user_id: must be a positive number",
            )

        serial = generate_pass_serial()
        logger.info("Stub pass created for user %s: %s", request.user_id, serial)
        return PassCreationResult(
            success=True,
            message="Pass creation triggered successfully",
            pass_serial_number=serial,
        )

    def update_pass(self, request: PassUpdateRequest) -> AdapterResult:
        if not request.pass_serial_number or not request.pass_serial_number.strip():
            return AdapterResult(False, "Pass serial number is required")
        if request.reward_points < 0:
            return AdapterResult(False, "Reward points cannot be negative")
        if request.total_visits < 0:
            return AdapterResult(False, "Total visits cannot be negative")

        logger.info(
            "Stub pass update %s: reward_points=%s total_visits=%s",
            request.pass_serial_number,
            request.reward_points,
            request.total_visits,
        )
        return AdapterResult(True, f"Pass {request.pass_serial_number} updated successfully")


class StubNotificationDispatcher:
    """NotificationDispatcher that records the ledger row and logs the message."""

    def send_reward_notification(self, request: RewardNotificationRequest) -> AdapterResult:
        from loyaltypass.services.rewards import RewardService

        # ForeignKeyError propagates: a missing user is a caller bug, not a delivery failure
        notification = RewardService.create_notification(request.user_id)

        text = reward_message(request.locale, request.first_name, request.total_visits)
        logger.info(
            "Stub reward notification #%s to %s: %s",
            notification.pk,
            request.phone_number,
            text,
        )
        return AdapterResult(
            True,
            f"Reward notification sent successfully for user {request.user_id}",
        )
