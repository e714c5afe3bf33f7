"""Visit service: visit accrual and reward-cycle counters.

Each accrual is one transaction:
    1. lock the user row (select_for_update) by pass serial
    2. total_visits += 1, current_reward_points += 1
    3. points reaching VISITS_PER_REWARD complete the cycle: points reset to 0
    4. insert the Visit and save the user

Side effects (reward notification, pass update) belong to the caller;
see WebhookService.handle_pass_scan().
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import DatabaseError, transaction
from django.utils import timezone

from loyaltypass.conf import loyaltypass_settings
from loyaltypass.exceptions import NotFoundError, ValidationError
from loyaltypass.models import LoyaltyUser, Visit
from loyaltypass.signals import visit_recorded

logger = logging.getLogger(__name__)

POINTS_PER_VISIT = 1


@dataclass
class VisitResult:
    """Outcome of a single accrual."""

    visit: Visit
    user: LoyaltyUser
    # Counter rule (points >= cycle length). Always False after a reset.
    is_reward_eligible: bool
    # This visit completed a reward cycle.
    reward_triggered: bool


class VisitService:
    """
    Service for visit accrual.

    Uses @classmethod for extensibility (consistent with other services).
    All counter mutations use transaction.atomic().
    """

    @classmethod
    def record_visit(
        cls,
        pass_serial_number: str,
        visited_at: datetime | None = None,
        location: str = "",
    ) -> VisitResult:
        """
        Record a visit for the user holding a pass.

        Args:
            pass_serial_number: Serial scanned at the store
            visited_at: Scan time reported by the provider (default: now)
            location: Free-text scan location

        Returns:
            VisitResult with the persisted Visit and the updated user

        Raises:
            ValidationError: If pass_serial_number is empty
            NotFoundError: If no user holds this pass
        """
        if not pass_serial_number or not pass_serial_number.strip():
            raise ValidationError(
                "MISSING_FIELD",
                message="Pass serial number is required",
                field="pass_serial_number",
            )

        target = loyaltypass_settings.VISITS_PER_REWARD

        try:
            with transaction.atomic():
                user = cls._get_user_for_update(pass_serial_number)

                new_total_visits = user.total_visits + 1
                raw_points = user.current_reward_points + POINTS_PER_VISIT
                reward_triggered = raw_points >= target
                final_points = 0 if reward_triggered else raw_points

                visit = Visit.objects.create(
                    user=user,
                    pass_serial_number=pass_serial_number,
                    visited_at=visited_at or timezone.now(),
                    reward_points_earned=POINTS_PER_VISIT,
                    is_reward_visit=reward_triggered,
                    location=location or "",
                )

                user.total_visits = new_total_visits
                user.current_reward_points = final_points
                user.save(update_fields=["total_visits", "current_reward_points", "updated_at"])

                # Sent when the outermost transaction commits
                transaction.on_commit(
                    lambda: visit_recorded.send(
                        sender=Visit,
                        visit=visit,
                        user=user,
                        reward_triggered=reward_triggered,
                    )
                )
        except DatabaseError:
            logger.exception("Visit accrual failed for pass %s", pass_serial_number)
            raise

        logger.info(
            "Visit recorded: user=%s total_visits=%s points=%s reward_triggered=%s",
            user.pk,
            user.total_visits,
            user.current_reward_points,
            reward_triggered,
        )

        return VisitResult(
            visit=visit,
            user=user,
            is_reward_eligible=user.current_reward_points >= target,
            reward_triggered=reward_triggered,
        )

    @classmethod
    def list_for_user(cls, user_id: int, limit: int = 100) -> list[Visit]:
        """Visit history for a user (most recent first)."""
        return list(Visit.objects.filter(user_id=user_id)[:limit])

    @classmethod
    def _get_user_for_update(cls, pass_serial_number: str) -> LoyaltyUser:
        """
        Get the pass holder with a row-level lock.

        MUST be called inside transaction.atomic().
        Prevents two concurrent scans from incrementing from the same base.
        """
        try:
            return LoyaltyUser.objects.select_for_update().get(
                pass_serial_number=pass_serial_number
            )
        except LoyaltyUser.DoesNotExist:
            raise NotFoundError(
                "USER_NOT_FOUND",
                message=f"User not found for pass serial: {pass_serial_number}",
                pass_serial_number=pass_serial_number,
            )
