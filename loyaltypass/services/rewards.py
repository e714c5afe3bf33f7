"""Reward service: notification ledger and claims."""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from loyaltypass.exceptions import ForeignKeyError, NotFoundError
from loyaltypass.models import LoyaltyUser, RewardNotification
from loyaltypass.signals import reward_claimed

logger = logging.getLogger(__name__)


class RewardService:
    """
    Service for the reward notification ledger.

    Uses @classmethod for extensibility (consistent with other services).
    """

    @classmethod
    def create_notification(cls, user_id: int) -> RewardNotification:
        """
        Record that a reward was granted to a user.

        Args:
            user_id: LoyaltyUser primary key

        Returns:
            Created RewardNotification (unclaimed)

        Raises:
            ForeignKeyError: If the user does not exist
        """
        # FK constraints are deferred until commit on most backends, so check up front.
        if not LoyaltyUser.objects.filter(pk=user_id).exists():
            raise ForeignKeyError("USER_FK_VIOLATION", user_id=user_id)

        try:
            with transaction.atomic():
                return RewardNotification.objects.create(
                    user_id=user_id,
                    notification_sent_at=timezone.now(),
                )
        except IntegrityError as exc:
            logger.exception("Reward notification insert failed for user %s", user_id)
            raise ForeignKeyError("USER_FK_VIOLATION", user_id=user_id) from exc

    @classmethod
    def claim_reward(cls, notification_id: int) -> RewardNotification:
        """
        Mark a reward as claimed.

        Re-claiming is allowed: the flag stays True and reward_claimed_at
        moves to now.

        Raises:
            NotFoundError: If the notification does not exist
        """
        with transaction.atomic():
            try:
                notification = RewardNotification.objects.select_for_update().get(
                    pk=notification_id
                )
            except RewardNotification.DoesNotExist:
                raise NotFoundError("NOTIFICATION_NOT_FOUND", notification_id=notification_id)

            notification.reward_claimed = True
            notification.reward_claimed_at = timezone.now()
            notification.save(update_fields=["reward_claimed", "reward_claimed_at"])

        reward_claimed.send(sender=RewardNotification, notification=notification)
        return notification

    @classmethod
    def get(cls, notification_id: int) -> RewardNotification | None:
        try:
            return RewardNotification.objects.get(pk=notification_id)
        except RewardNotification.DoesNotExist:
            return None

    @classmethod
    def list_for_user(cls, user_id: int, limit: int = 50) -> list[RewardNotification]:
        """Notification history for a user (most recent first)."""
        return list(RewardNotification.objects.filter(user_id=user_id)[:limit])

    @classmethod
    def unclaimed_for_user(cls, user_id: int) -> list[RewardNotification]:
        """Rewards granted but not yet claimed (most recent first)."""
        return list(
            RewardNotification.objects.filter(user_id=user_id, reward_claimed=False)
        )

    @classmethod
    def has_unclaimed(cls, user_id: int) -> bool:
        return RewardNotification.objects.filter(
            user_id=user_id,
            reward_claimed=False,
        ).exists()
