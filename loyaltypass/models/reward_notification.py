"""Reward notification ledger model."""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class RewardNotification(models.Model):
    """
    A reward granted to a user, and whether it has been claimed.

    One row per completed reward cycle. Rows are never deleted; claiming
    only flips reward_claimed and stamps reward_claimed_at.
    """

    user = models.ForeignKey(
        "loyaltypass.LoyaltyUser",
        on_delete=models.PROTECT,
        related_name="reward_notifications",
        verbose_name=_("user"),
    )
    notification_sent_at = models.DateTimeField(
        _("sent at"),
        default=timezone.now,
        db_index=True,
    )
    reward_claimed = models.BooleanField(_("claimed"), default=False)
    reward_claimed_at = models.DateTimeField(_("claimed at"), null=True, blank=True)

    class Meta:
        db_table = "loyaltypass_reward_notification"
        verbose_name = _("reward notification")
        verbose_name_plural = _("reward notifications")
        ordering = ["-notification_sent_at", "-id"]
        indexes = [
            models.Index(fields=["user", "reward_claimed"], name="lp_notif_user_claimed_idx"),
        ]

    def __str__(self):
        status = "claimed" if self.reward_claimed else "pending"
        return f"Reward #{self.pk} for user {self.user_id} ({status})"
