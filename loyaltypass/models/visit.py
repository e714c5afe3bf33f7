"""Visit ledger model."""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Visit(models.Model):
    """
    Immutable record of an in-store visit (one pass scan).

    Visits are append-only, never modified or deleted.
    pass_serial_number is a copy of the serial scanned, kept even if the
    user's pass is later reissued.
    """

    user = models.ForeignKey(
        "loyaltypass.LoyaltyUser",
        on_delete=models.PROTECT,
        related_name="visits",
        verbose_name=_("user"),
    )
    pass_serial_number = models.CharField(_("pass serial number"), max_length=100)
    visited_at = models.DateTimeField(
        _("visited at"),
        default=timezone.now,
        db_index=True,
        help_text=_("Scan time reported by the provider, or insertion time"),
    )
    reward_points_earned = models.PositiveSmallIntegerField(_("points earned"), default=1)
    is_reward_visit = models.BooleanField(
        _("reward visit"),
        default=False,
        help_text=_("This visit completed a reward cycle"),
    )
    location = models.CharField(_("location"), max_length=200, blank=True)

    class Meta:
        db_table = "loyaltypass_visit"
        verbose_name = _("visit")
        verbose_name_plural = _("visits")
        ordering = ["-visited_at", "-id"]
        indexes = [
            models.Index(fields=["user", "-visited_at"], name="lp_visit_user_visited_idx"),
        ]

    def __str__(self):
        flag = " [reward]" if self.is_reward_visit else ""
        return f"{self.pass_serial_number} @ {self.visited_at:%Y-%m-%d %H:%M}{flag}"
