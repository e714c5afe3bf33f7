"""Loyalty user model.

Counters:
    total_visits
        Lifetime visit count. Never decreases.

    current_reward_points
        Progress inside the current reward cycle. Reset to 0 on the visit
        that completes a cycle, so after every accrual
        current_reward_points == total_visits % VISITS_PER_REWARD.

Lookup keys:
    phone_number       business key (E.164, unique), independent of pass state
    pass_serial_number set by the pass-creation webhook, used by scans
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyUser(models.Model):
    """Registered loyalty program member."""

    first_name = models.CharField(_("first name"), max_length=100)
    last_name = models.CharField(_("last name"), max_length=100)
    phone_number = models.CharField(
        _("phone number"),
        max_length=20,
        unique=True,
        help_text=_("E.164 format (+14155552671)"),
    )

    # Counters (mutated only by VisitService.record_visit)
    total_visits = models.PositiveIntegerField(
        _("total visits"),
        default=0,
        help_text=_("Lifetime visits (never decreases)"),
    )
    current_reward_points = models.PositiveIntegerField(
        _("current reward points"),
        default=0,
        help_text=_("Visits in the current reward cycle"),
    )

    # Wallet pass (null until the pass-creation webhook fires)
    pass_serial_number = models.CharField(
        _("pass serial number"),
        max_length=100,
        null=True,
        blank=True,
        unique=True,
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "loyaltypass_user"
        verbose_name = _("loyalty user")
        verbose_name_plural = _("loyalty users")
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.phone_number})"

    @property
    def name(self) -> str:
        """Full name (first + last)."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_pass(self) -> bool:
        return bool(self.pass_serial_number)

    def save(self, *args, **kwargs):
        if self.phone_number:
            from loyaltypass.utils import normalize_phone

            self.phone_number = normalize_phone(self.phone_number) or self.phone_number
        super().save(*args, **kwargs)
