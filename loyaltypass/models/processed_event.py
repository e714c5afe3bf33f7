"""
ProcessedEvent model for webhook replay protection.

Stores processed webhook event ids so a redelivered pass scan is not
counted as a second visit.
"""

from datetime import timedelta

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class ProcessedEvent(models.Model):
    """Tracks processed webhook events (one row per provider event id)."""

    nonce = models.CharField(verbose_name=_("nonce"), max_length=255, unique=True, db_index=True)
    provider = models.CharField(verbose_name=_("provider"), max_length=50, db_index=True)
    processed_at = models.DateTimeField(verbose_name=_("processed at"), auto_now_add=True)

    class Meta:
        db_table = "loyaltypass_processed_event"
        verbose_name = _("processed event")
        verbose_name_plural = _("processed events")
        indexes = [
            models.Index(fields=["provider", "processed_at"], name="lp_event_provider_idx"),
        ]

    def __str__(self):
        return f"{self.provider}:{self.nonce[:20]}"

    @classmethod
    def cleanup_old_events(cls, days: int | None = None):
        """Remove events older than N days."""
        if days is None:
            from loyaltypass.conf import loyaltypass_settings

            days = loyaltypass_settings.EVENT_CLEANUP_DAYS
        cutoff = timezone.now() - timedelta(days=days)
        return cls.objects.filter(processed_at__lt=cutoff).delete()
