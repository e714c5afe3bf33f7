"""
Loyaltypass configuration.

Usage in settings.py:
    LOYALTYPASS = {
        "VISITS_PER_REWARD": 5,
        "DEFAULT_REGION": "US",
        "PASS_WEBHOOK_SECRET": "change-me",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class LoyaltyPassSettings:
    """Loyaltypass configuration settings."""

    # Reward cycle length (visits per free reward)
    VISITS_PER_REWARD: int = 5

    # Phone normalization default region (numbers without "+")
    DEFAULT_REGION: str = "US"

    # External collaborators (dotted paths)
    PASS_PROVIDER_BACKEND: str = "loyaltypass.adapters.stub.StubPassProvider"
    NOTIFICATION_BACKEND: str = "loyaltypass.adapters.stub.StubNotificationDispatcher"

    # HMAC secret for provider webhooks. Empty = signature check skipped.
    PASS_WEBHOOK_SECRET: str = ""
    # Maximum age of a webhook carrying X-Pass-Timestamp
    WEBHOOK_MAX_AGE_SECONDS: int = 300

    # ProcessedEvent cleanup
    EVENT_CLEANUP_DAYS: int = 90

    # Locale for customer-facing messages
    DEFAULT_LOCALE: str = "en"
    SUPPORTED_LOCALES: tuple[str, ...] = ("en", "es")


def get_loyaltypass_settings() -> LoyaltyPassSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "LOYALTYPASS", {})
    return LoyaltyPassSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_loyaltypass_settings(), name)


loyaltypass_settings = _LazySettings()
