"""Loyaltypass protocols."""

from loyaltypass.protocols.passes import (
    AdapterResult,
    NotificationDispatcher,
    PassCreationRequest,
    PassCreationResult,
    PassProvider,
    PassUpdateRequest,
    RewardNotificationRequest,
)

__all__ = [
    # Wallet pass
    "PassProvider",
    "PassCreationRequest",
    "PassCreationResult",
    "PassUpdateRequest",
    # Notifications
    "NotificationDispatcher",
    "RewardNotificationRequest",
    "AdapterResult",
]
