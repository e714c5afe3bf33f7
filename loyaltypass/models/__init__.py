"""Loyaltypass models."""

from loyaltypass.models.user import LoyaltyUser
from loyaltypass.models.visit import Visit
from loyaltypass.models.reward_notification import RewardNotification
from loyaltypass.models.processed_event import ProcessedEvent

__all__ = [
    "LoyaltyUser",
    # Ledgers (append-only)
    "Visit",
    "RewardNotification",
    # Replay protection
    "ProcessedEvent",
]
