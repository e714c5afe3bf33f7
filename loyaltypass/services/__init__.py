"""Loyaltypass services.

- users: UserService (registration, lookup, pass assignment)
- visits: VisitService (visit accrual and reward cycle)
- rewards: RewardService (reward notification ledger)
- stats: project_stats (derived reward progress)
- webhooks: WebhookService (pass provider callbacks)
"""

from loyaltypass.services.rewards import RewardService
from loyaltypass.services.stats import UserStats, project_stats
from loyaltypass.services.users import UserService
from loyaltypass.services.visits import VisitResult, VisitService
from loyaltypass.services.webhooks import ScanResult, WebhookService

__all__ = [
    "UserService",
    "VisitService",
    "VisitResult",
    "RewardService",
    "UserStats",
    "project_stats",
    "WebhookService",
    "ScanResult",
]
