"""
Loyaltypass - visit-based loyalty program with wallet passes.

Usage:
    from loyaltypass import UserService, VisitService, RewardService

    user = UserService.register("Ana", "Lopez", "+1 415 555 2671")
    result = VisitService.record_visit(user.pass_serial_number)
    if result.reward_triggered:
        ...

    # Webhooks (pass provider callbacks)
    from loyaltypass import WebhookService

    WebhookService.handle_pass_scan({"pass_serial_number": "...", "scanned_at": "..."})
"""


def __getattr__(name):
    if name == "UserService":
        from loyaltypass.services.users import UserService

        return UserService
    if name == "VisitService":
        from loyaltypass.services.visits import VisitService

        return VisitService
    if name == "RewardService":
        from loyaltypass.services.rewards import RewardService

        return RewardService
    if name == "WebhookService":
        from loyaltypass.services.webhooks import WebhookService

        return WebhookService
    if name == "LoyaltyPassError":
        from loyaltypass.exceptions import LoyaltyPassError

        return LoyaltyPassError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "UserService",
    "VisitService",
    "RewardService",
    "WebhookService",
    "LoyaltyPassError",
]
__version__ = "0.3.0"
