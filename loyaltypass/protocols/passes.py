"""Wallet pass and notification protocols (outbound collaborators)."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class AdapterResult:
    """Outcome of an outbound call."""

    success: bool
    message: str


@dataclass(frozen=True)
class PassCreationRequest:
    user_id: int
    first_name: str
    last_name: str
    phone_number: str


@dataclass(frozen=True)
class PassCreationResult:
    success: bool
    message: str
    # Some providers assign the serial synchronously; others report it via webhook.
    pass_serial_number: str | None = None


@dataclass(frozen=True)
class PassUpdateRequest:
    pass_serial_number: str
    reward_points: int
    total_visits: int


@dataclass(frozen=True)
class RewardNotificationRequest:
    user_id: int
    first_name: str
    last_name: str
    phone_number: str
    total_visits: int
    locale: str = "en"


@runtime_checkable
class PassProvider(Protocol):
    """
    Protocol for the wallet pass service (Apple Wallet / Google Wallet).

    Configuration in settings.py:
        LOYALTYPASS = {
            "PASS_PROVIDER_BACKEND": "loyaltypass.adapters.stub.StubPassProvider",
        }
    """

    def create_pass(self, request: PassCreationRequest) -> PassCreationResult:
        """Request a new pass. The serial may arrive later via webhook."""
        ...

    def update_pass(self, request: PassUpdateRequest) -> AdapterResult:
        """Push new counters to an issued pass."""
        ...


@runtime_checkable
class NotificationDispatcher(Protocol):
    """
    Protocol for "you earned a reward" alerts (SMS / push).

    Implementations are responsible for writing the RewardNotification
    ledger row (see RewardService.create_notification).
    """

    def send_reward_notification(self, request: RewardNotificationRequest) -> AdapterResult:
        ...
