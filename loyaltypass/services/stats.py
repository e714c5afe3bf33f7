"""Stats projection: derived reward progress for a user (no I/O)."""

from dataclasses import asdict, dataclass
from datetime import datetime

from loyaltypass.conf import loyaltypass_settings


@dataclass(frozen=True)
class UserStats:
    """Read-only view of a user plus reward progress."""

    id: int
    first_name: str
    last_name: str
    phone_number: str
    total_visits: int
    current_reward_points: int
    pass_serial_number: str | None
    created_at: datetime
    updated_at: datetime
    is_eligible_for_reward: bool
    visits_until_reward: int

    def as_dict(self) -> dict:
        return asdict(self)


def project_stats(user, visits_per_reward: int | None = None) -> UserStats:
    """
    Derive reward progress from the user's counters.

    is_eligible_for_reward is the counter rule (points >= cycle length).
    Accruals reset points on the completing visit, so for a persisted user
    it is normally False and visits_until_reward is in [1, cycle length].
    The ledger-based flag lives in UserService.get_with_stats().
    """
    target = visits_per_reward or loyaltypass_settings.VISITS_PER_REWARD
    points = user.current_reward_points

    return UserStats(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        phone_number=user.phone_number,
        total_visits=user.total_visits,
        current_reward_points=points,
        pass_serial_number=user.pass_serial_number,
        created_at=user.created_at,
        updated_at=user.updated_at,
        is_eligible_for_reward=points >= target,
        visits_until_reward=max(0, target - points),
    )
