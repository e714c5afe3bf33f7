"""Pytest fixtures for Loyaltypass tests."""

import pytest

from loyaltypass.models import LoyaltyUser


@pytest.fixture
def user(db):
    """Registered user holding a pass, no visits yet."""
    return LoyaltyUser.objects.create(
        first_name="Ana",
        last_name="Lopez",
        phone_number="+14155552671",
        pass_serial_number="PASS-TEST-001",
    )


@pytest.fixture
def user_without_pass(db):
    """Registered user whose pass has not been issued yet."""
    return LoyaltyUser.objects.create(
        first_name="Carlos",
        last_name="Ruiz",
        phone_number="+34612345678",
    )


@pytest.fixture
def other_user(db):
    return LoyaltyUser.objects.create(
        first_name="Beth",
        last_name="Moore",
        phone_number="+14155552672",
        pass_serial_number="PASS-TEST-002",
    )


@pytest.fixture
def user_one_visit_away(db):
    """User four visits into a cycle (ninth lifetime visit)."""
    return LoyaltyUser.objects.create(
        first_name="Dana",
        last_name="Kim",
        phone_number="+14155552673",
        pass_serial_number="PASS-TEST-003",
        total_visits=9,
        current_reward_points=4,
    )
