"""Tests for the loyaltypass_cleanup management command."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from loyaltypass.models import ProcessedEvent

pytestmark = pytest.mark.django_db


@pytest.fixture
def events(db):
    for nonce, age in (("evt-old", 120), ("evt-mid", 30), ("evt-new", 0)):
        ProcessedEvent.objects.create(nonce=nonce, provider="pass_scan")
        ProcessedEvent.objects.filter(nonce=nonce).update(
            processed_at=timezone.now() - timedelta(days=age)
        )


def test_cleanup_default_days(events):
    out = StringIO()

    call_command("loyaltypass_cleanup", stdout=out)

    assert "Deleted 1 old processed events." in out.getvalue()
    assert set(ProcessedEvent.objects.values_list("nonce", flat=True)) == {"evt-mid", "evt-new"}


def test_cleanup_days_override(events):
    out = StringIO()

    call_command("loyaltypass_cleanup", days=7, stdout=out)

    assert "Deleted 2 old processed events." in out.getvalue()
    assert list(ProcessedEvent.objects.values_list("nonce", flat=True)) == ["evt-new"]


def test_cleanup_dry_run(events):
    out = StringIO()

    call_command("loyaltypass_cleanup", "--dry-run", "--days", "7", stdout=out)

    assert "2 processed events older than 7 days." in out.getvalue()
    assert ProcessedEvent.objects.count() == 3
