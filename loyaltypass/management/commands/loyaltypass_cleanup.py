"""Management command to cleanup old processed webhook events."""

from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from loyaltypass.conf import loyaltypass_settings
from loyaltypass.models import ProcessedEvent


class Command(BaseCommand):
    help = "Remove processed webhook events older than EVENT_CLEANUP_DAYS"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Override LOYALTYPASS['EVENT_CLEANUP_DAYS']",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report how many events would be deleted without deleting them",
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days is None:
            days = loyaltypass_settings.EVENT_CLEANUP_DAYS

        if options["dry_run"]:
            cutoff = timezone.now() - timedelta(days=days)
            count = ProcessedEvent.objects.filter(processed_at__lt=cutoff).count()
            self.stdout.write(f"{count} processed events older than {days} days.")
            return

        deleted_count, _ = ProcessedEvent.cleanup_old_events(days=days)
        self.stdout.write(
            self.style.SUCCESS(f"Deleted {deleted_count} old processed events.")
        )
