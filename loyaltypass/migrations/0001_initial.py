# Initial migration for loyalty users, visit and reward ledgers, processed events

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LoyaltyUser",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("first_name", models.CharField(max_length=100, verbose_name="first name")),
                ("last_name", models.CharField(max_length=100, verbose_name="last name")),
                (
                    "phone_number",
                    models.CharField(
                        help_text="E.164 format (+14155552671)",
                        max_length=20,
                        unique=True,
                        verbose_name="phone number",
                    ),
                ),
                (
                    "total_visits",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Lifetime visits (never decreases)",
                        verbose_name="total visits",
                    ),
                ),
                (
                    "current_reward_points",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Visits in the current reward cycle",
                        verbose_name="current reward points",
                    ),
                ),
                (
                    "pass_serial_number",
                    models.CharField(
                        blank=True,
                        max_length=100,
                        null=True,
                        unique=True,
                        verbose_name="pass serial number",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "loyalty user",
                "verbose_name_plural": "loyalty users",
                "db_table": "loyaltypass_user",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ProcessedEvent",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "nonce",
                    models.CharField(db_index=True, max_length=255, unique=True, verbose_name="nonce"),
                ),
                ("provider", models.CharField(db_index=True, max_length=50, verbose_name="provider")),
                ("processed_at", models.DateTimeField(auto_now_add=True, verbose_name="processed at")),
            ],
            options={
                "verbose_name": "processed event",
                "verbose_name_plural": "processed events",
                "db_table": "loyaltypass_processed_event",
                "indexes": [
                    models.Index(fields=["provider", "processed_at"], name="lp_event_provider_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Visit",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("pass_serial_number", models.CharField(max_length=100, verbose_name="pass serial number")),
                (
                    "visited_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        help_text="Scan time reported by the provider, or insertion time",
                        verbose_name="visited at",
                    ),
                ),
                (
                    "reward_points_earned",
                    models.PositiveSmallIntegerField(default=1, verbose_name="points earned"),
                ),
                (
                    "is_reward_visit",
                    models.BooleanField(
                        default=False,
                        help_text="This visit completed a reward cycle",
                        verbose_name="reward visit",
                    ),
                ),
                ("location", models.CharField(blank=True, max_length=200, verbose_name="location")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="visits",
                        to="loyaltypass.loyaltyuser",
                        verbose_name="user",
                    ),
                ),
            ],
            options={
                "verbose_name": "visit",
                "verbose_name_plural": "visits",
                "db_table": "loyaltypass_visit",
                "ordering": ["-visited_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "-visited_at"], name="lp_visit_user_visited_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RewardNotification",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "notification_sent_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        verbose_name="sent at",
                    ),
                ),
                ("reward_claimed", models.BooleanField(default=False, verbose_name="claimed")),
                (
                    "reward_claimed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="claimed at"),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reward_notifications",
                        to="loyaltypass.loyaltyuser",
                        verbose_name="user",
                    ),
                ),
            ],
            options={
                "verbose_name": "reward notification",
                "verbose_name_plural": "reward notifications",
                "db_table": "loyaltypass_reward_notification",
                "ordering": ["-notification_sent_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "reward_claimed"], name="lp_notif_user_claimed_idx"),
                ],
            },
        ),
    ]
