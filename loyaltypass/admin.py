"""Loyaltypass admin."""

from django.contrib import admin
from django.utils.html import format_html

from loyaltypass.conf import loyaltypass_settings
from loyaltypass.models import LoyaltyUser, RewardNotification, Visit
from loyaltypass.services.rewards import RewardService


class VisitInline(admin.TabularInline):
    model = Visit
    extra = 0
    readonly_fields = [
        "pass_serial_number",
        "visited_at",
        "reward_points_earned",
        "is_reward_visit",
        "location",
    ]
    ordering = ["-visited_at"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class RewardNotificationInline(admin.TabularInline):
    model = RewardNotification
    extra = 0
    readonly_fields = ["notification_sent_at", "reward_claimed", "reward_claimed_at"]
    ordering = ["-notification_sent_at"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(LoyaltyUser)
class LoyaltyUserAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "phone_number",
        "total_visits",
        "reward_progress",
        "pass_serial_number",
        "created_at",
    ]
    search_fields = ["first_name", "last_name", "phone_number", "pass_serial_number"]
    # Counters change only through visit accrual
    readonly_fields = ["total_visits", "current_reward_points", "created_at", "updated_at"]
    inlines = [VisitInline, RewardNotificationInline]

    def reward_progress(self, obj):
        target = loyaltypass_settings.VISITS_PER_REWARD
        return format_html(
            "{}/{} ({} to go)",
            obj.current_reward_points,
            target,
            max(0, target - obj.current_reward_points),
        )

    reward_progress.short_description = "Reward progress"

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ["visited_at", "user", "pass_serial_number", "reward_badge", "location"]
    list_filter = ["is_reward_visit"]
    search_fields = ["pass_serial_number", "user__phone_number", "user__first_name"]
    readonly_fields = [
        "user",
        "pass_serial_number",
        "visited_at",
        "reward_points_earned",
        "is_reward_visit",
        "location",
    ]
    date_hierarchy = "visited_at"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def reward_badge(self, obj):
        if obj.is_reward_visit:
            return format_html('<span style="color:green">{}</span>', "reward")
        return ""

    reward_badge.short_description = "Reward"


@admin.register(RewardNotification)
class RewardNotificationAdmin(admin.ModelAdmin):
    list_display = ["notification_sent_at", "user", "reward_claimed", "reward_claimed_at"]
    list_filter = ["reward_claimed"]
    search_fields = ["user__phone_number", "user__first_name", "user__last_name"]
    readonly_fields = ["user", "notification_sent_at", "reward_claimed", "reward_claimed_at"]
    actions = ["mark_claimed"]

    @admin.action(description="Mark selected rewards as claimed")
    def mark_claimed(self, request, queryset):
        count = 0
        for notification in queryset:
            RewardService.claim_reward(notification.pk)
            count += 1
        self.message_user(request, f"{count} reward(s) marked as claimed.")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
