from django.urls import path

from .views import (
    ClaimRewardView,
    HealthView,
    PassCreatedWebhookView,
    PassScannedWebhookView,
    RecordVisitView,
    UserByPhoneView,
    UserDetailView,
    UserNotificationsView,
    UserRegisterView,
    UserVisitsView,
)

app_name = "loyaltypass"

urlpatterns = [
    path("health/", HealthView.as_view(), name="health"),
    path("users/", UserRegisterView.as_view(), name="user-register"),
    path("users/by-phone/", UserByPhoneView.as_view(), name="user-by-phone"),
    path("users/<int:user_id>/", UserDetailView.as_view(), name="user-detail"),
    path("users/<int:user_id>/visits/", UserVisitsView.as_view(), name="user-visits"),
    path(
        "users/<int:user_id>/notifications/",
        UserNotificationsView.as_view(),
        name="user-notifications",
    ),
    path(
        "notifications/<int:notification_id>/claim/",
        ClaimRewardView.as_view(),
        name="claim-reward",
    ),
    path("visits/", RecordVisitView.as_view(), name="record-visit"),
    path("webhooks/pass-created/", PassCreatedWebhookView.as_view(), name="webhook-pass-created"),
    path("webhooks/pass-scanned/", PassScannedWebhookView.as_view(), name="webhook-pass-scanned"),
]
