"""Outbound collaborator backends, resolved from LOYALTYPASS settings."""

from django.utils.module_loading import import_string

from loyaltypass.conf import loyaltypass_settings
from loyaltypass.protocols.passes import NotificationDispatcher, PassProvider


def get_pass_provider() -> PassProvider:
    """Get configured PassProvider."""
    backend_class = import_string(loyaltypass_settings.PASS_PROVIDER_BACKEND)
    return backend_class()


def get_notification_dispatcher() -> NotificationDispatcher:
    """Get configured NotificationDispatcher."""
    backend_class = import_string(loyaltypass_settings.NOTIFICATION_BACKEND)
    return backend_class()
