from django.apps import AppConfig


class LoyaltyPassConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "loyaltypass"
    verbose_name = "Loyaltypass - Visit Rewards"
