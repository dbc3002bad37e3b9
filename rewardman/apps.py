from django.apps import AppConfig


class RewardmanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rewardman"
    verbose_name = "Rewardman - Loyalty & Vouchers"
