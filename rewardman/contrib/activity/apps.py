"""Activity app config."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ActivityConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rewardman.contrib.activity"
    label = "rewardman_activity"
    verbose_name = _("Merchant Activity")

    def ready(self) -> None:
        from rewardman.contrib.activity import receivers  # noqa: F401
