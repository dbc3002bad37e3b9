"""ActivityLog model - audit trail per merchant."""

from datetime import timedelta

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class ActivityAction(models.TextChoices):
    VOUCHER_REDEEMED = "voucher_redeemed", _("Voucher redeemed")
    CREDIT_REDEEMED = "credit_redeemed", _("Credit redeemed")
    SETTINGS_UPDATED = "settings_updated", _("Settings updated")
    RECONCILIATION_UPLOADED = "reconciliation_uploaded", _("Reconciliation uploaded")


class ActivityLog(models.Model):
    """
    Single entry in a merchant's activity trail.

    target_type/target_id point at the affected object (voucher:12,
    batch:3) without a foreign key, so entries outlive what they describe.
    """

    merchant = models.ForeignKey(
        "rewardman.Merchant",
        on_delete=models.CASCADE,
        related_name="activity_logs",
        verbose_name=_("merchant"),
    )
    action = models.CharField(
        _("action"),
        max_length=40,
        choices=ActivityAction.choices,
        db_index=True,
    )
    target_type = models.CharField(_("target type"), max_length=50, blank=True)
    target_id = models.CharField(_("target id"), max_length=50, blank=True)
    details = models.JSONField(_("details"), default=dict, blank=True)
    actor = models.CharField(
        _("actor"),
        max_length=100,
        blank=True,
        help_text=_("User or system that performed the action"),
    )
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("activity log")
        verbose_name_plural = _("activity logs")
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(fields=["merchant", "-created_at"], name="rewardman_act_merchant_idx"),
        ]

    def __str__(self):
        return f"[{self.action}] {self.target_type}:{self.target_id}"

    @classmethod
    def cleanup_old_entries(cls, days: int | None = None):
        """Remove entries older than N days."""
        if days is None:
            from rewardman.conf import rewardman_settings
            days = rewardman_settings.ACTIVITY_RETENTION_DAYS
        cutoff = timezone.now() - timedelta(days=days)
        return cls.objects.filter(created_at__lt=cutoff).delete()
