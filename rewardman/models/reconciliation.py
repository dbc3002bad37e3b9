"""Reconciliation models - one batch per uploaded settlement export."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class BatchStatus(models.TextChoices):
    PROCESSING = "processing", _("Processing")
    COMPLETED = "completed", _("Completed")


class ReconciliationBatch(models.Model):
    """A single CSV export matched against redeemed vouchers."""

    merchant = models.ForeignKey(
        "rewardman.Merchant",
        on_delete=models.CASCADE,
        related_name="reconciliation_batches",
        verbose_name=_("merchant"),
    )
    filename = models.CharField(_("filename"), max_length=255)

    total_records = models.IntegerField(_("total records"), default=0)
    matched_records = models.IntegerField(_("matched records"), default=0)
    unmatched_records = models.IntegerField(_("unmatched records"), default=0)

    status = models.CharField(
        _("status"),
        max_length=20,
        choices=BatchStatus.choices,
        default=BatchStatus.PROCESSING,
    )
    uploaded_at = models.DateTimeField(_("uploaded at"), auto_now_add=True, db_index=True)
    processed_at = models.DateTimeField(_("processed at"), null=True, blank=True)

    class Meta:
        verbose_name = _("reconciliation batch")
        verbose_name_plural = _("reconciliation batches")
        ordering = ["-uploaded_at", "-pk"]

    def __str__(self):
        return f"{self.filename}: {self.matched_records}/{self.total_records} matched"


class ReconciliationRecord(models.Model):
    """One row of a reconciliation CSV and its match result."""

    batch = models.ForeignKey(
        ReconciliationBatch,
        on_delete=models.CASCADE,
        related_name="records",
        verbose_name=_("batch"),
    )
    bill_id = models.CharField(_("bill ID"), max_length=100)
    csv_amount = models.CharField(_("CSV amount"), max_length=50, blank=True)
    csv_date = models.CharField(_("CSV date"), max_length=50, blank=True)

    is_matched = models.BooleanField(_("matched"), default=False)
    matched_voucher = models.ForeignKey(
        "rewardman.Voucher",
        on_delete=models.SET_NULL,
        related_name="reconciliation_records",
        null=True,
        blank=True,
        verbose_name=_("matched voucher"),
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        verbose_name = _("reconciliation record")
        verbose_name_plural = _("reconciliation records")
        ordering = ["pk"]

    def __str__(self):
        mark = "✓" if self.is_matched else "✗"
        return f"{mark} {self.bill_id}"
