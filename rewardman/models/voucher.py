"""Voucher model - a concrete, diner-owned redeemable instance."""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class VoucherStatus(models.TextChoices):
    ISSUED = "issued", _("Issued")
    REDEEMED = "redeemed", _("Redeemed")
    EXPIRED = "expired", _("Expired")


class Voucher(models.Model):
    """
    Voucher issued to a diner by spending credits.

    Lifecycle: issued → redeemed (terminal) or expired (terminal, by expiry_date).
    Presentation codes are ephemeral and live on the Diner; code stays empty
    until redemption, when it records the presentation code that consumed it.
    """

    diner = models.ForeignKey(
        "rewardman.Diner",
        on_delete=models.CASCADE,
        related_name="vouchers",
        verbose_name=_("diner"),
    )
    merchant = models.ForeignKey(
        "rewardman.Merchant",
        on_delete=models.CASCADE,
        related_name="vouchers",
        verbose_name=_("merchant"),
    )
    branch = models.ForeignKey(
        "rewardman.Branch",
        on_delete=models.SET_NULL,
        related_name="issued_vouchers",
        null=True,
        blank=True,
        verbose_name=_("issued at branch"),
    )
    voucher_type = models.ForeignKey(
        "rewardman.VoucherType",
        on_delete=models.SET_NULL,
        related_name="vouchers",
        null=True,
        blank=True,
        verbose_name=_("voucher type"),
    )

    title = models.CharField(_("title"), max_length=200)
    code = models.CharField(
        _("redemption code"),
        max_length=16,
        null=True,
        blank=True,
        db_index=True,
        help_text=_("Presentation code that redeemed this voucher"),
    )
    expiry_date = models.DateTimeField(_("expires at"), db_index=True)

    # Redemption
    is_redeemed = models.BooleanField(_("redeemed"), default=False, db_index=True)
    redeemed_at = models.DateTimeField(_("redeemed at"), null=True, blank=True)
    bill_id = models.CharField(_("bill ID"), max_length=100, blank=True, db_index=True)
    redeemed_branch = models.ForeignKey(
        "rewardman.Branch",
        on_delete=models.SET_NULL,
        related_name="redeemed_vouchers",
        null=True,
        blank=True,
        verbose_name=_("redeemed at branch"),
    )

    generated_at = models.DateTimeField(_("generated at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("voucher")
        verbose_name_plural = _("vouchers")
        ordering = ["-generated_at"]
        indexes = [
            models.Index(fields=["diner", "-generated_at"], name="rewardman_vch_diner_idx"),
            models.Index(fields=["merchant", "bill_id"], name="rewardman_vch_bill_idx"),
        ]

    def __str__(self):
        return f"{self.title} - {self.diner.code} [{self.status}]"

    @property
    def is_expired(self) -> bool:
        return self.expiry_date < timezone.now()

    @property
    def status(self) -> str:
        if self.is_redeemed:
            return VoucherStatus.REDEEMED
        if self.is_expired:
            return VoucherStatus.EXPIRED
        return VoucherStatus.ISSUED
