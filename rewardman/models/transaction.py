"""LoyaltyTransaction model - append-only spend/visit events."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyTransaction(models.Model):
    """
    Immutable record of a spend/visit reported by a merchant.

    Transactions are append-only - never modified or deleted. bill_id is the
    POS bill/invoice identifier used later by reconciliation.
    """

    diner = models.ForeignKey(
        "rewardman.Diner",
        on_delete=models.CASCADE,
        related_name="transactions",
        verbose_name=_("diner"),
    )
    merchant = models.ForeignKey(
        "rewardman.Merchant",
        on_delete=models.CASCADE,
        related_name="transactions",
        verbose_name=_("merchant"),
    )
    branch = models.ForeignKey(
        "rewardman.Branch",
        on_delete=models.SET_NULL,
        related_name="transactions",
        null=True,
        blank=True,
        verbose_name=_("branch"),
    )

    amount = models.DecimalField(_("amount"), max_digits=10, decimal_places=2)
    points_earned = models.IntegerField(_("points earned"))
    bill_id = models.CharField(
        _("bill ID"),
        max_length=100,
        blank=True,
        db_index=True,
        help_text=_("Bill/invoice ID from the POS"),
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("transaction")
        verbose_name_plural = _("transactions")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["diner", "-created_at"], name="rewardman_tx_diner_idx"),
            models.Index(fields=["merchant", "bill_id"], name="rewardman_tx_bill_idx"),
        ]

    def __str__(self):
        return f"{self.amount} → +{self.points_earned}pts ({self.merchant.code})"
