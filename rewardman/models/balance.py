"""Balance model - the mutable ledger row per (diner, merchant, branch-or-null)."""

from django.db import models
from django.utils.translation import gettext_lazy as _

from rewardman.models.voucher_type import EarningMode


class Balance(models.Model):
    """
    A diner's progress and credits at a merchant.

    Exactly one row per (diner, merchant, branch). branch is null when the
    merchant keeps organization-wide balances.

    Two independent credit pools are kept:
    - points_credits: earned each time current_points crosses points_threshold
    - visit_credits: earned each time current_visits crosses visit_threshold

    Only LedgerService and IssuerService mutate balances, always under
    select_for_update() inside transaction.atomic().
    """

    diner = models.ForeignKey(
        "rewardman.Diner",
        on_delete=models.CASCADE,
        related_name="balances",
        verbose_name=_("diner"),
    )
    merchant = models.ForeignKey(
        "rewardman.Merchant",
        on_delete=models.CASCADE,
        related_name="balances",
        verbose_name=_("merchant"),
    )
    branch = models.ForeignKey(
        "rewardman.Branch",
        on_delete=models.PROTECT,
        related_name="balances",
        null=True,
        blank=True,
        verbose_name=_("branch"),
    )

    # Points progress
    current_points = models.IntegerField(_("current points"), default=0)
    total_points_earned = models.IntegerField(
        _("total points earned"),
        default=0,
        help_text=_("Lifetime points (never decreases)"),
    )

    # Visits progress
    current_visits = models.IntegerField(_("current visits"), default=0)
    total_visits = models.IntegerField(_("total visits"), default=0)

    # Credit pools
    points_credits = models.IntegerField(_("points credits"), default=0)
    visit_credits = models.IntegerField(_("visit credits"), default=0)
    total_credits_earned = models.IntegerField(_("total credits earned"), default=0)
    total_vouchers_generated = models.IntegerField(_("vouchers generated"), default=0)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("balance")
        verbose_name_plural = _("balances")
        constraints = [
            models.UniqueConstraint(
                fields=["diner", "merchant", "branch"],
                condition=models.Q(branch__isnull=False),
                name="rewardman_unique_branch_balance",
            ),
            models.UniqueConstraint(
                fields=["diner", "merchant"],
                condition=models.Q(branch__isnull=True),
                name="rewardman_unique_org_balance",
            ),
        ]

    def __str__(self):
        scope = self.branch.name if self.branch_id else "org"
        return (
            f"{self.diner.code} @ {self.merchant.code}/{scope}: "
            f"{self.current_points}pts | {self.points_credits}+{self.visit_credits} credits"
        )

    @property
    def available_credits(self) -> int:
        return self.points_credits + self.visit_credits

    @property
    def points_until_next_credit(self) -> int:
        return max(0, self.merchant.points_threshold - self.current_points)

    @property
    def visits_until_next_credit(self) -> int:
        return max(0, self.merchant.visit_threshold - self.current_visits)

    def credits_for(self, mode: str) -> int:
        """Credit pool a voucher type with this earning mode draws from."""
        if mode == EarningMode.POINTS:
            return self.points_credits
        if mode == EarningMode.VISITS:
            return self.visit_credits
        raise ValueError(f"Unknown earning mode: {mode!r}")

    def spend_credits(self, mode: str, amount: int) -> None:
        """Deduct from one pool. Caller checks the pool covers amount and saves."""
        if mode == EarningMode.POINTS:
            self.points_credits -= amount
        elif mode == EarningMode.VISITS:
            self.visit_credits -= amount
        else:
            raise ValueError(f"Unknown earning mode: {mode!r}")
