"""VoucherType model - the merchant's voucher catalog."""

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class EarningMode(models.TextChoices):
    """Which credit pool a voucher type draws from."""

    POINTS = "points", _("Points")
    VISITS = "visits", _("Visits")


class RedemptionScope(models.TextChoices):
    ALL_BRANCHES = "all_branches", _("All branches")
    SPECIFIC_BRANCHES = "specific_branches", _("Specific branches")


class VoucherTypeQuerySet(models.QuerySet):
    def active_for(self, merchant):
        return self.filter(merchant=merchant, is_active=True).order_by("created_at", "pk")


class VoucherType(models.Model):
    """
    Template for a class of voucher (e.g. "Free dessert", "R100 off").

    credits_cost credits are taken from the pool matching earning_mode each
    time a voucher of this type is issued.
    """

    merchant = models.ForeignKey(
        "rewardman.Merchant",
        on_delete=models.CASCADE,
        related_name="voucher_types",
        verbose_name=_("merchant"),
    )
    name = models.CharField(_("name"), max_length=200)
    description = models.TextField(_("description"), blank=True)

    earning_mode = models.CharField(
        _("earning mode"),
        max_length=20,
        choices=EarningMode.choices,
        default=EarningMode.POINTS,
    )
    credits_cost = models.PositiveIntegerField(
        _("credits cost"),
        default=1,
        validators=[MinValueValidator(1)],
    )
    validity_days = models.PositiveIntegerField(
        _("validity (days)"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Defaults to the merchant's voucher validity"),
    )

    redemption_scope = models.CharField(
        _("redemption scope"),
        max_length=20,
        choices=RedemptionScope.choices,
        default=RedemptionScope.ALL_BRANCHES,
    )
    redeemable_branches = models.ManyToManyField(
        "rewardman.Branch",
        blank=True,
        related_name="redeemable_voucher_types",
        verbose_name=_("redeemable at"),
        help_text=_("Only used when redemption scope is specific branches"),
    )

    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    objects = VoucherTypeQuerySet.as_manager()

    class Meta:
        verbose_name = _("voucher type")
        verbose_name_plural = _("voucher types")
        ordering = ["merchant", "name"]

    def save(self, *args, **kwargs):
        if self.validity_days is None:
            self.validity_days = self.merchant.voucher_validity_days
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.credits_cost} {self.earning_mode} credit(s))"

    @property
    def is_branch_restricted(self) -> bool:
        return self.redemption_scope == RedemptionScope.SPECIFIC_BRANCHES
