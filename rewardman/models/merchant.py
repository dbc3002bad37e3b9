"""Merchant and Branch models (the merchant directory).

A Merchant carries its own loyalty rules: how much spend earns a point, how many
points or visits earn a credit, and whether balances and vouchers are kept
organization-wide or per branch. Branches are optional; a merchant with zero
branches is organization-only.
"""

import uuid as uuid_lib

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyScope(models.TextChoices):
    """Whether a balance (or voucher) applies across the organization or to one branch."""

    ORGANIZATION = "organization", _("Organization-wide")
    BRANCH = "branch", _("Per branch")


class OnboardingStatus(models.TextChoices):
    DRAFT = "draft", _("Draft")
    SUBMITTED = "submitted", _("Submitted")
    ACTIVE = "active", _("Active")


class Merchant(models.Model):
    """
    Restaurant (or group of restaurants) running a loyalty program.

    Loyalty settings are changed through MerchantService.update_settings(),
    which validates them as a whole (see services/merchant.py).
    """

    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Unique merchant code (e.g. RST-001)"),
    )
    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)
    name = models.CharField(_("name"), max_length=200)

    # Loyalty rules
    points_per_currency = models.PositiveIntegerField(
        _("points per currency unit"),
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        help_text=_("Points earned per 1 unit of currency spent"),
    )
    points_threshold = models.PositiveIntegerField(
        _("points threshold"),
        default=1000,
        validators=[MinValueValidator(1)],
        help_text=_("Points needed to earn one credit"),
    )
    visit_threshold = models.PositiveIntegerField(
        _("visit threshold"),
        default=10,
        validators=[MinValueValidator(1)],
        help_text=_("Visits needed to earn one credit"),
    )
    voucher_validity_days = models.PositiveIntegerField(
        _("voucher validity (days)"),
        default=30,
        validators=[MinValueValidator(1)],
    )
    loyalty_scope = models.CharField(
        _("loyalty scope"),
        max_length=20,
        choices=LoyaltyScope.choices,
        default=LoyaltyScope.ORGANIZATION,
        help_text=_("Branch scope keeps a separate balance per branch"),
    )
    voucher_scope = models.CharField(
        _("voucher redemption scope"),
        max_length=20,
        choices=LoyaltyScope.choices,
        default=LoyaltyScope.ORGANIZATION,
        help_text=_("Branch scope only lets vouchers be redeemed where they were issued"),
    )
    auto_issue_vouchers = models.BooleanField(
        _("auto-issue vouchers"),
        default=False,
        help_text=_("Convert credits into vouchers as soon as they are earned"),
    )

    # Onboarding
    onboarding_status = models.CharField(
        _("onboarding status"),
        max_length=20,
        choices=OnboardingStatus.choices,
        default=OnboardingStatus.DRAFT,
    )
    registration_number = models.CharField(_("registration number"), max_length=50, blank=True)
    street_address = models.CharField(_("street address"), max_length=200, blank=True)
    city = models.CharField(_("city"), max_length=100, blank=True)
    contact_name = models.CharField(_("contact name"), max_length=100, blank=True)
    contact_email = models.EmailField(_("contact email"), blank=True)
    contact_phone = models.CharField(_("contact phone"), max_length=20, blank=True)
    onboarding_completed_at = models.DateTimeField(_("onboarding completed at"), null=True, blank=True)

    is_active = models.BooleanField(_("active"), default=True, db_index=True)
    metadata = models.JSONField(_("metadata"), default=dict, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("merchant")
        verbose_name_plural = _("merchants")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def is_branch_scoped(self) -> bool:
        return self.loyalty_scope == LoyaltyScope.BRANCH

    @property
    def default_branch(self):
        return self.branches.filter(is_default=True, is_active=True).first()


class Branch(models.Model):
    """A physical location of a Merchant."""

    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name="branches",
        verbose_name=_("merchant"),
    )
    code = models.SlugField(_("code"), max_length=50)
    name = models.CharField(_("name"), max_length=200)
    address = models.CharField(_("address"), max_length=255, blank=True)
    phone = models.CharField(_("phone"), max_length=20, blank=True)

    is_default = models.BooleanField(_("default"), default=False)
    is_active = models.BooleanField(_("active"), default=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        verbose_name = _("branch")
        verbose_name_plural = _("branches")
        ordering = ["merchant", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["merchant", "code"],
                name="rewardman_unique_branch_code",
            ),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.is_default:
            Branch.objects.filter(merchant_id=self.merchant_id, is_default=True).exclude(
                pk=self.pk
            ).update(is_default=False)
        super().save(*args, **kwargs)
