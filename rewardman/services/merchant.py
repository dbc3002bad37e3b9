"""Merchant service - loyalty settings and onboarding."""

import logging
from dataclasses import asdict, dataclass

from django.db import transaction
from django.utils import timezone

from rewardman.exceptions import ValidationError
from rewardman.gates import Gates
from rewardman.models import LoyaltyScope, Merchant, OnboardingStatus
from rewardman.services import directory
from rewardman.signals import merchant_settings_updated

logger = logging.getLogger(__name__)


# (field, min, max)
_LIMITS = [
    ("voucher_validity_days", 1, 365),
    ("points_per_currency", 1, 100),
    ("points_threshold", 100, 10000),
    ("visit_threshold", 1, 100),
]

_ONBOARDING_FIELDS = [
    "registration_number",
    "street_address",
    "city",
    "contact_name",
    "contact_email",
    "contact_phone",
]


@dataclass
class MerchantSettings:
    """
    Loyalty settings patch. Fields left as None are not changed.

    Usage:
        MerchantService.update_settings("RST-001", MerchantSettings(points_threshold=500))
    """

    points_per_currency: int | None = None
    points_threshold: int | None = None
    visit_threshold: int | None = None
    voucher_validity_days: int | None = None
    loyalty_scope: str | None = None
    voucher_scope: str | None = None
    auto_issue_vouchers: bool | None = None

    def changes(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        errors = []
        for name, low, high in _LIMITS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"{name} must be an integer")
            elif not low <= value <= high:
                errors.append(f"{name} must be between {low} and {high}")

        for name in ("loyalty_scope", "voucher_scope"):
            value = getattr(self, name)
            if value is not None and value not in LoyaltyScope.values:
                errors.append(f"{name} must be one of: {', '.join(LoyaltyScope.values)}")

        if self.auto_issue_vouchers is not None and not isinstance(self.auto_issue_vouchers, bool):
            errors.append("auto_issue_vouchers must be true or false")
        return errors


class MerchantService:
    """Service for merchant configuration."""

    @classmethod
    def update_settings(cls, merchant_code: str, settings: MerchantSettings) -> Merchant:
        """
        Apply a settings patch.

        Raises:
            NotFound: Unknown merchant
            ValidationError: INVALID_SETTINGS listing every invalid field
        """
        errors = settings.validate()
        if errors:
            raise ValidationError(
                "INVALID_SETTINGS",
                message=f"Invalid settings: {'; '.join(errors)}",
                errors=errors,
            )

        changes = settings.changes()
        with transaction.atomic():
            merchant = Merchant.objects.select_for_update().get(
                pk=directory.get_merchant(merchant_code).pk
            )
            for name, value in changes.items():
                setattr(merchant, name, value)
            if changes:
                merchant.save(update_fields=[*changes, "updated_at"])

        logger.info("Merchant settings updated: merchant=%s fields=%s", merchant.code, sorted(changes))
        merchant_settings_updated.send(sender=Merchant, merchant=merchant, changes=changes)
        return merchant

    @classmethod
    def get_settings(cls, merchant_code: str) -> MerchantSettings:
        merchant = directory.get_merchant(merchant_code)
        return MerchantSettings(
            points_per_currency=merchant.points_per_currency,
            points_threshold=merchant.points_threshold,
            visit_threshold=merchant.visit_threshold,
            voucher_validity_days=merchant.voucher_validity_days,
            loyalty_scope=merchant.loyalty_scope,
            voucher_scope=merchant.voucher_scope,
            auto_issue_vouchers=merchant.auto_issue_vouchers,
        )

    @classmethod
    def submit_onboarding(cls, merchant_code: str) -> Merchant:
        """
        draft → submitted.

        Raises:
            InvalidState: Merchant is not in draft
            ValidationError: ONBOARDING_INCOMPLETE with the missing fields
        """
        merchant = directory.get_merchant(merchant_code)
        Gates.onboarding_transition(merchant, OnboardingStatus.SUBMITTED)

        missing = [name for name in _ONBOARDING_FIELDS if not getattr(merchant, name)]
        if missing:
            raise ValidationError(
                "ONBOARDING_INCOMPLETE",
                message=f"Onboarding details are incomplete: {', '.join(missing)}",
                missing=missing,
            )

        merchant.onboarding_status = OnboardingStatus.SUBMITTED
        merchant.save(update_fields=["onboarding_status", "updated_at"])
        logger.info("Onboarding submitted: merchant=%s", merchant.code)
        return merchant

    @classmethod
    def activate(cls, merchant_code: str) -> Merchant:
        """
        submitted → active.

        Raises:
            InvalidState: Merchant is not in submitted
        """
        merchant = directory.get_merchant(merchant_code)
        Gates.onboarding_transition(merchant, OnboardingStatus.ACTIVE)

        merchant.onboarding_status = OnboardingStatus.ACTIVE
        merchant.onboarding_completed_at = timezone.now()
        merchant.save(update_fields=["onboarding_status", "onboarding_completed_at", "updated_at"])
        logger.info("Onboarding completed: merchant=%s", merchant.code)
        return merchant
