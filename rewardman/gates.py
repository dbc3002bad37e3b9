"""
Rewardman Gates - Eligibility rules.

R1: LoyaltyScope - Branch-scoped merchants require a branch
R2: CodeFreshness - Presentation code used within its TTL
R3: MerchantOwnership - Voucher belongs to the redeeming merchant
R4: BranchEligibility - Redeeming branch is in the voucher's allow-list
R5: VoucherRedeemable - Voucher not redeemed and not expired
R6: OnboardingTransition - Merchant onboarding moves one step at a time

Each gate raises a RewardmanError subclass on failure and returns a GateResult
on success. check_* variants return a bool instead of raising.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from django.utils import timezone

from rewardman.exceptions import (
    InvalidState,
    RewardmanError,
    ScopeViolation,
    ValidationError,
)


@dataclass
class GateResult:
    """Result of a gate check."""

    passed: bool
    gate_name: str
    message: str = ""


# =============================================================================
# Gates
# =============================================================================


class Gates:
    """Rewardman eligibility gates."""

    # =========================================================================
    # R1: Loyalty Scope
    # =========================================================================

    @classmethod
    def loyalty_scope(cls, merchant, branch=None) -> GateResult:
        """
        R1: Merchants with per-branch loyalty need a branch on every ledger write.

        Raises:
            ValidationError: If the merchant is branch-scoped and branch is None
        """
        if merchant.is_branch_scoped and branch is None:
            raise ValidationError(
                "BRANCH_REQUIRED",
                gate="R1_LoyaltyScope",
                merchant_code=merchant.code,
                merchant_name=merchant.name,
            )
        return GateResult(True, "R1_LoyaltyScope")

    @classmethod
    def check_loyalty_scope(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.loyalty_scope(*args, **kwargs)
            return True
        except RewardmanError:
            return False

    # =========================================================================
    # R2: Code Freshness
    # =========================================================================

    @classmethod
    def code_freshness(
        cls,
        issued_at: datetime | None,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> GateResult:
        """
        R2: A presentation code is valid for ttl after it was issued.

        Raises:
            InvalidState: CODE_EXPIRED if now is past issued_at + ttl
        """
        now = now or timezone.now()
        if issued_at is None or now > issued_at + ttl:
            raise InvalidState(
                "CODE_EXPIRED",
                gate="R2_CodeFreshness",
                issued_at=issued_at.isoformat() if issued_at else None,
            )
        return GateResult(True, "R2_CodeFreshness")

    @classmethod
    def check_code_freshness(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.code_freshness(*args, **kwargs)
            return True
        except RewardmanError:
            return False

    # =========================================================================
    # R3: Merchant Ownership
    # =========================================================================

    @classmethod
    def merchant_ownership(cls, voucher, merchant) -> GateResult:
        """
        R3: A voucher can only be redeemed at the merchant that issued it.

        Raises:
            ScopeViolation: Naming the merchant the voucher belongs to
        """
        if voucher.merchant_id != merchant.pk:
            raise ScopeViolation(
                "VOUCHER_WRONG_MERCHANT",
                gate="R3_MerchantOwnership",
                merchant_code=voucher.merchant.code,
                merchant_name=voucher.merchant.name,
            )
        return GateResult(True, "R3_MerchantOwnership")

    @classmethod
    def check_merchant_ownership(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.merchant_ownership(*args, **kwargs)
            return True
        except RewardmanError:
            return False

    # =========================================================================
    # R4: Branch Eligibility
    # =========================================================================

    @classmethod
    def eligible_branches(cls, voucher) -> list | None:
        """
        Branches where the voucher may be redeemed, or None for anywhere.

        A voucher type restricted to specific branches uses its allow-list.
        Otherwise, merchants with branch voucher scope only accept the voucher
        at the branch that issued it.
        """
        from rewardman.models import LoyaltyScope

        voucher_type = voucher.voucher_type
        if voucher_type is not None and voucher_type.is_branch_restricted:
            return list(voucher_type.redeemable_branches.order_by("name"))
        if voucher.merchant.voucher_scope == LoyaltyScope.BRANCH and voucher.branch_id:
            return [voucher.branch]
        return None

    @classmethod
    def branch_eligibility(cls, voucher, branch=None) -> GateResult:
        """
        R4: Redeeming branch must be in the voucher's allow-list.

        Skipped when no branch is supplied.

        Raises:
            ScopeViolation: Listing the eligible branch names
        """
        if branch is None:
            return GateResult(True, "R4_BranchEligibility", "No branch supplied (skipped)")

        eligible = cls.eligible_branches(voucher)
        if eligible is None:
            return GateResult(True, "R4_BranchEligibility")

        if branch.pk not in {b.pk for b in eligible}:
            names = [b.name for b in eligible]
            raise ScopeViolation(
                "BRANCH_NOT_ELIGIBLE",
                gate="R4_BranchEligibility",
                branch=branch.name,
                eligible_branches=", ".join(names) or "no branches",
                eligible_branch_names=names,
            )
        return GateResult(True, "R4_BranchEligibility")

    @classmethod
    def check_branch_eligibility(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.branch_eligibility(*args, **kwargs)
            return True
        except RewardmanError:
            return False

    # =========================================================================
    # R5: Voucher Redeemable
    # =========================================================================

    @classmethod
    def voucher_redeemable(cls, voucher, now: datetime | None = None) -> GateResult:
        """
        R5: Voucher is neither redeemed nor past its expiry date.

        Raises:
            InvalidState: VOUCHER_ALREADY_REDEEMED or VOUCHER_EXPIRED
        """
        if voucher.is_redeemed:
            raise InvalidState(
                "VOUCHER_ALREADY_REDEEMED",
                gate="R5_VoucherRedeemable",
                voucher_id=voucher.pk,
                redeemed_at=voucher.redeemed_at.isoformat() if voucher.redeemed_at else None,
            )
        if voucher.expiry_date < (now or timezone.now()):
            raise InvalidState(
                "VOUCHER_EXPIRED",
                gate="R5_VoucherRedeemable",
                voucher_id=voucher.pk,
                expiry_date=voucher.expiry_date.isoformat(),
            )
        return GateResult(True, "R5_VoucherRedeemable")

    @classmethod
    def check_voucher_redeemable(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.voucher_redeemable(*args, **kwargs)
            return True
        except RewardmanError:
            return False

    # =========================================================================
    # R6: Onboarding Transition
    # =========================================================================

    ONBOARDING_TRANSITIONS = {
        "submitted": "draft",
        "active": "submitted",
    }

    @classmethod
    def onboarding_transition(cls, merchant, target: str) -> GateResult:
        """
        R6: draft → submitted → active, one step at a time.

        Raises:
            InvalidState: If the merchant is not in the required prior state
        """
        expected = cls.ONBOARDING_TRANSITIONS.get(target)
        if expected is None or merchant.onboarding_status != expected:
            raise InvalidState(
                "ONBOARDING_STATE",
                gate="R6_OnboardingTransition",
                status=merchant.onboarding_status,
                expected=expected,
                target=target,
            )
        return GateResult(True, "R6_OnboardingTransition")

    @classmethod
    def check_onboarding_transition(cls, *args, **kwargs) -> bool:
        """Check without raising (returns bool)."""
        try:
            cls.onboarding_transition(*args, **kwargs)
            return True
        except RewardmanError:
            return False
