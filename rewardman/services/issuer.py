"""Issuer service - turns credits into vouchers."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from rewardman.exceptions import InsufficientCredits, InvalidState, NotFound, ScopeViolation
from rewardman.gates import Gates
from rewardman.models import Balance, EarningMode, Voucher, VoucherType
from rewardman.services import directory
from rewardman.services.accrual import CreditsEarned
from rewardman.signals import voucher_issued

logger = logging.getLogger(__name__)


@dataclass
class CreditRedemptionResult:
    """Voucher issued by spending credits, and the balance after the spend."""

    voucher: Voucher
    balance: Balance


class IssuerService:
    """
    Service for voucher issuance.

    Credit deduction and voucher insert always happen in one atomic block,
    under the balance row lock.
    """

    @classmethod
    def redeem_credit(
        cls,
        diner_code: str,
        merchant_code: str,
        voucher_type_id: int,
        branch_code: str | None = None,
    ) -> CreditRedemptionResult:
        """
        Spend credits on a voucher of the given type.

        Args:
            diner_code: Diner code
            merchant_code: Merchant code
            voucher_type_id: VoucherType primary key
            branch_code: Branch code (mandatory for branch-scoped merchants)

        Returns:
            CreditRedemptionResult with the new voucher and updated balance

        Raises:
            NotFound: Unknown merchant, diner, branch or voucher type
            InvalidState: Voucher type inactive
            ScopeViolation: Voucher type belongs to another merchant
            ValidationError: Branch required but missing
            InsufficientCredits: Pool below credits_cost, or no balance yet
        """
        merchant = directory.get_merchant(merchant_code)
        diner = directory.get_diner(diner_code)

        try:
            voucher_type = VoucherType.objects.get(pk=voucher_type_id)
        except VoucherType.DoesNotExist:
            raise NotFound("VOUCHER_TYPE_NOT_FOUND", voucher_type_id=voucher_type_id)
        if not voucher_type.is_active:
            raise InvalidState("VOUCHER_TYPE_INACTIVE", voucher_type_id=voucher_type.pk)
        if voucher_type.merchant_id != merchant.pk:
            raise ScopeViolation("VOUCHER_TYPE_WRONG_MERCHANT", voucher_type_id=voucher_type.pk)

        branch = directory.get_branch(merchant, branch_code)
        Gates.loyalty_scope(merchant, branch)

        with transaction.atomic():
            try:
                balance = (
                    Balance.objects.select_for_update()
                    .select_related("merchant")
                    .get(
                        diner=diner,
                        merchant=merchant,
                        branch=directory.scoped_branch(merchant, branch),
                    )
                )
            except Balance.DoesNotExist:
                raise InsufficientCredits(
                    "INSUFFICIENT_CREDITS",
                    required=voucher_type.credits_cost,
                    available=0,
                    earning_mode=voucher_type.earning_mode,
                )

            available = balance.credits_for(voucher_type.earning_mode)
            if available < voucher_type.credits_cost:
                raise InsufficientCredits(
                    "INSUFFICIENT_CREDITS",
                    required=voucher_type.credits_cost,
                    available=available,
                    earning_mode=voucher_type.earning_mode,
                )

            voucher = cls._issue(balance, voucher_type, branch)
            balance.save()

        cls._notify(voucher, balance, automatic=False)
        return CreditRedemptionResult(voucher=voucher, balance=balance)

    @classmethod
    def auto_issue(
        cls,
        balance: Balance,
        credits_earned: CreditsEarned,
        branch=None,
    ) -> list[Voucher]:
        """
        Issue vouchers for every pool that just grew.

        Types are visited in catalog order; each issues while the pool covers
        its cost. MUST be called inside transaction.atomic() with balance
        already locked. Saves balance when anything was issued.
        """
        issued: list[Voucher] = []
        types = list(VoucherType.objects.active_for(balance.merchant))

        for mode in (EarningMode.POINTS, EarningMode.VISITS):
            if not credits_earned.for_mode(mode):
                continue
            for voucher_type in types:
                if voucher_type.earning_mode != mode or voucher_type.credits_cost <= 0:
                    continue
                while balance.credits_for(mode) >= voucher_type.credits_cost:
                    issued.append(cls._issue(balance, voucher_type, branch))

        if issued:
            balance.save()
        for voucher in issued:
            cls._notify(voucher, balance, automatic=True)
        return issued

    # ======================================================================
    # Read accessors
    # ======================================================================

    @classmethod
    def get_diner_vouchers(
        cls,
        diner_code: str,
        merchant_code: str | None = None,
        only_valid: bool = False,
    ) -> list[Voucher]:
        """Get a diner's vouchers, newest first. only_valid drops redeemed and expired."""
        qs = Voucher.objects.select_related("merchant", "voucher_type").filter(
            diner__code=diner_code,
        )
        if merchant_code:
            qs = qs.filter(merchant__code=merchant_code)
        if only_valid:
            qs = qs.filter(is_redeemed=False, expiry_date__gte=timezone.now())
        return list(qs)

    @classmethod
    def get_active_voucher_types(cls, merchant_code: str) -> list[VoucherType]:
        """Get the active voucher catalog of a merchant."""
        merchant = directory.get_merchant(merchant_code)
        return list(VoucherType.objects.active_for(merchant))

    @classmethod
    def get_affordable_voucher_types(cls, balance: Balance) -> list[VoucherType]:
        """Active types the balance can currently pay for."""
        return [
            vt
            for vt in VoucherType.objects.active_for(balance.merchant).filter(
                Q(earning_mode=EarningMode.POINTS, credits_cost__lte=balance.points_credits)
                | Q(earning_mode=EarningMode.VISITS, credits_cost__lte=balance.visit_credits)
            )
        ]

    # ======================================================================
    # Internals
    # ======================================================================

    @classmethod
    def _issue(cls, balance: Balance, voucher_type: VoucherType, branch=None) -> Voucher:
        """Deduct one voucher's cost and create it. Caller holds the lock and saves."""
        balance.spend_credits(voucher_type.earning_mode, voucher_type.credits_cost)
        balance.total_vouchers_generated += 1
        return Voucher.objects.create(
            diner_id=balance.diner_id,
            merchant_id=balance.merchant_id,
            branch=branch,
            voucher_type=voucher_type,
            title=voucher_type.name,
            expiry_date=timezone.now() + timedelta(days=voucher_type.validity_days),
        )

    @classmethod
    def _notify(cls, voucher: Voucher, balance: Balance, automatic: bool) -> None:
        logger.info(
            "Voucher issued: id=%s diner=%s merchant=%s type=%s automatic=%s",
            voucher.pk,
            balance.diner_id,
            balance.merchant_id,
            voucher.voucher_type_id,
            automatic,
        )
        voucher_issued.send(sender=Voucher, voucher=voucher, balance=balance, automatic=automatic)
