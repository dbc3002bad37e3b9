"""Ledger service - records visits and keeps balances."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.db import transaction

from rewardman.exceptions import ValidationError
from rewardman.gates import Gates
from rewardman.models import Balance, LoyaltyTransaction, Voucher
from rewardman.services import directory
from rewardman.services.accrual import CreditsEarned, accrue, points_for_amount
from rewardman.signals import transaction_recorded

logger = logging.getLogger(__name__)


@dataclass
class TransactionResult:
    """Outcome of recording one transaction."""

    transaction: LoyaltyTransaction
    balance: Balance
    credits_earned: CreditsEarned
    vouchers: list[Voucher] = field(default_factory=list)


def _parse_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("INVALID_AMOUNT", amount=str(amount))
    if not value.is_finite() or value <= 0:
        raise ValidationError("INVALID_AMOUNT", amount=str(amount))
    return value


class LedgerService:
    """
    Service for the loyalty ledger.

    Uses @classmethod for extensibility (consistent with other services).
    All balance mutations use transaction.atomic() + select_for_update().
    """

    @classmethod
    def record_transaction(
        cls,
        diner_code: str,
        merchant_code: str,
        amount,
        bill_id: str = "",
        branch_code: str | None = None,
    ) -> TransactionResult:
        """
        Record a paid bill: award points, count the visit, convert progress to credits.

        Args:
            diner_code: Diner code
            merchant_code: Merchant code
            amount: Bill amount (Decimal, int or numeric string), must be > 0
            bill_id: Merchant's bill/invoice reference
            branch_code: Branch code (mandatory for branch-scoped merchants)

        Returns:
            TransactionResult with the transaction, updated balance, credits
            earned and any vouchers issued automatically

        Raises:
            ValidationError: Invalid amount or missing branch
            NotFound: Unknown merchant, diner or branch
        """
        value = _parse_amount(amount)
        merchant = directory.get_merchant(merchant_code)
        diner = directory.get_diner(diner_code)
        branch = directory.get_branch(merchant, branch_code)

        Gates.loyalty_scope(merchant, branch)

        points = points_for_amount(value, merchant.points_per_currency)
        vouchers: list[Voucher] = []

        with transaction.atomic():
            balance = cls._get_balance_for_update(diner, merchant, branch)
            credits = accrue(balance, merchant, points)
            balance.save()

            tx = LoyaltyTransaction.objects.create(
                diner=diner,
                merchant=merchant,
                branch=branch,
                amount=value.quantize(Decimal("0.01")),
                points_earned=points,
                bill_id=bill_id or "",
            )

            if merchant.auto_issue_vouchers and credits.total:
                from rewardman.services.issuer import IssuerService

                vouchers = IssuerService.auto_issue(balance, credits, branch=branch)

        logger.info(
            "Transaction recorded: diner=%s merchant=%s amount=%s points=%d credits=%d+%d",
            diner.code,
            merchant.code,
            value,
            points,
            credits.points,
            credits.visits,
        )

        transaction_recorded.send(
            sender=LoyaltyTransaction,
            transaction=tx,
            balance=balance,
            credits_earned=credits,
        )

        return TransactionResult(
            transaction=tx,
            balance=balance,
            credits_earned=credits,
            vouchers=vouchers,
        )

    # ======================================================================
    # Read accessors
    # ======================================================================

    @classmethod
    def get_balances(cls, diner_code: str) -> list[Balance]:
        """Get every balance of a diner."""
        return list(
            Balance.objects.select_related("merchant", "branch")
            .filter(diner__code=diner_code, diner__is_active=True)
            .order_by("merchant__name", "branch__name")
        )

    @classmethod
    def get_balance(
        cls,
        diner_code: str,
        merchant_code: str,
        branch_code: str | None = None,
    ) -> Balance | None:
        """Get one balance, or None if the diner has not visited yet."""
        merchant = directory.get_merchant(merchant_code)
        branch = directory.get_branch(merchant, branch_code)
        return (
            Balance.objects.select_related("merchant", "branch")
            .filter(
                diner__code=diner_code,
                merchant=merchant,
                branch=directory.scoped_branch(merchant, branch),
            )
            .first()
        )

    @classmethod
    def get_transactions(
        cls,
        diner_code: str,
        merchant_code: str | None = None,
        limit: int = 50,
    ) -> list[LoyaltyTransaction]:
        """Get transaction history for a diner, most recent first."""
        qs = LoyaltyTransaction.objects.select_related("merchant", "branch").filter(
            diner__code=diner_code,
        )
        if merchant_code:
            qs = qs.filter(merchant__code=merchant_code)
        return list(qs[:limit])

    @classmethod
    def _get_balance_for_update(cls, diner, merchant, branch) -> Balance:
        """
        Get or lazily create the balance row, locked for mutation.

        MUST be called inside transaction.atomic().
        """
        balance, _ = Balance.objects.get_or_create(
            diner=diner,
            merchant=merchant,
            branch=directory.scoped_branch(merchant, branch),
        )
        return (
            Balance.objects.select_for_update()
            .select_related("merchant")
            .get(pk=balance.pk)
        )
