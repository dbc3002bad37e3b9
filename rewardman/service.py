"""
Rewardman public API.

CORE (lifecycle):
    RewardService.record_transaction(...)  - Award points and visits
    RewardService.redeem_credit(...)       - Spend credits on a voucher
    RewardService.present_voucher(...)     - Get a code to show staff
    RewardService.redeem_by_code(...)      - Consume a code at the till
    RewardService.process_batch(...)       - Reconcile a bill export

CONVENIENCE (read accessors):
    RewardService.balances(diner_code)
    RewardService.vouchers(diner_code, ...)
    RewardService.voucher_types(merchant_code)
    RewardService.transactions(diner_code, ...)
    RewardService.batch_details(batch_id, ...)
"""

from rewardman.services.issuer import CreditRedemptionResult, IssuerService
from rewardman.services.ledger import LedgerService, TransactionResult
from rewardman.services.presentation import Presentation, PresentationService
from rewardman.services.reconciliation import ReconciliationResult, ReconciliationService
from rewardman.services.redemption import RedemptionResult, RedemptionService


class RewardService:
    """
    Rewardman public API.

    Uses @classmethod for extensibility. Every method delegates to the
    service that owns the operation.
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def record_transaction(
        cls,
        diner_code: str,
        merchant_code: str,
        amount,
        bill_id: str = "",
        branch_code: str | None = None,
    ) -> TransactionResult:
        return LedgerService.record_transaction(
            diner_code, merchant_code, amount, bill_id=bill_id, branch_code=branch_code
        )

    @classmethod
    def redeem_credit(
        cls,
        diner_code: str,
        merchant_code: str,
        voucher_type_id: int,
        branch_code: str | None = None,
    ) -> CreditRedemptionResult:
        return IssuerService.redeem_credit(
            diner_code, merchant_code, voucher_type_id, branch_code=branch_code
        )

    @classmethod
    def present_voucher(cls, diner_code: str, voucher_id: int) -> Presentation:
        return PresentationService.present_voucher(diner_code, voucher_id)

    @classmethod
    def redeem_by_code(
        cls,
        merchant_code: str,
        code: str,
        bill_id: str = "",
        branch_code: str | None = None,
    ) -> RedemptionResult:
        return RedemptionService.redeem_by_code(
            merchant_code, code, bill_id=bill_id, branch_code=branch_code
        )

    @classmethod
    def process_batch(cls, merchant_code: str, filename: str, csv_text: str) -> ReconciliationResult:
        return ReconciliationService.process_batch(merchant_code, filename, csv_text)

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def balances(cls, diner_code: str):
        return LedgerService.get_balances(diner_code)

    @classmethod
    def balance(cls, diner_code: str, merchant_code: str, branch_code: str | None = None):
        return LedgerService.get_balance(diner_code, merchant_code, branch_code=branch_code)

    @classmethod
    def transactions(cls, diner_code: str, merchant_code: str | None = None, limit: int = 50):
        return LedgerService.get_transactions(diner_code, merchant_code=merchant_code, limit=limit)

    @classmethod
    def vouchers(cls, diner_code: str, merchant_code: str | None = None, only_valid: bool = False):
        return IssuerService.get_diner_vouchers(
            diner_code, merchant_code=merchant_code, only_valid=only_valid
        )

    @classmethod
    def voucher_types(cls, merchant_code: str):
        return IssuerService.get_active_voucher_types(merchant_code)

    @classmethod
    def batches(cls, merchant_code: str):
        return ReconciliationService.get_batches(merchant_code)

    @classmethod
    def batch_details(cls, batch_id: int, merchant_code: str | None = None):
        return ReconciliationService.get_batch_details(batch_id, merchant_code=merchant_code)
