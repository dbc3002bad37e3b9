"""
Rewardman signals - public event API.

Emitted signals:
- transaction_recorded: LedgerService.record_transaction()
- voucher_issued: IssuerService.redeem_credit() and IssuerService.auto_issue()
- voucher_presented: PresentationService.present_voucher()
- voucher_redeemed: RedemptionService.redeem_by_code()
- reconciliation_completed: ReconciliationService.process_batch()
- merchant_settings_updated: MerchantService.update_settings()
"""

from django.dispatch import Signal

transaction_recorded = Signal()  # sender=LoyaltyTransaction, balance, credits_earned
voucher_issued = Signal()  # sender=Voucher, balance, automatic=bool
voucher_presented = Signal()  # sender=Voucher, diner, expires_at
voucher_redeemed = Signal()  # sender=Voucher, diner, branch, bill_id
reconciliation_completed = Signal()  # sender=ReconciliationBatch
merchant_settings_updated = Signal()  # sender=Merchant, changes=dict
