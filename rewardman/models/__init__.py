"""Rewardman models.

Contrib models are in their respective modules:
- rewardman.contrib.activity: ActivityLog
"""

from rewardman.models.merchant import Branch, LoyaltyScope, Merchant, OnboardingStatus
from rewardman.models.diner import Diner
from rewardman.models.voucher_type import EarningMode, RedemptionScope, VoucherType
from rewardman.models.voucher import Voucher, VoucherStatus
from rewardman.models.balance import Balance
from rewardman.models.transaction import LoyaltyTransaction
from rewardman.models.reconciliation import (
    BatchStatus,
    ReconciliationBatch,
    ReconciliationRecord,
)

__all__ = [
    # Merchant directory
    "Merchant",
    "Branch",
    "LoyaltyScope",
    "OnboardingStatus",
    # Diners and ledger
    "Diner",
    "Balance",
    "LoyaltyTransaction",
    # Voucher catalog and instances
    "VoucherType",
    "EarningMode",
    "RedemptionScope",
    "Voucher",
    "VoucherStatus",
    # Reconciliation
    "ReconciliationBatch",
    "ReconciliationRecord",
    "BatchStatus",
]
