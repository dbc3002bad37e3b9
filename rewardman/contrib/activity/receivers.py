"""Signal receivers that turn engine events into activity entries."""

from django.dispatch import receiver

from rewardman.contrib.activity.models import ActivityAction
from rewardman.contrib.activity.service import ActivityService
from rewardman.signals import (
    merchant_settings_updated,
    reconciliation_completed,
    voucher_issued,
    voucher_redeemed,
)


@receiver(voucher_redeemed, dispatch_uid="rewardman_activity_voucher_redeemed")
def log_voucher_redeemed(sender, voucher, diner, branch=None, bill_id="", **kwargs):
    ActivityService.log(
        voucher.merchant,
        ActivityAction.VOUCHER_REDEEMED,
        target_type="voucher",
        target_id=voucher.pk,
        details={
            "title": voucher.title,
            "diner": diner.code,
            "branch": branch.code if branch else None,
            "bill_id": bill_id,
        },
    )


@receiver(voucher_issued, dispatch_uid="rewardman_activity_credit_redeemed")
def log_credit_redeemed(sender, voucher, balance, automatic=False, **kwargs):
    ActivityService.log(
        balance.merchant,
        ActivityAction.CREDIT_REDEEMED,
        target_type="voucher",
        target_id=voucher.pk,
        details={
            "title": voucher.title,
            "voucher_type": voucher.voucher_type_id,
            "automatic": automatic,
        },
    )


@receiver(merchant_settings_updated, dispatch_uid="rewardman_activity_settings_updated")
def log_settings_updated(sender, merchant, changes, **kwargs):
    ActivityService.log(
        merchant,
        ActivityAction.SETTINGS_UPDATED,
        target_type="merchant",
        target_id=merchant.code,
        details={"changes": changes},
    )


@receiver(reconciliation_completed, dispatch_uid="rewardman_activity_reconciliation")
def log_reconciliation_uploaded(sender, batch, summary, **kwargs):
    ActivityService.log(
        batch.merchant,
        ActivityAction.RECONCILIATION_UPLOADED,
        target_type="batch",
        target_id=batch.pk,
        details={"filename": batch.filename, **summary},
    )
