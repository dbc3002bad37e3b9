"""
Django Rewardman - Loyalty ledger and voucher lifecycle.

Usage:
    from rewardman import RewardService
    from rewardman.gates import Gates, GateResult

    result = RewardService.record_transaction("DIN-001", "RST-001", "250.00")
    presentation = RewardService.present_voucher("DIN-001", voucher.pk)
    RewardService.redeem_by_code("RST-001", presentation.code, bill_id="B-42")

    # Gates validation
    Gates.check_voucher_redeemable(voucher)
"""


def __getattr__(name):
    if name == "RewardService":
        from rewardman.service import RewardService

        return RewardService
    if name == "Gates":
        from rewardman.gates import Gates

        return Gates
    if name == "GateResult":
        from rewardman.gates import GateResult

        return GateResult
    if name == "RewardmanError":
        from rewardman.exceptions import RewardmanError

        return RewardmanError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["RewardService", "Gates", "GateResult", "RewardmanError"]
__version__ = "0.1.0"
