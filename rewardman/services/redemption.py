"""Redemption service - staff consume a presented code at the till."""

import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import InvalidState, NotFound, RewardmanError, ValidationError
from rewardman.gates import Gates
from rewardman.models import Diner, Voucher
from rewardman.services import directory
from rewardman.services.presentation import PresentationService
from rewardman.signals import voucher_redeemed

logger = logging.getLogger(__name__)


@dataclass
class RedemptionResult:
    voucher: Voucher
    diner: Diner
    message: str


class RedemptionService:
    """
    Service for code redemption.

    Every check is a distinct failure; the final write is a conditional
    update so a voucher is redeemed at most once.
    """

    @classmethod
    def redeem_by_code(
        cls,
        merchant_code: str,
        code: str,
        bill_id: str = "",
        branch_code: str | None = None,
    ) -> RedemptionResult:
        """
        Redeem the voucher a diner presented.

        Args:
            merchant_code: Redeeming merchant
            code: Presentation code read from the diner's screen
            bill_id: Bill the voucher is applied to
            branch_code: Redeeming branch, if known

        Returns:
            RedemptionResult with the redeemed voucher, the diner and a message

        Raises:
            ValidationError: Empty code
            NotFound: Unknown merchant or branch, or no diner holds the code
            InvalidState: Code expired, voucher already redeemed or expired
            ScopeViolation: Voucher of another merchant, or ineligible branch
        """
        code = (code or "").strip().upper()
        if not code:
            raise ValidationError("CODE_REQUIRED")

        merchant = directory.get_merchant(merchant_code)
        branch = directory.get_branch(merchant, branch_code)

        try:
            diner = Diner.objects.select_related(
                "active_voucher__merchant",
                "active_voucher__voucher_type",
                "active_voucher__branch",
            ).get(active_code=code)
        except Diner.DoesNotExist:
            if Voucher.objects.filter(code=code, is_redeemed=True).exists():
                raise InvalidState("VOUCHER_ALREADY_REDEEMED", code=code)
            raise NotFound("CODE_NOT_FOUND", code=code)

        try:
            Gates.code_freshness(
                diner.active_code_issued_at,
                rewardman_settings.presentation_code_ttl,
            )
        except InvalidState:
            PresentationService.clear_binding(diner.pk, code)
            logger.warning("Expired code rejected: diner=%s merchant=%s", diner.code, merchant.code)
            raise

        voucher = diner.active_voucher
        if voucher is None:
            raise NotFound("VOUCHER_NOT_FOUND", code=code)

        try:
            Gates.merchant_ownership(voucher, merchant)
            Gates.branch_eligibility(voucher, branch)
            Gates.voucher_redeemable(voucher)
        except RewardmanError as e:
            logger.warning(
                "Redemption rejected: voucher=%s merchant=%s reason=%s",
                voucher.pk,
                merchant.code,
                e.code,
            )
            raise

        cls._consume(voucher, diner, code, bill_id=bill_id, branch=branch)

        logger.info(
            "Voucher redeemed: id=%s diner=%s merchant=%s branch=%s bill=%s",
            voucher.pk,
            diner.code,
            merchant.code,
            branch.code if branch else "-",
            bill_id,
        )

        voucher_redeemed.send(
            sender=Voucher,
            voucher=voucher,
            diner=diner,
            branch=branch,
            bill_id=bill_id,
        )

        return RedemptionResult(
            voucher=voucher,
            diner=diner,
            message=f'Voucher "{voucher.title}" redeemed successfully!',
        )

    @classmethod
    def _consume(cls, voucher: Voucher, diner: Diner, code: str, bill_id: str = "", branch=None) -> None:
        """
        Mark voucher redeemed and clear the diner's binding.

        The binding is re-checked under the diner row lock: a code replaced by
        a newer presentation fails with CODE_NOT_FOUND. Only the first caller
        wins; later callers get VOUCHER_ALREADY_REDEEMED.
        Updates voucher in place on success.
        """
        now = timezone.now()
        with transaction.atomic():
            locked = Diner.objects.select_for_update().get(pk=diner.pk)
            if locked.active_code != code or locked.active_voucher_id != voucher.pk:
                if Voucher.objects.filter(code=code, is_redeemed=True).exists():
                    raise InvalidState("VOUCHER_ALREADY_REDEEMED", code=code)
                logger.warning("Superseded code rejected: diner=%s voucher=%s", diner.code, voucher.pk)
                raise NotFound("CODE_NOT_FOUND", code=code)

            updated = Voucher.objects.filter(pk=voucher.pk, is_redeemed=False).update(
                is_redeemed=True,
                redeemed_at=now,
                bill_id=bill_id or "",
                redeemed_branch=branch,
                code=code,
            )
            if not updated:
                logger.warning("Concurrent redemption lost: voucher=%s", voucher.pk)
                raise InvalidState("VOUCHER_ALREADY_REDEEMED", voucher_id=voucher.pk)

            if not PresentationService.clear_binding(diner.pk, code):
                raise NotFound("CODE_NOT_FOUND", code=code)

        voucher.is_redeemed = True
        voucher.redeemed_at = now
        voucher.bill_id = bill_id or ""
        voucher.redeemed_branch = branch
        voucher.code = code
