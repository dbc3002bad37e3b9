"""Presentation service - short-lived codes diners show to staff."""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import transaction
from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import NotFound
from rewardman.gates import Gates
from rewardman.models import Diner, Voucher
from rewardman.services import directory
from rewardman.signals import voucher_presented

logger = logging.getLogger(__name__)


@dataclass
class Presentation:
    """Code shown by the diner, valid until expires_at."""

    code: str
    expires_at: datetime
    voucher: Voucher


class PresentationService:
    """
    Service for presentation codes.

    A diner holds one active binding at a time. Presenting again overwrites it.
    """

    @classmethod
    def present_voucher(cls, diner_code: str, voucher_id: int) -> Presentation:
        """
        Bind a fresh presentation code to one of the diner's vouchers.

        Args:
            diner_code: Diner code
            voucher_id: Voucher primary key

        Returns:
            Presentation with the code and its expiry

        Raises:
            NotFound: Unknown diner, or voucher not owned by the diner
            InvalidState: Voucher already redeemed or expired
        """
        diner = directory.get_diner(diner_code)
        try:
            voucher = Voucher.objects.select_related("merchant").get(pk=voucher_id, diner=diner)
        except Voucher.DoesNotExist:
            raise NotFound("VOUCHER_NOT_FOUND", voucher_id=voucher_id, diner_code=diner_code)

        Gates.voucher_redeemable(voucher)

        with transaction.atomic():
            diner = Diner.objects.select_for_update().get(pk=diner.pk)
            code = Diner.generate_presentation_code()
            issued_at = timezone.now()

            diner.active_voucher = voucher
            diner.active_code = code
            diner.active_code_issued_at = issued_at
            diner.save(update_fields=[
                "active_voucher",
                "active_code",
                "active_code_issued_at",
                "updated_at",
            ])

        expires_at = issued_at + rewardman_settings.presentation_code_ttl
        logger.info("Voucher presented: id=%s diner=%s", voucher.pk, diner.code)

        voucher_presented.send(sender=Voucher, voucher=voucher, diner=diner, expires_at=expires_at)
        return Presentation(code=code, expires_at=expires_at, voucher=voucher)

    @classmethod
    def get_active_presentation(cls, diner_code: str) -> Presentation | None:
        """Current binding of a diner, or None if there is none or it has expired."""
        diner = directory.get_diner(diner_code)
        ttl = rewardman_settings.presentation_code_ttl
        if not diner.active_code or diner.is_code_expired(ttl):
            return None
        return Presentation(
            code=diner.active_code,
            expires_at=diner.code_expires_at(ttl),
            voucher=diner.active_voucher,
        )

    @classmethod
    def clear_binding(cls, diner_id: int, code: str) -> bool:
        """
        Clear a diner's binding if it still holds code.

        Returns False when a newer presentation has replaced it.
        """
        updated = Diner.objects.filter(pk=diner_id, active_code=code).update(
            active_voucher=None,
            active_code=None,
            active_code_issued_at=None,
            updated_at=timezone.now(),
        )
        return bool(updated)
