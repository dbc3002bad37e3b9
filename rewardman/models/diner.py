"""Diner model.

A Diner holds at most one active presentation binding: the voucher being shown
to staff, the short code that stands for it, and when the code was issued.
Presenting another voucher overwrites the binding, so an earlier code stops
working immediately (last write wins).
"""

import secrets
import uuid as uuid_lib
from datetime import datetime, timedelta

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Diner(models.Model):
    """Registered diner (loyalty member)."""

    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Unique diner code (e.g. DIN-001)"),
    )
    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    first_name = models.CharField(_("first name"), max_length=100)
    last_name = models.CharField(_("last name"), max_length=100, blank=True)
    email = models.EmailField(_("email"), blank=True, db_index=True)
    phone = models.CharField(_("phone"), max_length=20, blank=True, db_index=True)

    # Active presentation binding
    active_voucher = models.ForeignKey(
        "rewardman.Voucher",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("presented voucher"),
    )
    active_code = models.CharField(
        _("presentation code"),
        max_length=16,
        null=True,
        blank=True,
        unique=True,
        help_text=_("Short-lived code shown to staff at redemption"),
    )
    active_code_issued_at = models.DateTimeField(_("code issued at"), null=True, blank=True)

    is_active = models.BooleanField(_("active"), default=True, db_index=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("diner")
        verbose_name_plural = _("diners")
        ordering = ["first_name", "last_name"]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def code_expires_at(self, ttl: timedelta) -> datetime | None:
        if not self.active_code_issued_at:
            return None
        return self.active_code_issued_at + ttl

    def is_code_expired(self, ttl: timedelta, now: datetime | None = None) -> bool:
        expires_at = self.code_expires_at(ttl)
        if expires_at is None:
            return True
        return (now or timezone.now()) > expires_at

    @classmethod
    def generate_presentation_code(
        cls,
        length: int | None = None,
        alphabet: str | None = None,
        max_attempts: int | None = None,
    ) -> str:
        """
        Generate a presentation code not held by any diner nor consumed by a voucher.

        Raises:
            ValueError: If no unique code is found within max_attempts.
        """
        from rewardman.conf import rewardman_settings
        from rewardman.models.voucher import Voucher

        length = length or rewardman_settings.PRESENTATION_CODE_LENGTH
        alphabet = alphabet or rewardman_settings.PRESENTATION_CODE_ALPHABET
        max_attempts = max_attempts or rewardman_settings.PRESENTATION_CODE_MAX_ATTEMPTS

        for _attempt in range(max_attempts):
            code = "".join(secrets.choice(alphabet) for _ in range(length))
            if cls.objects.filter(active_code=code).exists():
                continue
            if Voucher.objects.filter(code=code).exists():
                continue
            return code

        raise ValueError(f"Could not generate unique presentation code after {max_attempts} attempts")
