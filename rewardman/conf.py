"""
Rewardman configuration.

Usage in settings.py:
    REWARDMAN = {
        "PRESENTATION_CODE_TTL_MINUTES": 15,
        "PRESENTATION_CODE_LENGTH": 6,
    }
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from django.conf import settings


@dataclass
class RewardmanSettings:
    """Rewardman configuration settings."""

    # Presentation codes (unambiguous alphabet: no 0/O, 1/I/L)
    PRESENTATION_CODE_TTL_MINUTES: int = 15
    PRESENTATION_CODE_LENGTH: int = 6
    PRESENTATION_CODE_ALPHABET: str = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
    PRESENTATION_CODE_MAX_ATTEMPTS: int = 10

    # Reconciliation CSV header synonyms (matched case-insensitively)
    BILL_ID_COLUMNS: tuple = ("bill_id", "billid", "bill id", "invoice_id", "invoiceid", "invoice")
    AMOUNT_COLUMNS: tuple = ("amount", "total", "value", "bill_amount")
    DATE_COLUMNS: tuple = ("date", "transaction_date", "bill_date")

    # ActivityLog cleanup
    ACTIVITY_RETENTION_DAYS: int = 365

    @property
    def presentation_code_ttl(self) -> timedelta:
        return timedelta(minutes=self.PRESENTATION_CODE_TTL_MINUTES)


def get_rewardman_settings() -> RewardmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "REWARDMAN", {})
    return RewardmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_rewardman_settings(), name)


rewardman_settings = _LazySettings()
