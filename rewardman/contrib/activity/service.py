"""Activity service - write and read merchant audit entries."""

import logging

from rewardman.contrib.activity.models import ActivityLog
from rewardman.services import directory

logger = logging.getLogger(__name__)

MAX_LIMIT = 500


class ActivityService:
    """
    Service for merchant activity logs.

    Uses @classmethod for extensibility (consistent with other contrib services).
    """

    @classmethod
    def log(
        cls,
        merchant,
        action: str,
        target_type: str = "",
        target_id="",
        details: dict | None = None,
        actor: str = "",
    ) -> ActivityLog:
        """
        Record an activity entry.

        Args:
            merchant: Merchant instance
            action: ActivityAction value
            target_type: Kind of object affected (voucher, batch, merchant)
            target_id: Its identifier
            details: Extra data as JSON
            actor: Who performed the action

        Returns:
            Created ActivityLog
        """
        entry = ActivityLog.objects.create(
            merchant=merchant,
            action=action,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else "",
            details=details or {},
            actor=actor,
        )
        logger.debug("Activity logged: merchant=%s action=%s", merchant.code, action)
        return entry

    @classmethod
    def get_logs(
        cls,
        merchant_code: str,
        limit: int = 100,
        action: str | None = None,
    ) -> list[ActivityLog]:
        """
        Get a merchant's activity (most recent first).

        Args:
            merchant_code: Merchant code
            limit: Max entries, capped at 500
            action: Filter by action (optional)

        Raises:
            NotFound: Unknown merchant
        """
        merchant = directory.get_merchant(merchant_code)
        qs = ActivityLog.objects.filter(merchant=merchant)
        if action:
            qs = qs.filter(action=action)
        return list(qs[: max(0, min(limit, MAX_LIMIT))])
