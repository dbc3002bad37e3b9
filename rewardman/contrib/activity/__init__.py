"""
Rewardman Activity - Merchant audit trail.

Records what happened at a merchant: vouchers redeemed, credits spent,
settings changed, reconciliation files uploaded. Entries are written by
signal receivers, so the core services never depend on this app.

Usage:
    INSTALLED_APPS = [
        ...
        "rewardman",
        "rewardman.contrib.activity",
    ]

    from rewardman.contrib.activity import ActivityService

    logs = ActivityService.get_logs("RST-001")
"""


def __getattr__(name):
    if name == "ActivityService":
        from rewardman.contrib.activity.service import ActivityService

        return ActivityService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["ActivityService"]
