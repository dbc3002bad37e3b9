"""Tests for the activity contrib app and management commands."""

from datetime import timedelta
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import CommandError, call_command
from django.utils import timezone

from rewardman.contrib.activity import ActivityService
from rewardman.contrib.activity.models import ActivityAction, ActivityLog
from rewardman.models import ReconciliationBatch
from rewardman.services.issuer import IssuerService
from rewardman.services.merchant import MerchantService, MerchantSettings
from rewardman.services.presentation import PresentationService
from rewardman.services.reconciliation import ReconciliationService
from rewardman.services.redemption import RedemptionService

pytestmark = pytest.mark.django_db


# ═══════════════════════════════════════════════════════════════════
# ActivityService
# ═══════════════════════════════════════════════════════════════════


class TestActivityService:
    def test_log_and_read(self, merchant):
        ActivityService.log(merchant, ActivityAction.SETTINGS_UPDATED, "merchant", "RST-001", actor="owner")

        logs = ActivityService.get_logs("RST-001")
        assert len(logs) == 1
        assert logs[0].actor == "owner"
        assert logs[0].target_id == "RST-001"

    def test_limit_capped(self, merchant):
        ActivityLog.objects.bulk_create(
            ActivityLog(merchant=merchant, action=ActivityAction.SETTINGS_UPDATED) for _ in range(510)
        )

        assert len(ActivityService.get_logs("RST-001", limit=1000)) == 500
        assert len(ActivityService.get_logs("RST-001", limit=5)) == 5

    def test_filter_by_action(self, merchant):
        ActivityService.log(merchant, ActivityAction.SETTINGS_UPDATED)
        ActivityService.log(merchant, ActivityAction.VOUCHER_REDEEMED)

        logs = ActivityService.get_logs("RST-001", action=ActivityAction.VOUCHER_REDEEMED)
        assert [log.action for log in logs] == ["voucher_redeemed"]


# ═══════════════════════════════════════════════════════════════════
# Signal receivers
# ═══════════════════════════════════════════════════════════════════


class TestReceivers:
    def test_credit_redeemed(self, balance, points_type):
        IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk)

        log = ActivityLog.objects.get(action=ActivityAction.CREDIT_REDEEMED)
        assert log.details["title"] == "Free Dessert"
        assert log.details["automatic"] is False

    def test_voucher_redeemed(self, diner, voucher):
        code = PresentationService.present_voucher("DIN-001", voucher.pk).code
        RedemptionService.redeem_by_code("RST-001", code, bill_id="B-5")

        log = ActivityLog.objects.get(action=ActivityAction.VOUCHER_REDEEMED)
        assert log.target_id == str(voucher.pk)
        assert log.details["bill_id"] == "B-5"

    def test_settings_updated(self, merchant):
        MerchantService.update_settings("RST-001", MerchantSettings(visit_threshold=5))

        log = ActivityLog.objects.get(action=ActivityAction.SETTINGS_UPDATED)
        assert log.details == {"changes": {"visit_threshold": 5}}

    def test_reconciliation_uploaded(self, merchant):
        ReconciliationService.process_batch("RST-001", "april.csv", "bill_id\nA\nB\n")

        log = ActivityLog.objects.get(action=ActivityAction.RECONCILIATION_UPLOADED)
        assert log.details["filename"] == "april.csv"
        assert log.details["total"] == 2


# ═══════════════════════════════════════════════════════════════════
# Cleanup
# ═══════════════════════════════════════════════════════════════════


class TestCleanup:
    def _old_entry(self, merchant, days):
        past = timezone.now() - timedelta(days=days)
        with patch("django.utils.timezone.now", return_value=past):
            return ActivityService.log(merchant, ActivityAction.SETTINGS_UPDATED)

    def test_cleanup_old_entries(self, merchant):
        self._old_entry(merchant, 400)
        recent = self._old_entry(merchant, 10)

        deleted, _ = ActivityLog.cleanup_old_entries()

        assert deleted == 1
        assert list(ActivityLog.objects.all()) == [recent]

    def test_cleanup_command(self, merchant):
        self._old_entry(merchant, 40)
        out = StringIO()

        call_command("rewardman_cleanup", "--days", "30", stdout=out)

        assert "Deleted 1 old activity entries." in out.getvalue()
        assert not ActivityLog.objects.exists()


class TestReconcileCommand:
    def test_reconcile_file(self, merchant, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text("invoice_id,amount\nINV-1,10\nINV-2,20\n", encoding="utf-8")
        out = StringIO()

        call_command("rewardman_reconcile", "RST-001", str(path), stdout=out)

        batch = ReconciliationBatch.objects.get()
        assert batch.filename == "export.csv"
        assert "2 records, 0 matched, 2 unmatched." in out.getvalue()

    def test_filename_override(self, merchant, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text("bill_id\nX\n", encoding="utf-8")

        call_command("rewardman_reconcile", "RST-001", str(path), "--filename", "pos-may.csv", stdout=StringIO())

        assert ReconciliationBatch.objects.get().filename == "pos-may.csv"

    def test_missing_file(self, merchant, tmp_path):
        with pytest.raises(CommandError):
            call_command("rewardman_reconcile", "RST-001", str(tmp_path / "nope.csv"))

    def test_service_error(self, merchant, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text("amount\n10\n", encoding="utf-8")

        with pytest.raises(CommandError, match="CSV_MISSING_BILL_ID_COLUMN"):
            call_command("rewardman_reconcile", "RST-001", str(path))
