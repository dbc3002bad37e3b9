"""Tests for explicit voucher issuance (spending credits)."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import IntegrityError
from django.utils import timezone

from rewardman.exceptions import InsufficientCredits, InvalidState, NotFound, ScopeViolation, ValidationError
from rewardman.models import Balance, EarningMode, Voucher, VoucherType
from rewardman.services.issuer import IssuerService
from rewardman.signals import voucher_issued

pytestmark = pytest.mark.django_db


class TestRedeemCredit:
    def test_issues_voucher_and_deducts_points_pool(self, balance, points_type):
        result = IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk)

        assert result.voucher.title == "Free Dessert"
        assert result.voucher.voucher_type == points_type
        assert result.balance.points_credits == 1
        assert result.balance.visit_credits == 2
        assert result.balance.total_vouchers_generated == 1

        balance.refresh_from_db()
        assert balance.points_credits == 1

    def test_visits_type_uses_visit_pool(self, balance, visits_type):
        result = IssuerService.redeem_credit("DIN-001", "RST-001", visits_type.pk)

        assert result.balance.visit_credits == 1
        assert result.balance.points_credits == 2

    def test_expiry_from_validity_days(self, balance, visits_type):
        now = timezone.now()
        with patch("django.utils.timezone.now", return_value=now):
            result = IssuerService.redeem_credit("DIN-001", "RST-001", visits_type.pk)

        assert result.voucher.expiry_date == now + timedelta(days=14)

    def test_records_issuing_branch(self, balance, points_type, branch_a):
        result = IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk, branch_code="waterfront")
        assert result.voucher.branch == branch_a

    def test_signal_sent_once(self, balance, points_type):
        received = []

        def handler(sender, **kwargs):
            received.append(kwargs)

        voucher_issued.connect(handler)
        try:
            IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk)
        finally:
            voucher_issued.disconnect(handler)

        assert len(received) == 1
        assert received[0]["automatic"] is False


class TestRedeemCreditErrors:
    def test_unknown_type(self, balance):
        with pytest.raises(NotFound) as exc:
            IssuerService.redeem_credit("DIN-001", "RST-001", 9999)
        assert exc.value.code == "VOUCHER_TYPE_NOT_FOUND"

    def test_inactive_type(self, balance, points_type):
        points_type.is_active = False
        points_type.save()

        with pytest.raises(InvalidState) as exc:
            IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk)
        assert exc.value.code == "VOUCHER_TYPE_INACTIVE"

    def test_type_of_other_merchant(self, diner, other_merchant, points_type):
        with pytest.raises(ScopeViolation) as exc:
            IssuerService.redeem_credit("DIN-001", "RST-002", points_type.pk)
        assert exc.value.code == "VOUCHER_TYPE_WRONG_MERCHANT"

    def test_branch_required(self, diner, branch_merchant, harbour_north):
        voucher_type = VoucherType.objects.create(merchant=branch_merchant, name="Oysters")

        with pytest.raises(ValidationError) as exc:
            IssuerService.redeem_credit("DIN-001", "RST-BR", voucher_type.pk)
        assert exc.value.code == "BRANCH_REQUIRED"

    def test_no_balance_yet(self, diner, merchant, points_type):
        with pytest.raises(InsufficientCredits) as exc:
            IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk)
        assert exc.value.data["available"] == 0

    def test_pool_below_cost(self, balance, merchant):
        voucher_type = VoucherType.objects.create(
            merchant=merchant,
            name="Tasting Menu",
            earning_mode=EarningMode.POINTS,
            credits_cost=3,
        )

        with pytest.raises(InsufficientCredits) as exc:
            IssuerService.redeem_credit("DIN-001", "RST-001", voucher_type.pk)

        assert exc.value.message == "You need 3 credit(s) but only have 2"
        assert not Voucher.objects.exists()
        balance.refresh_from_db()
        assert balance.points_credits == 2

    def test_other_pool_does_not_count(self, diner, merchant, visits_type):
        Balance.objects.create(diner=diner, merchant=merchant, points_credits=5)

        with pytest.raises(InsufficientCredits):
            IssuerService.redeem_credit("DIN-001", "RST-001", visits_type.pk)

    def test_failed_voucher_insert_keeps_credits(self, balance, points_type):
        with patch.object(Voucher.objects, "create", side_effect=IntegrityError("boom")):
            with pytest.raises(IntegrityError):
                IssuerService.redeem_credit("DIN-001", "RST-001", points_type.pk)

        assert not Voucher.objects.exists()
        balance.refresh_from_db()
        assert balance.points_credits == 2
        assert balance.total_vouchers_generated == 0


class TestBranchScopedIssuance:
    def test_spends_from_branch_balance(self, diner, branch_merchant, harbour_north, harbour_south):
        voucher_type = VoucherType.objects.create(merchant=branch_merchant, name="Oysters")
        Balance.objects.create(diner=diner, merchant=branch_merchant, branch=harbour_north, points_credits=1)

        with pytest.raises(InsufficientCredits):
            IssuerService.redeem_credit("DIN-001", "RST-BR", voucher_type.pk, branch_code="south")

        result = IssuerService.redeem_credit("DIN-001", "RST-BR", voucher_type.pk, branch_code="north")
        assert result.balance.branch == harbour_north
        assert result.voucher.branch == harbour_north


class TestIssuerReads:
    def test_get_diner_vouchers(self, make_voucher, points_type, other_merchant):
        valid = make_voucher(points_type)
        make_voucher(points_type, days=-1)
        make_voucher(points_type, is_redeemed=True)
        make_voucher(issuer=other_merchant)

        assert len(IssuerService.get_diner_vouchers("DIN-001")) == 4
        assert len(IssuerService.get_diner_vouchers("DIN-001", merchant_code="RST-001")) == 3
        assert IssuerService.get_diner_vouchers("DIN-001", merchant_code="RST-001", only_valid=True) == [valid]

    def test_get_active_voucher_types(self, points_type, visits_type):
        visits_type.is_active = False
        visits_type.save()

        assert IssuerService.get_active_voucher_types("RST-001") == [points_type]

    def test_get_affordable_voucher_types(self, balance, merchant, points_type, visits_type):
        VoucherType.objects.create(merchant=merchant, name="Tasting Menu", credits_cost=3)

        assert IssuerService.get_affordable_voucher_types(balance) == [points_type, visits_type]
