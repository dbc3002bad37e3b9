"""Pytest fixtures for Rewardman tests."""

from datetime import timedelta

import pytest
from django.utils import timezone

from rewardman.models import (
    Balance,
    Branch,
    Diner,
    EarningMode,
    LoyaltyScope,
    Merchant,
    RedemptionScope,
    Voucher,
    VoucherType,
)


@pytest.fixture
def merchant(db):
    """Organization-wide merchant: 1 point per unit, credit every 1000 points or 10 visits."""
    return Merchant.objects.create(
        code="RST-001",
        name="Ocean Grill",
        points_per_currency=1,
        points_threshold=1000,
        visit_threshold=10,
    )


@pytest.fixture
def other_merchant(db):
    return Merchant.objects.create(code="RST-002", name="Mountain Diner")


@pytest.fixture
def branch_a(db, merchant):
    return Branch.objects.create(merchant=merchant, code="waterfront", name="Waterfront", is_default=True)


@pytest.fixture
def branch_b(db, merchant):
    return Branch.objects.create(merchant=merchant, code="city-bowl", name="City Bowl")


@pytest.fixture
def branch_merchant(db):
    """Merchant keeping balances and vouchers per branch."""
    return Merchant.objects.create(
        code="RST-BR",
        name="Harbour Group",
        loyalty_scope=LoyaltyScope.BRANCH,
        voucher_scope=LoyaltyScope.BRANCH,
        points_threshold=1000,
        visit_threshold=10,
    )


@pytest.fixture
def harbour_north(db, branch_merchant):
    return Branch.objects.create(merchant=branch_merchant, code="north", name="Harbour North")


@pytest.fixture
def harbour_south(db, branch_merchant):
    return Branch.objects.create(merchant=branch_merchant, code="south", name="Harbour South")


@pytest.fixture
def diner(db):
    return Diner.objects.create(
        code="DIN-001",
        first_name="Thandi",
        last_name="Nkosi",
        email="thandi@example.com",
        phone="0821234567",
    )


@pytest.fixture
def other_diner(db):
    return Diner.objects.create(code="DIN-002", first_name="Pieter", last_name="Botha")


@pytest.fixture
def points_type(db, merchant):
    """Costs one points credit."""
    return VoucherType.objects.create(
        merchant=merchant,
        name="Free Dessert",
        earning_mode=EarningMode.POINTS,
        credits_cost=1,
        validity_days=30,
    )


@pytest.fixture
def visits_type(db, merchant):
    """Costs one visit credit."""
    return VoucherType.objects.create(
        merchant=merchant,
        name="Free Coffee",
        earning_mode=EarningMode.VISITS,
        credits_cost=1,
        validity_days=14,
    )


@pytest.fixture
def restricted_type(db, merchant, branch_a):
    """Redeemable at Waterfront only."""
    voucher_type = VoucherType.objects.create(
        merchant=merchant,
        name="Waterfront Platter",
        earning_mode=EarningMode.POINTS,
        credits_cost=1,
        redemption_scope=RedemptionScope.SPECIFIC_BRANCHES,
    )
    voucher_type.redeemable_branches.add(branch_a)
    return voucher_type


@pytest.fixture
def balance(db, diner, merchant):
    """Org balance with two credits in each pool."""
    return Balance.objects.create(
        diner=diner,
        merchant=merchant,
        points_credits=2,
        visit_credits=2,
        total_credits_earned=4,
    )


@pytest.fixture
def make_voucher(db, diner, merchant):
    """Factory for vouchers issued directly, bypassing the credit spend."""

    def _make(voucher_type=None, owner=None, issuer=None, branch=None, days=30, **kwargs):
        return Voucher.objects.create(
            diner=owner or diner,
            merchant=issuer or merchant,
            branch=branch,
            voucher_type=voucher_type,
            title=voucher_type.name if voucher_type else "Free Dessert",
            expiry_date=timezone.now() + timedelta(days=days),
            **kwargs,
        )

    return _make


@pytest.fixture
def voucher(make_voucher, points_type):
    return make_voucher(points_type)
