"""Tests for reconciliation of bill exports."""

from decimal import Decimal

import pytest
from django.utils import timezone

from rewardman.exceptions import NotFound, ValidationError
from rewardman.models import BatchStatus, LoyaltyTransaction, ReconciliationBatch, ReconciliationRecord
from rewardman.services.reconciliation import (
    ReconciliationService,
    normalize_amount,
    parse_csv,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def redeemed(make_voucher, points_type):
    """Three vouchers redeemed against bills INV-1..INV-3."""
    return [
        make_voucher(points_type, is_redeemed=True, redeemed_at=timezone.now(), bill_id=f"INV-{i}", code=f"CODE0{i}")
        for i in (1, 2, 3)
    ]


FIVE_ROWS = "\n".join([
    "invoice_id,amount,date",
    "INV-1,100.00,2024-03-01",
    "INV-2,250.00,2024-03-01",
    "INV-3,80.00,2024-03-02",
    "INV-4,60.00,2024-03-02",
    "INV-5,45.50,2024-03-03",
])


# ═══════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════


class TestParseCsv:
    def test_header_synonyms_and_case(self):
        rows = parse_csv('" Bill_ID ","TOTAL","Bill_Date"\nB1,10,2024-01-01\n')

        assert len(rows) == 1
        assert rows[0].bill_id == "B1"
        assert rows[0].amount == "10"
        assert rows[0].date == "2024-01-01"

    def test_quoted_values(self):
        rows = parse_csv('billid,amount\n"B-9","R1,250.00"\n')
        assert rows[0].amount == "R1,250.00"

    def test_optional_columns(self):
        rows = parse_csv("invoice\nA\nB\n")
        assert [(r.bill_id, r.amount, r.date) for r in rows] == [("A", "", ""), ("B", "", "")]

    def test_skips_blank_rows_and_missing_bill_id(self):
        rows = parse_csv("bill_id,amount\nA,1\n\n,5\n   ,6\nB,2\n")
        assert [r.bill_id for r in rows] == ["A", "B"]

    def test_short_rows(self):
        rows = parse_csv("amount,bill_id\n10\n20,B\n")
        assert [r.bill_id for r in rows] == ["B"]

    def test_missing_bill_id_column(self):
        with pytest.raises(ValidationError) as exc:
            parse_csv("amount,date\n10,2024-01-01\n")
        assert exc.value.code == "CSV_MISSING_BILL_ID_COLUMN"

    def test_empty_input(self):
        with pytest.raises(ValidationError):
            parse_csv("")

    def test_byte_order_mark(self):
        rows = parse_csv("\ufeffbill_id\nX\n")
        assert rows[0].bill_id == "X"


class TestNormalizeAmount:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("R105.00", Decimal("105.00")),
            ("$ 1,250.50", Decimal("1250.50")),
            ("1.250,50 €", Decimal("1250.50")),
            ("12,5", Decimal("12.5")),
            ("1,250", Decimal("1250")),
            ("1,250,000", Decimal("1250000")),
            ("-3.10", Decimal("-3.10")),
            ("", None),
            ("n/a", None),
        ],
    )
    def test_formats(self, raw, expected):
        assert normalize_amount(raw) == expected


# ═══════════════════════════════════════════════════════════════════
# process_batch
# ═══════════════════════════════════════════════════════════════════


class TestProcessBatch:
    def test_five_rows_three_matched(self, merchant, redeemed):
        result = ReconciliationService.process_batch("RST-001", "march.csv", FIVE_ROWS)

        assert result.summary == {"total": 5, "matched": 3, "unmatched": 2}
        assert result.batch.status == BatchStatus.COMPLETED
        assert result.batch.processed_at is not None
        assert result.batch.filename == "march.csv"
        assert ReconciliationRecord.objects.filter(batch=result.batch).count() == 5

        matched = {r.bill_id: r.matched_voucher for r in result.records if r.is_matched}
        assert matched == {v.bill_id: v for v in redeemed}

    def test_only_own_vouchers_match(self, merchant, other_merchant, make_voucher):
        make_voucher(issuer=other_merchant, is_redeemed=True, bill_id="INV-1")

        result = ReconciliationService.process_batch("RST-001", "march.csv", FIVE_ROWS)
        assert result.summary["matched"] == 0

    def test_blank_filename(self, merchant):
        with pytest.raises(ValidationError) as exc:
            ReconciliationService.process_batch("RST-001", "  ", FIVE_ROWS)
        assert exc.value.code == "FILENAME_REQUIRED"

    def test_no_data_rows(self, merchant):
        with pytest.raises(ValidationError) as exc:
            ReconciliationService.process_batch("RST-001", "empty.csv", "invoice_id,amount\n")
        assert exc.value.code == "CSV_NO_RECORDS"
        assert not ReconciliationBatch.objects.exists()

    def test_unknown_merchant(self, db):
        with pytest.raises(NotFound):
            ReconciliationService.process_batch("NOPE", "x.csv", FIVE_ROWS)

    def test_get_batches_most_recent_first(self, merchant):
        first = ReconciliationService.process_batch("RST-001", "a.csv", FIVE_ROWS).batch
        second = ReconciliationService.process_batch("RST-001", "b.csv", FIVE_ROWS).batch

        assert ReconciliationService.get_batches("RST-001") == [second, first]


# ═══════════════════════════════════════════════════════════════════
# Detail view
# ═══════════════════════════════════════════════════════════════════


class TestBatchDetails:
    def test_enrichment_and_variance(self, diner, merchant, redeemed):
        LoyaltyTransaction.objects.create(
            diner=diner, merchant=merchant, amount=Decimal("100.00"), points_earned=100, bill_id="INV-1"
        )
        csv_text = "invoice_id,amount\nINV-1,R105.00\nINV-9,20.00\n"
        batch = ReconciliationService.process_batch("RST-001", "x.csv", csv_text).batch

        _, records = ReconciliationService.get_batch_details(batch.pk, merchant_code="RST-001")
        first, second = records

        assert first.voucher_title == "Free Dessert"
        assert first.voucher_code == "CODE01"
        assert first.redeemed_at is not None
        assert first.recorded_amount == Decimal("100.00")
        assert first.diner_phone == "0821234567"
        assert first.variance == Decimal("5.00")
        assert first.variance_display == "+5.00"

        assert second.voucher_title is None
        assert second.variance is None
        assert second.variance_display == ""

    def test_negative_variance(self, diner, merchant):
        LoyaltyTransaction.objects.create(
            diner=diner, merchant=merchant, amount=Decimal("100.00"), points_earned=100, bill_id="B1"
        )
        batch = ReconciliationService.process_batch("RST-001", "x.csv", "bill_id,amount\nB1,97.5\n").batch

        _, records = ReconciliationService.get_batch_details(batch.pk)
        assert records[0].variance_display == "-2.50"

    def test_batch_of_other_merchant(self, merchant, other_merchant):
        batch = ReconciliationService.process_batch("RST-001", "x.csv", FIVE_ROWS).batch

        with pytest.raises(NotFound) as exc:
            ReconciliationService.get_batch_details(batch.pk, merchant_code="RST-002")
        assert exc.value.code == "BATCH_NOT_FOUND"
