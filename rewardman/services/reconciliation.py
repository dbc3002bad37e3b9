"""Reconciliation service - match a merchant's bill export against redeemed vouchers."""

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import NotFound, ValidationError
from rewardman.models import (
    BatchStatus,
    LoyaltyTransaction,
    ReconciliationBatch,
    ReconciliationRecord,
    Voucher,
)
from rewardman.services import directory
from rewardman.signals import reconciliation_completed

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.,\-]")
_CENTS = Decimal("0.01")


@dataclass
class CsvRow:
    bill_id: str
    amount: str = ""
    date: str = ""


@dataclass
class ReconciliationResult:
    batch: ReconciliationBatch
    records: list[ReconciliationRecord]
    summary: dict


@dataclass
class EnrichedRecord:
    """A reconciliation record with the voucher and transaction it lines up with."""

    record: ReconciliationRecord
    voucher_title: str | None = None
    voucher_code: str | None = None
    redeemed_at: datetime | None = None
    recorded_amount: Decimal | None = None
    diner_phone: str | None = None
    variance: Decimal | None = None

    @property
    def variance_display(self) -> str:
        if self.variance is None:
            return ""
        return f"{self.variance:+.2f}"


# =============================================================================
# Parsing
# =============================================================================


def _normalize_header(value: str) -> str:
    return value.strip().strip("\"'").strip().lower()


def _find_column(headers: list[str], synonyms) -> int | None:
    wanted = {_normalize_header(s) for s in synonyms}
    for index, header in enumerate(headers):
        if header in wanted:
            return index
    return None


def parse_csv(csv_text: str) -> list[CsvRow]:
    """
    Parse a bill export.

    The first line holds headers. A bill id column is required; amount and
    date columns are optional. Blank rows and rows without a bill id are skipped.

    Raises:
        ValidationError: CSV_MISSING_BILL_ID_COLUMN
    """
    reader = csv.reader(io.StringIO((csv_text or "").lstrip("\ufeff")))
    try:
        headers = [_normalize_header(h) for h in next(reader)]
    except StopIteration:
        headers = []

    bill_col = _find_column(headers, rewardman_settings.BILL_ID_COLUMNS)
    if bill_col is None:
        raise ValidationError("CSV_MISSING_BILL_ID_COLUMN", headers=headers)
    amount_col = _find_column(headers, rewardman_settings.AMOUNT_COLUMNS)
    date_col = _find_column(headers, rewardman_settings.DATE_COLUMNS)

    def cell(row, index):
        if index is None or index >= len(row):
            return ""
        return row[index].strip()

    rows = []
    for row in reader:
        bill_id = cell(row, bill_col)
        if not bill_id:
            continue
        rows.append(CsvRow(bill_id=bill_id, amount=cell(row, amount_col), date=cell(row, date_col)))
    return rows


def normalize_amount(raw: str) -> Decimal | None:
    """
    Parse an amount as written in a bill export.

    Currency symbols and spaces are dropped. With both ',' and '.', the last
    one is the decimal separator. A lone ',' followed by one or two digits is
    a decimal comma, otherwise commas group thousands.
    """
    cleaned = _NON_NUMERIC.sub("", raw or "")
    if not cleaned:
        return None

    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        head, _, tail = cleaned.rpartition(",")
        if cleaned.count(",") == 1 and 1 <= len(tail) <= 2:
            cleaned = f"{head}.{tail}"
        else:
            cleaned = cleaned.replace(",", "")

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


# =============================================================================
# Service
# =============================================================================


class ReconciliationService:
    """Service for reconciliation batches."""

    @classmethod
    def process_batch(cls, merchant_code: str, filename: str, csv_text: str) -> ReconciliationResult:
        """
        Match every row of a bill export against the merchant's vouchers.

        A row matches when a voucher of this merchant carries its bill id.
        The whole batch is written in one atomic block.

        Raises:
            NotFound: Unknown merchant
            ValidationError: Blank filename, missing bill id column, no rows
        """
        merchant = directory.get_merchant(merchant_code)
        filename = (filename or "").strip()
        if not filename:
            raise ValidationError("FILENAME_REQUIRED")

        rows = parse_csv(csv_text)
        if not rows:
            raise ValidationError("CSV_NO_RECORDS", filename=filename)

        with transaction.atomic():
            batch = ReconciliationBatch.objects.create(
                merchant=merchant,
                filename=filename,
                status=BatchStatus.PROCESSING,
            )

            records = []
            for row in rows:
                voucher = (
                    Voucher.objects.filter(merchant=merchant, bill_id=row.bill_id)
                    .order_by("-redeemed_at", "-pk")
                    .first()
                )
                records.append(
                    ReconciliationRecord.objects.create(
                        batch=batch,
                        bill_id=row.bill_id,
                        csv_amount=row.amount,
                        csv_date=row.date,
                        is_matched=voucher is not None,
                        matched_voucher=voucher,
                    )
                )

            matched = sum(1 for r in records if r.is_matched)
            batch.total_records = len(records)
            batch.matched_records = matched
            batch.unmatched_records = len(records) - matched
            batch.status = BatchStatus.COMPLETED
            batch.processed_at = timezone.now()
            batch.save()

        summary = {
            "total": batch.total_records,
            "matched": batch.matched_records,
            "unmatched": batch.unmatched_records,
        }
        logger.info(
            "Reconciliation completed: merchant=%s file=%s total=%d matched=%d",
            merchant.code,
            filename,
            summary["total"],
            summary["matched"],
        )

        reconciliation_completed.send(sender=ReconciliationBatch, batch=batch, summary=summary)
        return ReconciliationResult(batch=batch, records=records, summary=summary)

    @classmethod
    def get_batches(cls, merchant_code: str) -> list[ReconciliationBatch]:
        """Get a merchant's batches, most recent first."""
        merchant = directory.get_merchant(merchant_code)
        return list(ReconciliationBatch.objects.filter(merchant=merchant))

    @classmethod
    def get_batch_details(
        cls,
        batch_id: int,
        merchant_code: str | None = None,
    ) -> tuple[ReconciliationBatch, list[EnrichedRecord]]:
        """
        Get a batch with each record enriched for review.

        Matched records carry the voucher's title, code and redemption time.
        When a transaction exists for the bill, the recorded amount, the
        diner's phone and the CSV-minus-recorded variance are added.

        Raises:
            NotFound: Unknown batch, or batch of another merchant
        """
        qs = ReconciliationBatch.objects.select_related("merchant")
        if merchant_code:
            qs = qs.filter(merchant__code=merchant_code)
        try:
            batch = qs.get(pk=batch_id)
        except ReconciliationBatch.DoesNotExist:
            raise NotFound("BATCH_NOT_FOUND", batch_id=batch_id)

        records = batch.records.select_related("matched_voucher").order_by("pk")
        bill_ids = {r.bill_id for r in records}
        transactions = {}
        for tx in (
            LoyaltyTransaction.objects.select_related("diner")
            .filter(merchant=batch.merchant, bill_id__in=bill_ids)
            .order_by("created_at", "pk")
        ):
            transactions[tx.bill_id] = tx

        enriched = []
        for record in records:
            item = EnrichedRecord(record=record)
            voucher = record.matched_voucher
            if voucher is not None:
                item.voucher_title = voucher.title
                item.voucher_code = voucher.code
                item.redeemed_at = voucher.redeemed_at

            tx = transactions.get(record.bill_id)
            if tx is not None:
                item.recorded_amount = tx.amount
                item.diner_phone = tx.diner.phone
                csv_amount = normalize_amount(record.csv_amount)
                if csv_amount is not None:
                    item.variance = (csv_amount - tx.amount).quantize(_CENTS)
            enriched.append(item)

        return batch, enriched
