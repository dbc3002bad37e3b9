"""Management command to reconcile a bill export from disk."""

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from rewardman.exceptions import RewardmanError
from rewardman.services.reconciliation import ReconciliationService


class Command(BaseCommand):
    help = "Match a CSV bill export against the merchant's redeemed vouchers"

    def add_arguments(self, parser):
        parser.add_argument("merchant_code", help="Merchant code")
        parser.add_argument("path", help="Path to the CSV file")
        parser.add_argument(
            "--filename",
            default=None,
            help="Name to record on the batch (defaults to the file name)",
        )

    def handle(self, *args, **options):
        path = Path(options["path"])
        try:
            csv_text = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise CommandError(f"Cannot read {path}: {e}")

        try:
            result = ReconciliationService.process_batch(
                options["merchant_code"],
                options["filename"] or path.name,
                csv_text,
            )
        except RewardmanError as e:
            raise CommandError(f"{e.code}: {e.message}")

        summary = result.summary
        self.stdout.write(
            self.style.SUCCESS(
                f"Batch {result.batch.pk}: {summary['total']} records, "
                f"{summary['matched']} matched, {summary['unmatched']} unmatched."
            )
        )
