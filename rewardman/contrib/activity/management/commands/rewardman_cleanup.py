"""Management command to cleanup old activity entries."""

from django.core.management.base import BaseCommand

from rewardman.contrib.activity.models import ActivityLog


class Command(BaseCommand):
    help = "Remove activity log entries older than ACTIVITY_RETENTION_DAYS"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Override ACTIVITY_RETENTION_DAYS setting",
        )

    def handle(self, *args, **options):
        deleted_count, _ = ActivityLog.cleanup_old_entries(days=options["days"])
        self.stdout.write(
            self.style.SUCCESS(f"Deleted {deleted_count} old activity entries.")
        )
