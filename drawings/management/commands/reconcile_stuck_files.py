# drawings/management/commands/reconcile_stuck_files.py

import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from drawings.models import UploadedFile
from drawings.stores import FileLifecycleStore

logger = logging.getLogger(__name__)


def reconcile_stuck_files(*, older_than_minutes: int, dry_run: bool = False, store=None) -> list:
    """
    Marks as failed every file still 'processing' after `older_than_minutes`.
    These are runs whose failure write itself failed, or runs lost with their
    worker process. Returns the ids that were (or would be) failed.
    """
    store = store or FileLifecycleStore()
    cutoff = timezone.now() - timedelta(minutes=older_than_minutes)
    stuck_ids = list(store.stuck_files(older_than=cutoff).values_list('id', flat=True))

    if not stuck_ids:
        logger.info("No stuck files found.")
        return []

    reconciled = []
    for file_id in stuck_ids:
        if dry_run:
            logger.info(f"[file {file_id}] Would be marked as 'failed' (dry run).")
            reconciled.append(file_id)
            continue
        # The conditional update skips rows that finished since the query.
        if store.set_status(file_id, UploadedFile.Status.FAILED):
            logger.warning(f"[file {file_id}] Stuck in 'processing'; marked as 'failed'.")
            reconciled.append(file_id)
    return reconciled


class Command(BaseCommand):
    """
    Sweeps UploadedFile rows left in 'processing' and moves them to 'failed'.
    Meant to be run periodically (cron, k8s CronJob) next to the web service.
    """
    help = "Marks files stuck in 'processing' for too long as 'failed'."

    def add_arguments(self, parser):
        parser.add_argument(
            '--older-than-minutes',
            type=int,
            default=settings.STUCK_FILE_MINUTES,
            help="Only reconcile files untouched for at least this many minutes.",
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help="List the stuck files without changing them.",
        )

    def handle(self, *args, **options):
        reconciled = reconcile_stuck_files(
            older_than_minutes=options['older_than_minutes'],
            dry_run=options['dry_run'],
        )
        verb = "Would reconcile" if options['dry_run'] else "Reconciled"
        self.stdout.write(self.style.SUCCESS(f"{verb} {len(reconciled)} stuck file(s)."))
        for file_id in reconciled:
            self.stdout.write(f"  - file {file_id}")
