"""Management command to reconcile stored blobs with file metadata."""

import logging
from typing import Any, Final

from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.files.exceptions import StorageDeleteFailedError
from server.apps.files.logic.reconcile_operations import (
    find_missing_blobs,
    find_orphan_blobs,
    purge_missing_blob_row,
    purge_orphan_blob,
)

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete orphan blobs and report rows whose blob is missing."""

    help = 'Reconcile storage blobs with file records'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max items of each kind (default: {_DEFAULT_BATCH_SIZE})',
        )
        parser.add_argument(
            '--grace',
            type=int,
            default=None,
            help='Skip blobs younger than this many seconds',
        )
        parser.add_argument(
            '--purge-missing-rows',
            action='store_true',
            help='Also delete file records whose blob is missing',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        grace = options['grace']
        if grace is None:
            grace = settings.FILES_ORPHAN_BLOB_GRACE

        orphan_keys = find_orphan_blobs(grace, batch_size)
        missing_rows = find_missing_blobs(batch_size)

        if dry_run:
            for key in orphan_keys:
                self.stdout.write(f'Would delete orphan blob: {key}')
            for file_instance in missing_rows:
                self.stdout.write(
                    f'Blob missing: {file_instance.storage_id} '
                    f'(file: {file_instance.id}, '
                    f'owner: {file_instance.owner_id})',
                )
            self.stdout.write(
                self.style.SUCCESS(
                    f'Would delete {len(orphan_keys)} orphan blobs, '
                    f'found {len(missing_rows)} missing-blob rows',
                ),
            )
            return

        deleted_blobs = 0
        failed = 0
        for key in orphan_keys:
            try:
                purge_orphan_blob(key)
            except StorageDeleteFailedError as exc:
                self.stderr.write(f'Failed to delete {key}: {exc}')
                logger.exception('Failed to purge orphan blob: %s', key)
                failed += 1
            else:
                deleted_blobs += 1

        purged_rows = 0
        for file_instance in missing_rows:
            if options['purge_missing_rows']:
                purge_missing_blob_row(file_instance)
                purged_rows += 1
            else:
                self.stdout.write(
                    f'Blob missing: {file_instance.storage_id} '
                    f'(file: {file_instance.id})',
                )

        self.stdout.write(
            self.style.SUCCESS(
                f'Deleted {deleted_blobs} orphan blobs, '
                f'{purged_rows} missing-blob rows, {failed} failed',
            ),
        )
