"""Business logic for reconciling metadata rows with stored blobs.

Uploads and deletes span two stores without a shared transaction.
Two kinds of drift can remain:
- orphan blobs: uploaded through a grant but never registered
- missing blobs: rows whose blob disappeared from storage
"""

import logging
from datetime import timedelta
from itertools import batched
from typing import Final

from django.utils import timezone

from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.file_operations import delete_blob
from server.apps.files.models import File

_LOOKUP_CHUNK_SIZE: Final = 500

logger = logging.getLogger(__name__)


def find_orphan_blobs(grace_seconds: int, limit: int) -> list[str]:
    """Find blobs that no File row references.

    Blobs modified within the grace period are skipped, so uploads whose
    presigned URL is still valid are not mistaken for orphans.

    Args:
        grace_seconds: Minimum age of a blob to be considered.
        limit: Maximum number of keys to return.

    Returns:
        Object keys of orphan blobs, oldest listing order first.
    """
    cutoff = timezone.now() - timedelta(seconds=grace_seconds)
    candidates = (
        key
        for key, last_modified in get_storage().iter_objects()
        if last_modified <= cutoff
    )

    orphans: list[str] = []
    for chunk in batched(candidates, _LOOKUP_CHUNK_SIZE):
        known = set(
            File.objects.filter(
                storage_id__in=chunk,
            ).values_list('storage_id', flat=True),
        )
        orphans.extend(key for key in chunk if key not in known)
        if len(orphans) >= limit:
            break

    logger.info('Found %d orphan blobs older than %s', len(orphans), cutoff)
    return orphans[:limit]


def find_missing_blobs(limit: int) -> list[File]:
    """Find File rows whose blob is no longer in storage.

    Args:
        limit: Maximum number of rows to return.

    Returns:
        File instances, oldest first.
    """
    storage = get_storage()
    missing: list[File] = []
    for file_instance in File.objects.order_by('created_at').iterator():
        if not storage.exists(file_instance.storage_id):
            logger.warning(
                'Blob missing for file: %s (ID: %s)',
                file_instance.storage_id,
                file_instance.id,
            )
            missing.append(file_instance)
            if len(missing) >= limit:
                break
    return missing


def purge_orphan_blob(storage_id: str) -> None:
    """Delete an orphan blob.

    Raises:
        StorageDeleteFailedError: If storage reports an error.
    """
    delete_blob(storage_id)
    logger.info('Purged orphan blob: %s', storage_id)


def purge_missing_blob_row(file_instance: File) -> None:
    """Delete a File row whose blob is gone."""
    file_id = file_instance.id
    file_instance.delete()
    logger.info(
        'Purged row without blob: %s (ID: %s)',
        file_instance.storage_id,
        file_id,
    )
