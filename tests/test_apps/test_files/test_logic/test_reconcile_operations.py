"""Tests for reconciliation between rows and blobs."""

import pytest

from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.reconcile_operations import (
    find_missing_blobs,
    find_orphan_blobs,
    purge_missing_blob_row,
    purge_orphan_blob,
)
from server.apps.files.models import File


@pytest.mark.django_db
def test_find_orphan_blobs(user, mock_s3, put_blob, make_file):
    """Test only unregistered blobs are reported."""
    registered = put_blob(f'{user.id}/kept.txt-1')
    orphan = put_blob(f'{user.id}/abandoned.txt-2')
    make_file('kept.txt', storage_id=registered)

    assert find_orphan_blobs(grace_seconds=0, limit=10) == [orphan]


@pytest.mark.django_db
def test_find_orphan_blobs_respects_grace(user, mock_s3, put_blob):
    """Test fresh uploads are not treated as orphans."""
    put_blob(f'{user.id}/in-flight.txt-1')

    assert find_orphan_blobs(grace_seconds=3600, limit=10) == []


@pytest.mark.django_db
def test_find_orphan_blobs_limit(user, mock_s3, put_blob):
    """Test the number of reported orphans is capped."""
    for index in range(5):
        put_blob(f'{user.id}/orphan-{index}')

    assert len(find_orphan_blobs(grace_seconds=0, limit=3)) == 3


@pytest.mark.django_db
def test_find_missing_blobs(user, mock_s3, put_blob, make_file):
    """Test rows without blobs are reported."""
    make_file('present.txt', storage_id=put_blob(f'{user.id}/present'))
    missing = make_file('gone.txt', storage_id=f'{user.id}/gone')

    assert find_missing_blobs(limit=10) == [missing]


@pytest.mark.django_db
def test_purge_orphan_blob(user, mock_s3, put_blob):
    """Test orphan blob is deleted."""
    key = put_blob(f'{user.id}/orphan')

    purge_orphan_blob(key)

    assert not get_storage().exists(key)


@pytest.mark.django_db
def test_purge_missing_blob_row(make_file):
    """Test row without blob is deleted."""
    file_instance = make_file()

    purge_missing_blob_row(file_instance)

    assert not File.objects.exists()
