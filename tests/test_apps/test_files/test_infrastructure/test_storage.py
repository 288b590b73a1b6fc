"""Tests for the S3 storage backend."""

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from botocore.exceptions import ClientError
from django.utils import timezone

from server.apps.files.infrastructure.storage import FileStorage, get_storage


def test_get_storage_is_file_storage(mock_s3):
    """Test the default storage is the custom backend."""
    storage = get_storage()

    assert storage.bucket_name == 'cloudlet-test'
    assert isinstance(storage, FileStorage)


def test_presign_upload(mock_s3):
    """Test presigned PUT URL is scoped to key and expiry."""
    url = get_storage().presign_upload('1/a.txt-xyz', 'text/plain', 3600)

    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    assert parsed.path.endswith('/1/a.txt-xyz')
    assert query['X-Amz-Expires'] == ['3600']


def test_presign_download(mock_s3):
    """Test presigned GET URL carries its expiry."""
    url = get_storage().presign_download('1/a.txt-xyz', 60)

    query = parse_qs(urlparse(url).query)
    assert query['X-Amz-Expires'] == ['60']
    assert 'X-Amz-Signature' in query


def test_delete_removes_blob(mock_s3, put_blob):
    """Test delete removes the object."""
    put_blob('1/a.txt-xyz')
    storage = get_storage()

    storage.delete('1/a.txt-xyz')

    assert not storage.exists('1/a.txt-xyz')


def test_delete_missing_blob_is_not_error(mock_s3):
    """Test deleting an absent key succeeds."""
    get_storage().delete('1/never-uploaded')


def test_delete_failure_is_raised(mock_s3, monkeypatch):
    """Test backend errors propagate after logging."""
    def failing_delete(self, name):
        raise ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'denied'}},
            'DeleteObject',
        )

    monkeypatch.setattr('storages.backends.s3.S3Storage.delete', failing_delete)

    with pytest.raises(ClientError):
        get_storage().delete('1/a.txt-xyz')


def test_iter_objects_by_prefix(mock_s3, put_blob):
    """Test listing is limited to the prefix."""
    put_blob('1/a.txt-1')
    put_blob('1/b.txt-2')
    put_blob('2/c.txt-3')

    objects = dict(get_storage().iter_objects('1/'))

    assert set(objects) == {'1/a.txt-1', '1/b.txt-2'}
    for last_modified in objects.values():
        assert last_modified <= timezone.now() + timedelta(seconds=1)
