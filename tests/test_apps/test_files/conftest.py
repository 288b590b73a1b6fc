"""Shared fixtures for files app tests."""

from typing import Final

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.files.models import File, Folder

User = get_user_model()

TEST_BUCKET: Final = 'cloudlet-test'


@pytest.fixture(autouse=True)
def s3_settings(settings):
    """Point the default storage at the test bucket with fake credentials."""
    settings.STORAGES = {
        'default': {
            'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
            'OPTIONS': {
                'bucket_name': TEST_BUCKET,
                'access_key': 'testing',
                'secret_key': 'testing',
                'region_name': 'us-east-1',
                'signature_version': 's3v4',
                'file_overwrite': False,
                'default_acl': None,
            },
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }
    settings.FILES_PRESIGNED_URL_EXPIRY = 3600
    settings.FILES_VERIFY_UPLOADS = False
    settings.FILES_FOLDER_DELETE_POLICY = 'orphan'
    return settings


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with the test bucket.

    Yields:
        boto3 S3 resource with the test bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=TEST_BUCKET)
        yield conn


@pytest.fixture
def put_blob(mock_s3):
    """Store a blob directly in the mocked bucket, as a browser upload would.

    Returns:
        Function taking an object key and optional body.
    """
    def factory(key: str, body: bytes = b'test file content') -> str:
        mock_s3.Object(TEST_BUCKET, key).put(Body=body)
        return key
    return factory


@pytest.fixture
def make_file(user):
    """Create File rows without going through the upload flow.

    Returns:
        Function creating a File with sensible defaults.
    """
    def factory(
        name: str = 'a.txt',
        owner=None,
        parent=None,
        storage_id: str | None = None,
        size_bytes: int = 10,
    ) -> File:
        owner = owner or user
        return File.objects.create(
            owner=owner,
            name=name,
            size_bytes=size_bytes,
            storage_id=storage_id or f'{owner.pk}/{name}-{File.objects.count()}',
            parent=parent,
        )
    return factory


@pytest.fixture
def make_folder(user):
    """Create Folder rows directly.

    Returns:
        Function creating a Folder with sensible defaults.
    """
    def factory(name: str = 'Docs', owner=None, parent=None) -> Folder:
        return Folder.objects.create(
            owner=owner or user,
            name=name,
            parent=parent,
        )
    return factory
