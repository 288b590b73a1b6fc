"""Integration tests for presigned URLs against MinIO.

These tests verify that browsers can upload and download blobs through
presigned URLs when running in Docker Compose. They are deselected by
default; run them with ``pytest -m integration``.
"""
import os
from typing import Final

import boto3
import httpx
import pytest
from botocore.client import BaseClient
from botocore.exceptions import ClientError

from server.apps.files.infrastructure.storage import FileStorage

_TEST_BUCKET: Final = 'cloudlet'
_TEST_FILE_KEY: Final = '1/integration.txt-0123456789abcdef'
_TEST_FILE_CONTENT: Final = b'Hello from MinIO integration test!'
_TEST_CONTENT_TYPE: Final = 'text/plain'


@pytest.fixture
def minio_options() -> dict[str, str]:
    """Connection options for MinIO.

    Returns:
        Keyword arguments shared by boto3 and FileStorage.
    """
    return {
        'endpoint_url': os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        'access_key': os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        'secret_key': os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
    }


@pytest.fixture
def s3_client(minio_options: dict[str, str]) -> BaseClient:
    """Create S3 client for MinIO, with the test bucket in place.

    Args:
        minio_options: MinIO connection options.

    Returns:
        Configured boto3 S3 client for MinIO.
    """
    client = boto3.client(
        's3',
        endpoint_url=minio_options['endpoint_url'],
        aws_access_key_id=minio_options['access_key'],
        aws_secret_access_key=minio_options['secret_key'],
        region_name='us-east-1',
    )
    try:
        client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        client.create_bucket(Bucket=_TEST_BUCKET)
    return client


@pytest.fixture
def storage(
    s3_client: BaseClient,
    minio_options: dict[str, str],
) -> FileStorage:
    """Storage backend pointed at MinIO.

    Args:
        s3_client: boto3 S3 client (ensures the bucket exists).
        minio_options: MinIO connection options.

    Returns:
        FileStorage instance.
    """
    return FileStorage(
        bucket_name=_TEST_BUCKET,
        region_name='us-east-1',
        signature_version='s3v4',
        addressing_style='path',
        **minio_options,
    )


@pytest.mark.integration
def test_presigned_upload(s3_client: BaseClient, storage: FileStorage) -> None:
    """Test a browser-style PUT through a presigned URL stores the blob."""
    url = storage.presign_upload(_TEST_FILE_KEY, _TEST_CONTENT_TYPE, 60)

    response = httpx.put(
        url,
        content=_TEST_FILE_CONTENT,
        headers={'Content-Type': _TEST_CONTENT_TYPE},
    )
    assert response.status_code == httpx.codes.OK

    head = s3_client.head_object(Bucket=_TEST_BUCKET, Key=_TEST_FILE_KEY)
    assert head['ContentLength'] == len(_TEST_FILE_CONTENT)
    assert head['ContentType'] == _TEST_CONTENT_TYPE


@pytest.mark.integration
def test_presigned_download(s3_client: BaseClient, storage: FileStorage) -> None:
    """Test a presigned GET returns the stored content."""
    s3_client.put_object(
        Bucket=_TEST_BUCKET,
        Key=_TEST_FILE_KEY,
        Body=_TEST_FILE_CONTENT,
    )

    url = storage.presign_download(_TEST_FILE_KEY, 60)
    response = httpx.get(url)
    assert response.status_code == httpx.codes.OK
    assert response.content == _TEST_FILE_CONTENT


@pytest.mark.integration
def test_delete_object(s3_client: BaseClient, storage: FileStorage) -> None:
    """Test deleting an object from MinIO."""
    s3_client.put_object(
        Bucket=_TEST_BUCKET,
        Key=_TEST_FILE_KEY,
        Body=_TEST_FILE_CONTENT,
    )

    storage.delete(_TEST_FILE_KEY)

    with pytest.raises(ClientError) as exc_info:
        s3_client.head_object(Bucket=_TEST_BUCKET, Key=_TEST_FILE_KEY)

    assert exc_info.value.response['Error']['Code'] == '404'
    assert _TEST_FILE_KEY not in dict(storage.iter_objects('1/'))
