"""Custom storage backend for S3-compatible storage."""

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import final, override

from django.core.files.storage import default_storage
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """Custom S3 storage backend for user files.

    Extends django-storages S3Storage with:
    - Presigned PUT and GET URLs so browsers talk to the bucket directly
    - Enhanced error logging
    - Prefix listing for the reconciliation sweep
    """

    def presign_upload(
        self,
        name: str,
        content_type: str,
        expires_in: int,
    ) -> str:
        """Create a presigned URL that allows one PUT of the given key.

        The client must send the same Content-Type header, otherwise
        the signature does not match.

        Args:
            name: Object key the blob will be stored under.
            content_type: MIME type bound into the signature.
            expires_in: URL lifetime in seconds.

        Returns:
            Presigned URL.

        Raises:
            Exception: If the URL cannot be signed.
        """
        return self._presign(
            'put_object',
            {'Key': name, 'ContentType': content_type},
            expires_in,
        )

    def presign_download(self, name: str, expires_in: int) -> str:
        """Create a presigned URL that allows GET of the given key.

        Args:
            name: Object key of the blob.
            expires_in: URL lifetime in seconds.

        Returns:
            Presigned URL.
        """
        return self._presign('get_object', {'Key': name}, expires_in)

    @override
    def delete(self, name: str) -> None:
        """Delete file from S3 with error handling and logging.

        Deleting a key that does not exist is not an error.

        Args:
            name: Storage path of file to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def iter_objects(self, prefix: str = '') -> Iterator[tuple[str, datetime]]:
        """Iterate over stored blobs under a key prefix.

        Args:
            prefix: Key prefix, empty for the whole bucket.

        Yields:
            Pairs of object key and last modification time.
        """
        logger.debug('Listing storage objects with prefix: %r', prefix)
        for summary in self.bucket.objects.filter(Prefix=prefix):
            yield summary.key, summary.last_modified

    def _presign(
        self,
        client_method: str,
        params: dict[str, str],
        expires_in: int,
    ) -> str:
        try:
            return self.connection.meta.client.generate_presigned_url(
                client_method,
                Params={'Bucket': self.bucket_name, **params},
                ExpiresIn=expires_in,
            )
        except Exception:
            logger.exception(
                'Failed to presign %s for key: %s',
                client_method,
                params['Key'],
            )
            raise


def get_storage() -> FileStorage:
    """Get the configured default storage backend.

    Returns:
        FileStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]
