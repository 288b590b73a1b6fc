"""Business logic for file operations."""

import logging
from dataclasses import dataclass
from typing import Any, final
from uuid import UUID

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from server.apps.files.exceptions import (
    StorageDeleteFailedError,
    StorageUploadUnverifiedError,
)
from server.apps.files.infrastructure.metadata import (
    detect_mime_type,
    generate_storage_id,
    validate_name,
)
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.access import (
    get_owned_file,
    get_owned_folder,
    require_caller,
)
from server.apps.files.models import File

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class UploadGrant:
    """Presigned upload URL together with the key it writes to."""

    upload_url: str
    storage_id: str
    expires_in: int


def issue_upload_grant(
    user: _User | None,
    name: str,
    content_type: str = '',
) -> UploadGrant:
    """Authorize a direct browser upload to storage.

    No metadata is written at this step: an abandoned upload leaves at
    most an orphan blob, which the reconciliation sweep removes.

    Args:
        user: Caller, None for anonymous requests.
        name: Original filename.
        content_type: MIME type the client will upload with. Guessed
            from the filename when empty.

    Returns:
        UploadGrant with the presigned PUT URL and the new storage key.

    Raises:
        UnauthorizedError: If there is no authenticated caller.
        ValidationError: If the name is blank or too long.
    """
    owner = require_caller(user)
    display_name = validate_name(name)
    content_type = content_type or detect_mime_type(display_name)
    storage_id = generate_storage_id(owner.pk, display_name)
    expires_in = settings.FILES_PRESIGNED_URL_EXPIRY

    upload_url = get_storage().presign_upload(
        storage_id,
        content_type,
        expires_in,
    )
    logger.info(
        'Issued upload grant for user %s: %s (%s)',
        owner.pk,
        storage_id,
        content_type,
    )
    return UploadGrant(
        upload_url=upload_url,
        storage_id=storage_id,
        expires_in=expires_in,
    )


def register_file(  # noqa: WPS211
    user: _User | None,
    name: str,
    size_bytes: int,
    storage_id: str,
    parent_id: UUID | str | None = None,
    content_type: str = '',
) -> File:
    """Create the metadata row of a finished upload.

    The blob is trusted to exist unless FILES_VERIFY_UPLOADS is enabled.

    Args:
        user: Caller, None for anonymous requests.
        name: Original filename.
        size_bytes: Size reported by the client.
        storage_id: Key returned by issue_upload_grant.
        parent_id: Containing folder, None for the root.
        content_type: MIME type of the upload.

    Returns:
        Created File instance.

    Raises:
        UnauthorizedError: If there is no authenticated caller.
        NotFoundError: If the parent folder is not the caller's.
        ValidationError: If any field is invalid or the storage ID is
            already registered.
        StorageUploadUnverifiedError: If verification is enabled and the
            blob is missing.
    """
    owner = require_caller(user)
    display_name = validate_name(name)
    if size_bytes < 0:
        raise ValidationError('File size cannot be negative')
    if not storage_id:
        raise ValidationError('Storage ID cannot be empty')
    parent = None
    if parent_id is not None:
        parent = get_owned_folder(owner, parent_id)

    if settings.FILES_VERIFY_UPLOADS and not get_storage().exists(storage_id):
        logger.warning(
            'Refusing to register missing upload for user %s: %s',
            owner.pk,
            storage_id,
        )
        raise StorageUploadUnverifiedError(storage_id)

    try:
        with transaction.atomic():
            file_instance = File.objects.create(
                owner=owner,
                name=display_name,
                size_bytes=size_bytes,
                storage_id=storage_id,
                content_type=content_type,
                parent=parent,
            )
    except IntegrityError as error:
        logger.warning('Storage ID already registered: %s', storage_id)
        raise ValidationError('Storage ID is already registered') from error
    logger.info(
        'File record created in database: %s (ID: %s)',
        storage_id,
        file_instance.id,
    )
    return file_instance


def delete_file(user: _User | None, file_id: UUID | str) -> None:
    """Delete file from storage and database.

    Transaction safety: delete the blob first, then the row. If storage
    refuses, the row is kept so the delete can be retried, and metadata
    never points at a blob that was already removed.

    Args:
        user: Caller, None for anonymous requests.
        file_id: ID of file to delete.

    Raises:
        UnauthorizedError: If there is no authenticated caller.
        NotFoundError: If the file is absent or owned by someone else.
        StorageDeleteFailedError: If the blob could not be deleted.
    """
    owner = require_caller(user)
    file_instance = get_owned_file(owner, file_id)

    delete_blob(file_instance.storage_id)
    file_instance.delete()
    logger.info('File record deleted from database: ID=%s', file_id)


def delete_blob(storage_id: str) -> None:
    """Delete a blob, translating backend errors.

    Raises:
        StorageDeleteFailedError: If storage reports an error.
    """
    try:
        get_storage().delete(storage_id)
    except (BotoCoreError, ClientError) as error:
        raise StorageDeleteFailedError(storage_id) from error
