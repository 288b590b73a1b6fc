"""Business logic for folder operations and hierarchy listing."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from functools import partial
from typing import Any, final
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from server.apps.files.exceptions import FolderNotEmptyError
from server.apps.files.infrastructure.metadata import validate_name
from server.apps.files.infrastructure.storage import get_storage
from server.apps.files.logic.access import (
    get_owned_folder,
    is_authenticated,
    require_caller,
)
from server.apps.files.logic.file_operations import delete_blob
from server.apps.files.models import File, Folder

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


class DeletePolicy(StrEnum):
    """What happens to the contents of a deleted folder."""

    ORPHAN = 'orphan'
    REJECT = 'reject'
    CASCADE = 'cascade'


@final
@dataclass(frozen=True, slots=True)
class ListedFile:
    """File row with a presigned download URL attached."""

    file: File
    download_url: str


@final
@dataclass(frozen=True, slots=True)
class Listing:
    """Direct children of one folder (or of the root)."""

    files: list[ListedFile] = field(default_factory=list)
    folders: list[Folder] = field(default_factory=list)


def create_folder(
    user: _User | None,
    name: str,
    parent_id: UUID | str | None = None,
) -> Folder:
    """Create a folder owned by the caller.

    Names are not unique: two folders with the same name may share
    a parent.

    Args:
        user: Caller, None for anonymous requests.
        name: Folder name.
        parent_id: Containing folder, None for the root.

    Returns:
        Created Folder instance.

    Raises:
        UnauthorizedError: If there is no authenticated caller.
        NotFoundError: If the parent folder is not the caller's.
        ValidationError: If the name is blank or too long.
    """
    owner = require_caller(user)
    display_name = validate_name(name)
    parent = None
    if parent_id is not None:
        parent = get_owned_folder(owner, parent_id)

    folder = Folder.objects.create(
        owner=owner,
        name=display_name,
        parent=parent,
    )
    logger.info(
        'Folder created: %s (ID: %s, parent: %s)',
        display_name,
        folder.id,
        parent_id,
    )
    return folder


def list_children(
    user: _User | None,
    parent_id: UUID | str | None = None,
) -> Listing:
    """List files and folders directly inside a folder.

    Anonymous callers get an empty listing instead of an error. Rows are
    always filtered by owner as well as by parent.

    Args:
        user: Caller, None for anonymous requests.
        parent_id: Folder to list, None for the root.

    Returns:
        Listing with presigned download URLs for every file.
    """
    if not is_authenticated(user):
        return Listing()

    logger.debug('Listing folder %s for user %s', parent_id, user.pk)
    try:
        files = list(File.objects.filter(owner=user, parent_id=parent_id))
        folders = list(Folder.objects.filter(owner=user, parent_id=parent_id))
    except ValidationError:
        # Malformed folder ID matches nothing
        return Listing()

    download_urls = _presign_downloads([
        file_instance.storage_id for file_instance in files
    ])
    return Listing(
        files=[
            ListedFile(file=file_instance, download_url=url)
            for file_instance, url in zip(files, download_urls, strict=True)
        ],
        folders=folders,
    )


def delete_folder(
    user: _User | None,
    folder_id: UUID | str,
    policy: DeletePolicy | str | None = None,
) -> None:
    """Delete a folder owned by the caller.

    Args:
        user: Caller, None for anonymous requests.
        folder_id: ID of folder to delete.
        policy: How to treat the folder contents. Defaults to
            FILES_FOLDER_DELETE_POLICY:
            - orphan: remove only the folder row, children keep
              referencing the removed folder
            - reject: refuse while the folder has children
            - cascade: remove every descendant file and folder

    Raises:
        UnauthorizedError: If there is no authenticated caller.
        NotFoundError: If the folder is absent or owned by someone else.
        ValidationError: If the policy is unknown.
        FolderNotEmptyError: If policy is reject and the folder has children.
        StorageDeleteFailedError: If policy is cascade and a blob could
            not be deleted.
    """
    owner = require_caller(user)
    folder = get_owned_folder(owner, folder_id)
    resolved_policy = _resolve_policy(policy)

    if resolved_policy == DeletePolicy.REJECT:
        children_count = (
            File.objects.filter(owner=owner, parent=folder).count()
            + Folder.objects.filter(owner=owner, parent=folder).count()
        )
        if children_count:
            logger.info(
                'Refusing to delete non-empty folder: ID=%s (%d children)',
                folder.id,
                children_count,
            )
            raise FolderNotEmptyError(folder.id, children_count)
    elif resolved_policy == DeletePolicy.CASCADE:
        _delete_tree(owner, folder)
        return

    folder.delete()
    logger.info('Folder deleted: ID=%s (policy: %s)', folder_id, resolved_policy)


def collect_descendants(
    owner: _User,
    folder: Folder,
) -> tuple[list[Folder], list[File]]:
    """Walk the subtree below a folder breadth-first.

    Args:
        owner: Owner of the folder; foreign rows are never collected.
        folder: Root of the subtree (not included in the result).

    Returns:
        Descendant folders and descendant files.
    """
    folders: list[Folder] = []
    files: list[File] = []
    pending = [folder.id]
    while pending:
        files.extend(File.objects.filter(owner=owner, parent_id__in=pending))
        children = list(
            Folder.objects.filter(owner=owner, parent_id__in=pending),
        )
        folders.extend(children)
        pending = [child.id for child in children]
    return folders, files


def _delete_tree(owner: _User, folder: Folder) -> None:
    """Delete a folder with everything below it.

    Every file goes blob first, then row, so a storage failure stops the
    walk with each file either fully present or fully gone. Folder rows
    are removed together once no file is left.
    """
    folders, files = collect_descendants(owner, folder)
    logger.info(
        'Cascade delete of folder %s: %d folders, %d files',
        folder.id,
        len(folders),
        len(files),
    )

    for file_instance in files:
        delete_blob(file_instance.storage_id)
        file_instance.delete()

    folder_ids = [folder.id, *(child.id for child in folders)]
    with transaction.atomic():
        Folder.objects.filter(owner=owner, id__in=folder_ids).delete()
    logger.info('Folder tree deleted: ID=%s', folder.id)


def _resolve_policy(policy: DeletePolicy | str | None) -> DeletePolicy:
    raw_policy = policy or settings.FILES_FOLDER_DELETE_POLICY
    try:
        return DeletePolicy(raw_policy)
    except ValueError:
        raise ValidationError(
            f'Unknown folder delete policy: {raw_policy}',
        ) from None


def _presign_downloads(storage_ids: list[str]) -> list[str]:
    """Presign download URLs concurrently, keeping input order."""
    if not storage_ids:
        return []

    storage = get_storage()
    presign = partial(
        storage.presign_download,
        expires_in=settings.FILES_PRESIGNED_URL_EXPIRY,
    )
    max_workers = min(settings.FILES_PRESIGN_MAX_WORKERS, len(storage_ids))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(presign, storage_ids))
