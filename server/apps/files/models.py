"""Database models for files app."""

import uuid
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
NAME_MAX_LENGTH: Final = 255
_STORAGE_ID_MAX_LENGTH: Final = 1024
_CONTENT_TYPE_MAX_LENGTH: Final = 255


def _parent_field(related_name: str) -> models.ForeignKey:
    """Build the optional reference to a containing folder.

    Deleting a folder does not touch its children: the reference carries
    no database constraint, so children keep pointing at the removed id.
    """
    return models.ForeignKey(
        'Folder',
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name=related_name,
        help_text='Containing folder, empty for root-level items',
    )


@final
class Folder(models.Model):
    """Named container owned by exactly one user.

    Folders form a tree through ``parent``; a null parent is the root.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
    )

    name = models.CharField(max_length=NAME_MAX_LENGTH)

    parent = _parent_field('subfolders')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name', 'created_at']

        indexes: ClassVar[list[models.Index]] = [
            # Listings always look up by owner and parent together
            models.Index(
                fields=['owner', 'parent'],
                name='folders_owner_parent_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=~models.Q(name=''),
                name='folders_name_not_empty',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner_id}:{self.name}'


@final
class File(models.Model):
    """Metadata of a blob stored in S3-compatible storage.

    ``storage_id`` is the object key of the blob and is decoupled from
    the display ``name``, so two files may share a name. Rows are only
    created after the client reports a finished upload.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
    )

    name = models.CharField(
        max_length=NAME_MAX_LENGTH,
        help_text='Original filename shown to the user',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    storage_id = models.CharField(
        max_length=_STORAGE_ID_MAX_LENGTH,
        unique=True,
        help_text='Object key in storage: {owner_id}/{name}-{token}',
    )

    content_type = models.CharField(
        max_length=_CONTENT_TYPE_MAX_LENGTH,
        blank=True,
        default='',
    )

    parent = _parent_field('files')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name', 'created_at']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['owner', 'parent'],
                name='files_owner_parent_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=~models.Q(name=''),
                name='files_name_not_empty',
            ),
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner_id}:{self.name}'
