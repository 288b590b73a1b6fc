"""Exceptions for files app."""

from uuid import UUID


class FilesError(Exception):
    """Base class for errors raised by files business logic."""


class UnauthorizedError(FilesError):
    """Raised when the caller has no resolvable identity."""

    def __init__(self) -> None:
        """Initialize UnauthorizedError."""
        super().__init__('Not authenticated')


class InvalidCredentialsError(FilesError):
    """Raised when a login attempt does not match an active user."""

    def __init__(self) -> None:
        """Initialize InvalidCredentialsError."""
        super().__init__('Invalid username or password')


class NotFoundError(FilesError):
    """Raised when a file or folder is absent or not owned by the caller.

    The message never reveals which of the two is the case, so
    non-owners cannot probe for the existence of other users' items.
    """

    def __init__(self, entity: str, entity_id: UUID | str | None) -> None:
        """Initialize NotFoundError.

        Args:
            entity: Kind of item looked up ('file' or 'folder').
            entity_id: Identifier the caller asked for.
        """
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f'{entity.capitalize()} not found or unauthorized')


class ForbiddenError(NotFoundError):
    """Raised when the item exists but belongs to another user.

    Carries the same message as NotFoundError; the distinct type is only
    meant for server-side logging.
    """


class StorageDeleteFailedError(FilesError):
    """Raised when the object store refuses to delete a blob.

    The metadata row is kept, so the delete can be retried.
    """

    def __init__(self, storage_id: str) -> None:
        """Initialize StorageDeleteFailedError.

        Args:
            storage_id: Object key that could not be deleted.
        """
        self.storage_id = storage_id
        super().__init__('Failed to delete file from storage')


class StorageUploadUnverifiedError(FilesError):
    """Raised when registering a file whose blob is not in storage."""

    def __init__(self, storage_id: str) -> None:
        """Initialize StorageUploadUnverifiedError.

        Args:
            storage_id: Object key reported by the client.
        """
        self.storage_id = storage_id
        super().__init__('Uploaded file was not found in storage')


class FolderNotEmptyError(FilesError):
    """Raised when deleting a folder that still has children."""

    def __init__(self, folder_id: UUID, children_count: int) -> None:
        """Initialize FolderNotEmptyError.

        Args:
            folder_id: Folder that was about to be deleted.
            children_count: Number of direct children found.
        """
        self.folder_id = folder_id
        self.children_count = children_count
        super().__init__(
            f'Folder is not empty: {children_count} item(s) inside',
        )
