"""Caller identity and ownership checks."""

import logging
from typing import Any
from uuid import UUID

from django.core.exceptions import ValidationError
from django.http import HttpRequest

from server.apps.files.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from server.apps.files.models import File, Folder

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def resolve_caller(request: HttpRequest) -> _User | None:
    """Resolve the identity behind a request.

    Args:
        request: Incoming request after authentication middleware.

    Returns:
        Active authenticated user, or None for anonymous callers.
    """
    user = getattr(request, 'user', None)
    if not is_authenticated(user):
        return None
    return user


def is_authenticated(user: _User | None) -> bool:
    """Check that the caller is a real, active user."""
    return bool(
        user is not None
        and user.is_authenticated
        and user.is_active,
    )


def require_caller(user: _User | None) -> _User:
    """Return the caller or fail for anonymous access.

    Raises:
        UnauthorizedError: If there is no authenticated caller.
    """
    if not is_authenticated(user):
        raise UnauthorizedError
    return user


def get_owned_file(user: _User, file_id: UUID | str) -> File:
    """Get a file owned by the user.

    Raises:
        NotFoundError: If the file is absent or owned by someone else.
    """
    return _get_owned(File, 'file', user, file_id)  # type: ignore[return-value]


def get_owned_folder(user: _User, folder_id: UUID | str) -> Folder:
    """Get a folder owned by the user.

    Raises:
        NotFoundError: If the folder is absent or owned by someone else.
    """
    return _get_owned(Folder, 'folder', user, folder_id)  # type: ignore[return-value]


def _get_owned(
    model: type[File] | type[Folder],
    entity: str,
    user: _User,
    object_id: UUID | str,
) -> File | Folder:
    try:
        instance = model._default_manager.get(id=object_id)
    except (model.DoesNotExist, ValidationError):
        logger.warning('%s not found: ID=%s', entity.capitalize(), object_id)
        raise NotFoundError(entity, object_id) from None

    if instance.owner_id != user.pk:
        logger.warning(
            'User %s tried to access %s owned by %s: ID=%s',
            user.pk,
            entity,
            instance.owner_id,
            object_id,
        )
        raise ForbiddenError(entity, object_id)
    return instance
