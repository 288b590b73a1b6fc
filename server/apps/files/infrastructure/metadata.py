"""Naming utilities for stored files."""

import mimetypes
import uuid
from typing import Final

from django.core.exceptions import SuspiciousFileOperation, ValidationError
from django.utils.text import get_valid_filename

from server.apps.files.models import NAME_MAX_LENGTH

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'
_FALLBACK_KEY_NAME: Final = 'file'


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from filename.

    Uses Python's built-in mimetypes module to guess MIME type
    from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def validate_name(name: str) -> str:
    """Validate a display name of a file or folder.

    Args:
        name: Name proposed by the user.

    Returns:
        Name with surrounding whitespace removed.

    Raises:
        ValidationError: If the name is blank or too long.
    """
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError('Name cannot be empty')
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValidationError(
            f'Name cannot be longer than {NAME_MAX_LENGTH} characters',
        )
    return cleaned


def storage_prefix(owner_id: int) -> str:
    """Key prefix under which all blobs of one user are stored.

    Args:
        owner_id: Owner's user ID.

    Returns:
        Prefix ending with a slash (e.g., '123/').
    """
    return f'{owner_id}/'


def generate_storage_id(owner_id: int, name: str) -> str:
    """Generate a collision-resistant object key for a new upload.

    The display name only makes keys readable; uniqueness comes from
    a random UUID4 token, so uploads with equal names never collide.

    Args:
        owner_id: Owner's user ID.
        name: Original filename.

    Returns:
        Object key (e.g., '123/report.pdf-1f0c...e9').
    """
    try:
        safe_name = get_valid_filename(name)
    except SuspiciousFileOperation:
        safe_name = _FALLBACK_KEY_NAME
    return '{prefix}{name}-{token}'.format(
        prefix=storage_prefix(owner_id),
        name=safe_name,
        token=uuid.uuid4().hex,
    )
