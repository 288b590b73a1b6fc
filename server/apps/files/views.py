"""JSON API views of the files app.

Each view maps one request to one business operation; identity comes
from Django's session authentication.
"""

import json
import logging
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any, Final
from uuid import UUID

from django import forms
from django.contrib import auth
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from server.apps.files import forms as api_forms
from server.apps.files.exceptions import (
    FilesError,
    FolderNotEmptyError,
    InvalidCredentialsError,
    NotFoundError,
    StorageDeleteFailedError,
    StorageUploadUnverifiedError,
    UnauthorizedError,
)
from server.apps.files.logic import file_operations, folder_operations
from server.apps.files.logic.access import resolve_caller
from server.apps.files.logic.folder_operations import ListedFile
from server.apps.files.models import Folder

_View = Callable[..., HttpResponse]

_ERROR_STATUSES: Final = (
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED),
    (InvalidCredentialsError, HTTPStatus.UNAUTHORIZED),
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (FolderNotEmptyError, HTTPStatus.CONFLICT),
    (StorageUploadUnverifiedError, HTTPStatus.UNPROCESSABLE_ENTITY),
    (StorageDeleteFailedError, HTTPStatus.BAD_GATEWAY),
)

logger = logging.getLogger(__name__)


def json_api(view: _View) -> _View:
    """Translate business errors into JSON error responses."""
    @wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except ValidationError as error:
            return _validation_error_response(error)
        except FilesError as error:
            return JsonResponse(
                {'error': str(error)},
                status=_status_for(error),
            )
    return wrapper


@require_GET
@ensure_csrf_cookie
@json_api
def current_user(request: HttpRequest) -> HttpResponse:
    """Return the identity of the caller.

    Also sets the CSRF cookie that write requests echo back in the
    ``X-CSRFToken`` header.
    """
    user = resolve_caller(request)
    if user is None:
        raise UnauthorizedError
    return JsonResponse(_serialize_user(user))


@require_POST
@json_api
def login(request: HttpRequest) -> HttpResponse:
    """Start a session for a username and password.

    Login rotates the CSRF token; clients pick the new one up from the
    cookie set on this response.
    """
    payload = _clean(api_forms.LoginForm, _load_json(request))
    user = auth.authenticate(
        request,
        username=payload['username'],
        password=payload['password'],
    )
    if user is None:
        logger.warning('Failed login for user: %s', payload['username'])
        raise InvalidCredentialsError
    auth.login(request, user)
    logger.info('User %s logged in', user.pk)
    return JsonResponse(_serialize_user(user))


@require_POST
@json_api
def logout(request: HttpRequest) -> HttpResponse:
    """End the current session."""
    auth.logout(request)
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


@require_POST
@json_api
def upload_grant(request: HttpRequest) -> HttpResponse:
    """Issue a presigned upload URL."""
    payload = _clean(api_forms.UploadGrantForm, _load_json(request))
    grant = file_operations.issue_upload_grant(
        resolve_caller(request),
        payload['name'],
        payload['content_type'],
    )
    return JsonResponse({
        'upload_url': grant.upload_url,
        'storage_id': grant.storage_id,
        'expires_in': grant.expires_in,
    })


@require_POST
@json_api
def register_file(request: HttpRequest) -> HttpResponse:
    """Record a finished upload."""
    payload = _clean(api_forms.RegisterFileForm, _load_json(request))
    file_instance = file_operations.register_file(
        resolve_caller(request),
        name=payload['name'],
        size_bytes=payload['size'],
        storage_id=payload['storage_id'],
        parent_id=payload['parent_id'],
        content_type=payload['content_type'],
    )
    return JsonResponse({'id': file_instance.id}, status=HTTPStatus.CREATED)


@require_http_methods(['DELETE'])
@json_api
def delete_file(request: HttpRequest, file_id: UUID) -> HttpResponse:
    """Delete a file and its blob."""
    file_operations.delete_file(resolve_caller(request), file_id)
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


@require_POST
@json_api
def create_folder(request: HttpRequest) -> HttpResponse:
    """Create a folder."""
    payload = _clean(api_forms.CreateFolderForm, _load_json(request))
    folder = folder_operations.create_folder(
        resolve_caller(request),
        payload['name'],
        payload['parent_id'],
    )
    return JsonResponse({'id': folder.id}, status=HTTPStatus.CREATED)


@require_http_methods(['DELETE'])
@json_api
def delete_folder(request: HttpRequest, folder_id: UUID) -> HttpResponse:
    """Delete a folder, treating its contents by policy."""
    payload = _clean(api_forms.DeleteFolderForm, request.GET)
    folder_operations.delete_folder(
        resolve_caller(request),
        folder_id,
        policy=payload['policy'] or None,
    )
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


@require_GET
@json_api
def list_items(request: HttpRequest) -> HttpResponse:
    """List files and folders directly inside a folder."""
    payload = _clean(api_forms.ListItemsForm, request.GET)
    listing = folder_operations.list_children(
        resolve_caller(request),
        payload['parent_id'],
    )
    return JsonResponse({
        'files': [_serialize_file(listed) for listed in listing.files],
        'folders': [_serialize_folder(folder) for folder in listing.folders],
    })


def _load_json(request: HttpRequest) -> dict[str, Any]:
    try:
        payload = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise ValidationError('Request body is not valid JSON') from error
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def _clean(form_class: type[forms.Form], data: Any) -> dict[str, Any]:
    form = form_class(data)
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())
    return form.cleaned_data


def _validation_error_response(error: ValidationError) -> JsonResponse:
    body: dict[str, Any] = {'error': 'Invalid request'}
    if hasattr(error, 'error_dict'):
        body['fields'] = error.message_dict
    else:
        body['error'] = ' '.join(error.messages)
    return JsonResponse(body, status=HTTPStatus.BAD_REQUEST)


def _status_for(error: FilesError) -> HTTPStatus:
    for error_class, status in _ERROR_STATUSES:
        if isinstance(error, error_class):
            return status
    logger.error('Unmapped files error: %r', error)
    return HTTPStatus.INTERNAL_SERVER_ERROR


def _serialize_user(user: Any) -> dict[str, Any]:
    return {
        'id': user.pk,
        'username': user.get_username(),
        'email': user.email,
    }


def _serialize_file(listed: ListedFile) -> dict[str, Any]:
    file_instance = listed.file
    return {
        'id': file_instance.id,
        'name': file_instance.name,
        'size': file_instance.size_bytes,
        'storage_id': file_instance.storage_id,
        'content_type': file_instance.content_type,
        'parent_id': file_instance.parent_id,
        'created_at': file_instance.created_at,
        'url': listed.download_url,
    }


def _serialize_folder(folder: Folder) -> dict[str, Any]:
    return {
        'id': folder.id,
        'name': folder.name,
        'parent_id': folder.parent_id,
        'created_at': folder.created_at,
    }
