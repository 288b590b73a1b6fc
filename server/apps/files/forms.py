"""Validation of JSON payloads sent to the files API."""

from typing import Final

from django import forms

from server.apps.files.logic.folder_operations import DeletePolicy
from server.apps.files.models import NAME_MAX_LENGTH

_STORAGE_ID_MAX_LENGTH: Final = 1024


class LoginForm(forms.Form):
    """Username and password of a session login."""

    username = forms.CharField(max_length=150)
    password = forms.CharField(strip=False)


class UploadGrantForm(forms.Form):
    """Request for a presigned upload URL."""

    name = forms.CharField(max_length=NAME_MAX_LENGTH)
    content_type = forms.CharField(max_length=255, required=False)


class RegisterFileForm(forms.Form):
    """Report of a finished upload."""

    name = forms.CharField(max_length=NAME_MAX_LENGTH)
    size = forms.IntegerField(min_value=0)
    storage_id = forms.CharField(max_length=_STORAGE_ID_MAX_LENGTH)
    parent_id = forms.UUIDField(required=False)
    content_type = forms.CharField(max_length=255, required=False)


class CreateFolderForm(forms.Form):
    """Request to create a folder."""

    name = forms.CharField(max_length=NAME_MAX_LENGTH)
    parent_id = forms.UUIDField(required=False)


class ListItemsForm(forms.Form):
    """Query string of a folder listing."""

    parent_id = forms.UUIDField(required=False)


class DeleteFolderForm(forms.Form):
    """Query string of a folder deletion."""

    policy = forms.ChoiceField(
        choices=[(policy.value, policy.value) for policy in DeletePolicy],
        required=False,
    )
