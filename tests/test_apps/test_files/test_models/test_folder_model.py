"""Tests for Folder model."""

import pytest

from server.apps.files.models import File, Folder


@pytest.mark.django_db
def test_folder_model_str(make_folder, user):
    """Test Folder __str__ method."""
    folder = make_folder('Photos')

    assert str(folder) == f'{user.id}:Photos'


@pytest.mark.django_db
def test_folder_delete_keeps_children(make_folder, make_file):
    """Test deleting a folder row leaves children pointing at it."""
    folder = make_folder()
    child = make_folder('Child', parent=folder)
    file_instance = make_file(parent=folder)
    folder_id = folder.id

    folder.delete()

    child.refresh_from_db()
    file_instance.refresh_from_db()
    assert not Folder.objects.filter(id=folder_id).exists()
    assert child.parent_id == folder_id
    assert file_instance.parent_id == folder_id
    assert File.objects.filter(parent_id=folder_id).count() == 1
