"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.logic.file_operations import delete_blob
from server.apps.files.models import File, Folder


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin[Folder]):
    """Admin interface for Folder model."""

    list_display = [
        'name',
        'owner',
        'parent_display',
        'created_at',
    ]

    list_filter = [
        'created_at',
        'owner',
    ]

    search_fields = [
        'name',
    ]

    readonly_fields = [
        'id',
        'owner',
        'parent',
        'created_at',
    ]

    def parent_display(self, obj: Folder) -> str:
        """Display the parent folder ID, which may point at a deleted folder.

        Args:
            obj: Folder instance.

        Returns:
            Parent ID or '-' for root-level folders.
        """
        return str(obj.parent_id) if obj.parent_id else '-'
    parent_display.short_description = 'Parent'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model.

    Deleting from the admin removes the blob before the row, the same
    order the API uses.
    """

    list_display = [
        'name',
        'owner',
        'size_display',
        'content_type',
        'created_at',
    ]

    list_filter = [
        'content_type',
        'created_at',
        'owner',
    ]

    search_fields = [
        'name',
        'storage_id',
    ]

    readonly_fields = [
        'id',
        'owner',
        'storage_id',
        'size_bytes',
        'content_type',
        'parent',
        'created_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('id', 'name', 'owner', 'parent'),
        }),
        ('Storage', {
            'fields': (
                'storage_id',
                'size_bytes',
                'content_type',
            ),
        }),
        ('Timestamps', {
            'fields': ('created_at',),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string (e.g., '1.5 MB', '234 KB').
        """
        return format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def delete_model(self, request: HttpRequest, obj: File) -> None:
        """Delete the blob, then the row."""
        delete_blob(obj.storage_id)
        super().delete_model(request, obj)

    def delete_queryset(
        self,
        request: HttpRequest,
        queryset: QuerySet[File],
    ) -> None:
        """Delete blobs one by one, each followed by its row."""
        for file_instance in queryset:
            self.delete_model(request, file_instance)

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')


def format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string.
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'
