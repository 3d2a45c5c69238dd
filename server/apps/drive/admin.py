"""Django admin configuration for drive app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.drive.models import FileNode


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(FileNode)
class FileNodeAdmin(admin.ModelAdmin):
    """Admin interface for FileNode model.

    Rows can be inspected and renamed, but not deleted here: deleting
    through the admin would leave the stored bytes behind.
    """

    list_display = [
        'display_name',
        'kind',
        'owner',
        'size_display',
        'storage_backend',
        'created_at',
    ]

    list_filter = [
        'kind',
        'storage_backend',
        'created_at',
    ]

    search_fields = [
        'display_name',
        'original_name',
        'owner__username',
    ]

    readonly_fields = [
        'id',
        'kind',
        'owner',
        'parent',
        'original_name',
        'storage_path',
        'storage_url',
        'storage_backend',
        'content_type',
        'size_bytes',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Node', {
            'fields': ('id', 'kind', 'display_name', 'original_name'),
        }),
        ('Ownership', {
            'fields': ('owner', 'parent'),
        }),
        ('Storage', {
            'fields': (
                'storage_backend',
                'storage_path',
                'storage_url',
                'content_type',
                'size_bytes',
            ),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def size_display(self, obj: FileNode) -> str:
        """Display file size in human-readable format, blank for folders.

        Args:
            obj: FileNode instance.

        Returns:
            Formatted size string.
        """
        if obj.is_folder:
            return '-'
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: FileNode | None = None,
    ) -> bool:
        """Disable deletion, files are deleted through FileService."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[FileNode]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')
