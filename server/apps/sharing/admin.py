"""Django admin configuration for sharing app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.sharing.models import DirectShare, ShareLink


@admin.register(DirectShare)
class DirectShareAdmin(admin.ModelAdmin):
    """Admin interface for DirectShare model."""

    list_display = [
        'file',
        'owner',
        'shared_with',
        'permission',
        'created_at',
    ]

    list_filter = [
        'permission',
        'created_at',
    ]

    search_fields = [
        'file__display_name',
        'owner__username',
        'shared_with__username',
        'shared_with__email',
    ]

    readonly_fields = ['file', 'owner', 'shared_with', 'created_at']

    def get_queryset(self, request: HttpRequest) -> QuerySet[DirectShare]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related(
            'file',
            'owner',
            'shared_with',
        )


@admin.register(ShareLink)
class ShareLinkAdmin(admin.ModelAdmin):
    """Admin interface for ShareLink model."""

    list_display = [
        'token_display',
        'file',
        'owner',
        'permission',
        'expires_at',
        'status_display',
    ]

    list_filter = [
        'permission',
        'expires_at',
    ]

    search_fields = [
        'file__display_name',
        'owner__username',
    ]

    # Tokens and password hashes are never shown in full
    exclude = ['password']
    readonly_fields = ['file', 'owner', 'created_at']

    def token_display(self, obj: ShareLink) -> str:
        """Display the first characters of the token.

        Args:
            obj: ShareLink instance.

        Returns:
            Token prefix.
        """
        return f'{obj.token[:8]}...'
    token_display.short_description = 'Token'  # type: ignore[attr-defined]

    def status_display(self, obj: ShareLink) -> str:
        """Display whether the link can still be used.

        Args:
            obj: ShareLink instance.

        Returns:
            HTML formatted status indicator.
        """
        if obj.is_expired():
            color = '#dc3545'  # Red - expired
            status = 'Expired'
        else:
            color = '#28a745'  # Green - active
            status = 'Active'

        return format_html(
            '<span style="color: {color}; font-weight: bold;">'
            '{status}</span>',
            color=color,
            status=status,
        )
    status_display.short_description = 'Status'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[ShareLink]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('file', 'owner')
