"""Database models for sharing app."""

import uuid
from datetime import datetime
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.contrib.auth.hashers import check_password
from django.db import models
from django.utils import timezone

# Constants for field max lengths
_PERMISSION_MAX_LENGTH: Final = 8
_TOKEN_MAX_LENGTH: Final = 64
_PASSWORD_MAX_LENGTH: Final = 128  # Django password hash length


class Permission(models.TextChoices):
    """Access level granted by a share."""

    VIEW = 'view', 'View'
    EDIT = 'edit', 'Edit'


@final
class DirectShare(models.Model):
    """Grant of access to one file or folder from its owner to a user.

    There is at most one grant per (file, recipient); sharing again
    updates the permission and timestamp of the existing row.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    file = models.ForeignKey(
        'drive.FileNode',
        on_delete=models.CASCADE,
        related_name='direct_shares',
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='granted_shares',
    )

    shared_with = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='received_shares',
    )

    permission = models.CharField(
        max_length=_PERMISSION_MAX_LENGTH,
        choices=Permission.choices,
        default=Permission.VIEW,
    )

    # Refreshed when the grant is updated
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        """Model metadata."""

        verbose_name = 'Direct share'  # type: ignore[mutable-override]
        verbose_name_plural = 'Direct shares'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=['file', 'shared_with'],
                name='sharing_file_recipient_unique',
            ),
        ]

        indexes: ClassVar[list[models.Index]] = [
            # Optimize "shared with me" queries
            models.Index(
                fields=['shared_with', '-created_at'],
                name='sharing_recipient_recent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.file_id} -> {self.shared_with_id} ({self.permission})'


@final
class ShareLink(models.Model):
    """Capability token granting access to one file to anyone holding it.

    Expiry is checked whenever the link is read; expired rows stay in
    the table until removed.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    file = models.ForeignKey(
        'drive.FileNode',
        on_delete=models.CASCADE,
        related_name='share_links',
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='share_links',
    )

    token = models.CharField(
        max_length=_TOKEN_MAX_LENGTH,
        unique=True,
        editable=False,
    )

    permission = models.CharField(
        max_length=_PERMISSION_MAX_LENGTH,
        choices=Permission.choices,
        default=Permission.VIEW,
    )

    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
    )

    password = models.CharField(
        max_length=_PASSWORD_MAX_LENGTH,
        null=True,
        blank=True,
        default=None,
        help_text='Password hash, empty for unprotected links',
    )

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        """Model metadata."""

        verbose_name = 'Share link'  # type: ignore[mutable-override]
        verbose_name_plural = 'Share links'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['file', '-created_at'],
                name='sharing_link_file_recent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.file_id} ({self.token[:8]})'

    @property
    def has_password(self) -> bool:
        """Whether the link is password protected."""
        return bool(self.password)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the link has expired.

        Args:
            now: Reference time, defaults to the current time.

        Returns:
            True if expires_at is set and in the past.
        """
        if self.expires_at is None:
            return False
        return self.expires_at < (now or timezone.now())

    def check_password(self, raw_password: str | None) -> bool:
        """Verify a password against the stored hash.

        Args:
            raw_password: Password supplied by the link holder.

        Returns:
            True if the link is unprotected or the password matches.
        """
        if not self.has_password:
            return True
        if not raw_password:
            return False
        return check_password(raw_password, self.password)
