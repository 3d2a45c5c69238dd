"""Database models for drive app."""

import uuid
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_STORAGE_PATH_MAX_LENGTH: Final = 1024
_STORAGE_URL_MAX_LENGTH: Final = 2048
_CONTENT_TYPE_MAX_LENGTH: Final = 255
_CHOICE_MAX_LENGTH: Final = 16


class NodeKind(models.TextChoices):
    """Discriminant of a FileNode."""

    FILE = 'file', 'File'
    FOLDER = 'folder', 'Folder'


class StorageKind(models.TextChoices):
    """Backend holding the bytes of a file."""

    FILESYSTEM = 'filesystem', 'Filesystem'
    OBJECT_STORE = 'object_store', 'Object store'


@final
class FileNode(models.Model):
    """A file or a folder in a user's drive.

    Files and folders share one table and are told apart by ``kind``.
    Only files carry storage fields: a folder never has a storage path
    or backend and its size is always zero. The check constraints below
    enforce this at the database level.

    ``parent`` points at a folder of the same owner, or is NULL for
    root-level items. Deleting a folder row while it still has children
    is refused by the database; callers delete the subtree bottom-up.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='nodes',
        db_index=True,
    )

    kind = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=NodeKind.choices,
        default=NodeKind.FILE,
    )

    display_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='User-visible name, changed by rename',
    )

    original_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        editable=False,
        help_text='Name of the uploaded artifact (folder name for folders)',
    )

    storage_path = models.CharField(
        max_length=_STORAGE_PATH_MAX_LENGTH,
        null=True,
        blank=True,
        default=None,
        help_text='Backend path or key: {owner_id}/{uuid}_{name}',
    )

    storage_url = models.CharField(
        max_length=_STORAGE_URL_MAX_LENGTH,
        null=True,
        blank=True,
        default=None,
        help_text='Access hint issued by the backend at upload time',
    )

    storage_backend = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=StorageKind.choices,
        null=True,
        blank=True,
        default=None,
    )

    content_type = models.CharField(
        max_length=_CONTENT_TYPE_MAX_LENGTH,
        null=True,
        blank=True,
        default=None,
    )

    size_bytes = models.BigIntegerField(
        default=0,
        help_text='File size in bytes, always 0 for folders',
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.RESTRICT,
        null=True,
        blank=True,
        related_name='children',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File node'  # type: ignore[mutable-override]
        verbose_name_plural = 'File nodes'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize directory listing queries
            models.Index(
                fields=['owner', 'parent'],
                name='drive_owner_parent_idx',
            ),
            # Optimize recent files queries
            models.Index(
                fields=['owner', '-created_at'],
                name='drive_owner_recent_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=(
                    models.Q(
                        kind=NodeKind.FOLDER,
                        storage_path__isnull=True,
                        storage_backend__isnull=True,
                        size_bytes=0,
                    ) | models.Q(
                        kind=NodeKind.FILE,
                        storage_path__isnull=False,
                        storage_backend__isnull=False,
                    )
                ),
                name='drive_node_kind_fields',
            ),
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='drive_size_bytes_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner.username}:{self.display_name}'

    @property
    def is_folder(self) -> bool:
        """Whether this node is a folder."""
        return self.kind == NodeKind.FOLDER
