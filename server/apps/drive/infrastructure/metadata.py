"""Metadata helpers for uploaded content."""

import mimetypes
import uuid
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Final

from django.core.exceptions import SuspiciousFileOperation
from django.core.files.base import ContentFile
from django.core.files.base import File as DjangoFile
from django.utils.text import get_valid_filename

from server.apps.drive.exceptions import InvalidStoragePathError

_FALLBACK_FILENAME: Final = 'upload'
_FALLBACK_MIME_TYPE: Final = 'application/octet-stream'

Content = bytes | BinaryIO | DjangoFile


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from a filename.

    Uses Python's built-in mimetypes module to guess the type from the
    extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _FALLBACK_MIME_TYPE
    return mime_type


def build_storage_name(owner_id: int, filename: str) -> str:
    """Build a unique backend name scoped to the owner.

    Example: (7, 'report.pdf') -> '7/3f2a...c9_report.pdf'

    Args:
        owner_id: Owner's user ID.
        filename: Name of the uploaded artifact, may include directories.

    Returns:
        Storage path in the form {owner_id}/{uuid}_{safe filename}.
    """
    try:
        safe_name = get_valid_filename(Path(filename).name)
    except SuspiciousFileOperation:
        safe_name = _FALLBACK_FILENAME
    return f'{owner_id}/{uuid.uuid4().hex}_{safe_name}'


def validate_storage_path(owner_id: int, storage_path: str) -> None:
    """Validate storage path follows owner isolation rules.

    Ensures the storage path starts with the owner's ID so a row can
    never point at another user's bytes.

    Args:
        owner_id: Owner's user ID.
        storage_path: Stored path of a file.

    Raises:
        InvalidStoragePathError: If path doesn't start with owner_id.
    """
    path_parts = Path(storage_path).parts
    if not path_parts:
        raise InvalidStoragePathError('Storage path cannot be empty')

    if '..' in path_parts:
        raise InvalidStoragePathError(
            f'Storage path must not traverse upwards: {storage_path}',
        )

    if path_parts[0] != str(owner_id):
        raise InvalidStoragePathError(
            f'Storage path {storage_path} does not belong to '
            f'owner {owner_id}',
        )


def as_django_file(content: Content, filename: str) -> DjangoFile:
    """Wrap raw upload content in a Django File.

    Args:
        content: Bytes, a binary file object or a Django File.
        filename: Name given to the wrapper.

    Returns:
        Django File suitable for ``Storage.save``.
    """
    if isinstance(content, DjangoFile):
        return content
    if isinstance(content, bytes):
        return ContentFile(content, name=filename)
    return DjangoFile(content, name=filename)


def get_file_size(file_obj: DjangoFile | BytesIO) -> int:
    """Get file size from file object.

    Args:
        file_obj: File-like object.

    Returns:
        File size in bytes.
    """
    if hasattr(file_obj, 'size'):
        return file_obj.size
    file_size = len(file_obj.read())
    file_obj.seek(0)
    return file_size
