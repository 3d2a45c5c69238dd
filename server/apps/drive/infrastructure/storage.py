"""Storage backends for file content.

A backend persists the raw bytes of a file under a unique, owner-scoped
name and hands back the path recorded on the FileNode row. Two variants
exist, both wrapping a Django ``Storage``:

- ``FileSystemBackend``: local directory via ``FileSystemStorage``
- ``ObjectStoreBackend``: S3-compatible bucket via django-storages

Backend failures never escape as ``OSError`` or botocore errors; they are
translated into ``StorageError`` subclasses.
"""

import abc
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, final, override

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError
from django.core.files.storage import FileSystemStorage, Storage
from storages.backends.s3 import S3Storage

from server.apps.drive.exceptions import (
    StorageError,
    StorageNotFoundError,
    StorageWriteError,
)
from server.apps.drive.infrastructure.metadata import (
    Content,
    as_django_file,
    build_storage_name,
)
from server.apps.drive.models import StorageKind

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class StoredObject:
    """Result of storing content in a backend."""

    storage_path: str
    storage_url: str | None = None


class StorageBackend(abc.ABC):
    """Byte storage for file content.

    Subclasses provide the Django storage and the backend-specific
    exception types that count as I/O failures.
    """

    kind: ClassVar[StorageKind]
    _failures: ClassVar[tuple[type[Exception], ...]] = (OSError,)

    def __init__(self, storage: Storage) -> None:
        """Initialize backend.

        Args:
            storage: Django storage holding the bytes.
        """
        self._storage = storage

    @property
    def storage(self) -> Storage:
        """Underlying Django storage."""
        return self._storage

    def store(
        self,
        content: Content,
        owner_id: int,
        filename: str = '',
    ) -> StoredObject:
        """Persist content under a new unique name scoped to the owner.

        Existing objects are never overwritten: the name contains a
        random UUID and the storage picks another name on collision.

        Args:
            content: Bytes or file-like object to store.
            owner_id: Owner's user ID, used as the path prefix.
            filename: Name of the uploaded artifact.

        Returns:
            Backend-relative path and an optional access URL.

        Raises:
            StorageWriteError: If the backend fails to write.
        """
        name = build_storage_name(owner_id, filename)
        file_obj = as_django_file(content, name)

        try:
            logger.info('Uploading file to storage: %s', name)
            saved_name = self._storage.save(name, file_obj)
        except self._failures as error:
            logger.exception('Failed to upload file to storage: %s', name)
            raise StorageWriteError(
                f'Failed to write {name} to {self.kind} storage',
            ) from error

        logger.info('Successfully uploaded file: %s', saved_name)
        return StoredObject(
            storage_path=saved_name,
            storage_url=self.resolve_url(saved_name),
        )

    def fetch(self, storage_path: str) -> bytes:
        """Read the full content of a stored object.

        Args:
            storage_path: Path returned by ``store``.

        Returns:
            Stored bytes.

        Raises:
            StorageNotFoundError: If the object does not exist.
            StorageError: If the backend fails to read.
        """
        try:
            if not self._storage.exists(storage_path):
                raise StorageNotFoundError(storage_path)
            with self._storage.open(storage_path, 'rb') as stored_file:
                return stored_file.read()
        except FileNotFoundError as error:
            raise StorageNotFoundError(storage_path) from error
        except self._failures as error:
            logger.exception('Failed to read file from storage: %s', storage_path)
            raise StorageError(
                f'Failed to read {storage_path} from {self.kind} storage',
            ) from error

    def delete(self, storage_path: str) -> None:
        """Delete a stored object.

        Deleting an object that is already gone is not an error.

        Args:
            storage_path: Path returned by ``store``.

        Raises:
            StorageError: If the backend fails to delete.
        """
        try:
            logger.info('Deleting file from storage: %s', storage_path)
            self._storage.delete(storage_path)
        except self._failures as error:
            logger.exception(
                'Failed to delete file from storage: %s',
                storage_path,
            )
            raise StorageError(
                f'Failed to delete {storage_path} from {self.kind} storage',
            ) from error

    def rollback_store(self, storage_path: str) -> None:
        """Delete content stored for a row that was never created.

        This is a best-effort operation - if deletion fails, the error
        is logged but not raised, as the caller is already failing.

        Args:
            storage_path: Path returned by ``store``.
        """
        logger.warning('Rolling back upload, deleting file: %s', storage_path)
        try:
            self.delete(storage_path)
        except StorageError:
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                storage_path,
            )

    @abc.abstractmethod
    def resolve_url(self, storage_path: str) -> str | None:
        """Best-effort access URL for a stored object.

        Args:
            storage_path: Path returned by ``store``.

        Returns:
            URL, or None when it cannot be resolved.
        """

    def close(self) -> None:
        """Release backend resources."""
        logger.debug('Closing %s storage backend', self.kind)


@final
class FileSystemBackend(StorageBackend):
    """Content stored in a local directory.

    The root directory and the per-owner subdirectory are created on the
    first upload. URLs point at the download route given as ``base_url``.
    """

    kind = StorageKind.FILESYSTEM

    def __init__(self, location: str, base_url: str = '/api/files/download/') -> None:
        """Initialize filesystem backend.

        Args:
            location: Root directory for stored files.
            base_url: Route prefix used to build download URLs.
        """
        super().__init__(
            FileSystemStorage(location=location, base_url=base_url),
        )

    @override
    def resolve_url(self, storage_path: str) -> str | None:
        """Route-derived download URL, None if the file is missing."""
        try:
            if not self._storage.exists(storage_path):
                return None
            return self._storage.url(storage_path)
        except (OSError, ValueError):
            logger.warning('Cannot resolve URL for %s', storage_path)
            return None


@final
class ObjectStoreBackend(StorageBackend):
    """Content stored in an S3-compatible bucket.

    Options are passed straight to django-storages ``S3Storage``;
    ``file_overwrite`` is always disabled. URLs are pre-signed.
    """

    kind = StorageKind.OBJECT_STORE
    _failures = (OSError, BotoCoreError, ClientError, Boto3Error)

    def __init__(self, **options: Any) -> None:
        """Initialize object store backend.

        Args:
            options: ``S3Storage`` options (bucket_name, endpoint_url...).
        """
        options['file_overwrite'] = False
        super().__init__(S3Storage(**options))
        self._connected = False

    @override
    def store(
        self,
        content: Content,
        owner_id: int,
        filename: str = '',
    ) -> StoredObject:
        """Persist content in the bucket, see ``StorageBackend.store``."""
        self._connected = True
        return super().store(content, owner_id, filename)

    @override
    def fetch(self, storage_path: str) -> bytes:
        """Read an object from the bucket, see ``StorageBackend.fetch``."""
        self._connected = True
        return super().fetch(storage_path)

    @override
    def delete(self, storage_path: str) -> None:
        """Delete an object from the bucket, see ``StorageBackend.delete``."""
        self._connected = True
        super().delete(storage_path)

    @override
    def resolve_url(self, storage_path: str) -> str | None:
        """Pre-signed GET URL for the object, None on failure."""
        self._connected = True
        try:
            return self._storage.url(storage_path)
        except self._failures:
            logger.exception('Failed to get URL for object: %s', storage_path)
            return None

    @override
    def close(self) -> None:
        """Close the boto3 client if a connection was opened."""
        if self._connected:
            self._storage.connection.meta.client.close()
            self._connected = False
        super().close()


_BACKENDS: dict[StorageKind, type[StorageBackend]] = {
    StorageKind.FILESYSTEM: FileSystemBackend,
    StorageKind.OBJECT_STORE: ObjectStoreBackend,
}


def build_backend(kind: StorageKind | str, options: dict[str, Any]) -> StorageBackend:
    """Construct a backend of the given kind.

    Args:
        kind: 'filesystem' or 'object_store'.
        options: Keyword arguments for the backend constructor.

    Returns:
        New backend instance.

    Raises:
        ValueError: If kind is unknown.
    """
    backend_class = _BACKENDS[StorageKind(kind)]
    logger.info('Building %s storage backend', backend_class.kind)
    return backend_class(**options)
