"""Explicitly constructed handles shared by the drive services.

A ``DriveContext`` is opened once at process start (or per test),
passed to ``FileService`` and ``ShareService``, and closed at shutdown.
"""

import logging
from collections.abc import Iterable
from types import TracebackType
from typing import Final, Self, final

from django.conf import settings

from server.apps.drive.exceptions import StorageError
from server.apps.drive.infrastructure.identity import (
    DjangoIdentityProvider,
    IdentityProvider,
)
from server.apps.drive.infrastructure.storage import (
    StorageBackend,
    build_backend,
)
from server.apps.drive.models import StorageKind

logger = logging.getLogger(__name__)

_DEFAULT_SHARE_LINK_BASE_URL: Final = 'http://localhost:3000'


@final
class DriveContext:
    """Storage backends, identity provider and drive limits.

    ``storage`` is the active backend used for new uploads. Files stored
    earlier in another backend stay readable as long as that backend is
    passed in ``extra_backends``.
    """

    def __init__(  # noqa: WPS211
        self,
        storage: StorageBackend,
        identity: IdentityProvider | None = None,
        *,
        share_link_base_url: str = _DEFAULT_SHARE_LINK_BASE_URL,
        max_upload_bytes: int | None = None,
        extra_backends: Iterable[StorageBackend] = (),
    ) -> None:
        """Initialize context.

        Args:
            storage: Active backend for new uploads.
            identity: User lookup, defaults to Django's auth users.
            share_link_base_url: Prefix of public share-link URLs.
            max_upload_bytes: Upload size limit, None for unlimited.
            extra_backends: Additional backends for reading older files.
        """
        self.storage = storage
        self.identity = identity or DjangoIdentityProvider()
        self.share_link_base_url = share_link_base_url.rstrip('/')
        self.max_upload_bytes = max_upload_bytes
        self._backends = {backend.kind: backend for backend in extra_backends}
        self._backends[storage.kind] = storage
        self._closed = False

    @classmethod
    def from_settings(cls) -> Self:
        """Open a context configured from Django settings.

        Returns:
            New context using ``DRIVE_STORAGE_BACKEND`` for uploads.
        """
        kind = StorageKind(settings.DRIVE_STORAGE_BACKEND)
        options = dict(settings.DRIVE_STORAGE_OPTIONS[kind.value])
        storage = build_backend(kind, options)
        logger.info('Opened drive context with %s storage', kind)
        return cls(
            storage,
            share_link_base_url=getattr(
                settings,
                'DRIVE_SHARE_LINK_BASE_URL',
                _DEFAULT_SHARE_LINK_BASE_URL,
            ),
            max_upload_bytes=getattr(settings, 'DRIVE_MAX_UPLOAD_BYTES', None),
        )

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed

    def backend_for(self, kind: StorageKind | str) -> StorageBackend:
        """Get the backend holding files of the given kind.

        Args:
            kind: Storage kind recorded on a FileNode.

        Returns:
            Matching backend.

        Raises:
            StorageError: If no such backend is configured.
        """
        try:
            return self._backends[StorageKind(kind)]
        except (KeyError, ValueError) as error:
            raise StorageError(
                f'No storage backend configured for {kind}',
            ) from error

    def close(self) -> None:
        """Close every backend. Safe to call more than once."""
        if self._closed:
            return
        for backend in self._backends.values():
            backend.close()
        self._closed = True
        logger.info('Closed drive context')

    def __enter__(self) -> Self:
        """Use the context in a ``with`` block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the context when the block exits."""
        self.close()
