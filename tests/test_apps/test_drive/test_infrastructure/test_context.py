"""Tests for DriveContext."""

from unittest.mock import patch

import pytest

from server.apps.drive.exceptions import StorageError
from server.apps.drive.infrastructure.context import DriveContext
from server.apps.drive.infrastructure.identity import DjangoIdentityProvider
from server.apps.drive.infrastructure.storage import (
    FileSystemBackend,
    ObjectStoreBackend,
)
from server.apps.drive.models import StorageKind


def test_from_settings_builds_active_backend(settings, tmp_path):
    """Test the context follows the configured backend and limits."""
    settings.DRIVE_STORAGE_BACKEND = 'filesystem'
    settings.DRIVE_STORAGE_OPTIONS = {
        'filesystem': {'location': str(tmp_path)},
    }
    settings.DRIVE_MAX_UPLOAD_BYTES = 2048
    settings.DRIVE_SHARE_LINK_BASE_URL = 'https://files.example.org/'

    with DriveContext.from_settings() as context:
        assert isinstance(context.storage, FileSystemBackend)
        assert isinstance(context.identity, DjangoIdentityProvider)
        assert context.max_upload_bytes == 2048
        assert context.share_link_base_url == 'https://files.example.org'


def test_from_settings_object_store(settings, mock_s3):
    """Test the object store backend can be selected."""
    settings.DRIVE_STORAGE_BACKEND = 'object_store'
    settings.DRIVE_STORAGE_OPTIONS = {
        'object_store': {'bucket_name': 'drive'},
    }

    with DriveContext.from_settings() as context:
        assert isinstance(context.storage, ObjectStoreBackend)


def test_backend_for_known_and_extra(fs_backend, object_backend):
    """Test files stored in an older backend stay readable."""
    context = DriveContext(fs_backend, extra_backends=[object_backend])

    assert context.backend_for(StorageKind.FILESYSTEM) is fs_backend
    assert context.backend_for('object_store') is object_backend


def test_backend_for_unconfigured_kind(fs_backend):
    """Test asking for an unconfigured backend fails cleanly."""
    context = DriveContext(fs_backend)

    with pytest.raises(StorageError):
        context.backend_for(StorageKind.OBJECT_STORE)


def test_close_is_idempotent(fs_backend):
    """Test close releases backends once."""
    context = DriveContext(fs_backend)

    with patch.object(fs_backend, 'close') as close_backend:
        context.close()
        context.close()

    assert context.closed
    close_backend.assert_called_once_with()


def test_context_manager_closes(fs_backend):
    """Test leaving a with block closes the context."""
    with DriveContext(fs_backend) as context:
        assert not context.closed

    assert context.closed
