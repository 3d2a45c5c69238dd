"""Shared fixtures for drive app tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.drive.infrastructure.context import DriveContext
from server.apps.drive.infrastructure.storage import (
    FileSystemBackend,
    ObjectStoreBackend,
)
from server.apps.drive.logic.file_service import FileService

User = get_user_model()

_MAX_UPLOAD_BYTES = 64 * 1024


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with drive bucket.

    Yields:
        boto3 S3 resource with drive bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='drive')
        yield conn


@pytest.fixture
def object_backend(mock_s3):
    """Object store backend on the mocked bucket.

    Yields:
        ObjectStoreBackend instance.
    """
    backend = ObjectStoreBackend(
        bucket_name='drive',
        region_name='us-east-1',
        access_key='testing',
        secret_key='testing',
    )
    yield backend
    backend.close()


@pytest.fixture
def storage_root(tmp_path):
    """Directory for the filesystem backend, not created yet.

    Returns:
        Path of the storage root.
    """
    return tmp_path / 'storage'


@pytest.fixture
def fs_backend(storage_root):
    """Filesystem backend under a temporary directory.

    Returns:
        FileSystemBackend instance.
    """
    return FileSystemBackend(str(storage_root))


@pytest.fixture
def drive_context(fs_backend):
    """Context with filesystem storage and a small upload limit.

    Yields:
        DriveContext instance, closed afterwards.
    """
    with DriveContext(
        fs_backend,
        share_link_base_url='https://drive.example.com/',
        max_upload_bytes=_MAX_UPLOAD_BYTES,
    ) as context:
        yield context


@pytest.fixture
def file_service(drive_context):
    """File service over the test context."""
    return FileService(drive_context)
