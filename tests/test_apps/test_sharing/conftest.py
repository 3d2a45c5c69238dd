"""Shared fixtures for sharing app tests."""

import pytest
from django.contrib.auth import get_user_model

from server.apps.drive.infrastructure.context import DriveContext
from server.apps.drive.infrastructure.storage import FileSystemBackend
from server.apps.drive.logic.file_service import FileService
from server.apps.sharing.logic.share_service import ShareService

User = get_user_model()


@pytest.fixture(autouse=True)
def _fast_password_hashing(settings):
    """Use a fast hasher for link passwords in tests."""
    settings.PASSWORD_HASHERS = [
        'django.contrib.auth.hashers.MD5PasswordHasher',
    ]


@pytest.fixture
def user(db):
    """Create test user (file owner).

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
        first_name='Test',
        last_name='Owner',
    )


@pytest.fixture
def other_user(db):
    """Create second test user (share recipient).

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='Other@Example.com',
    )


@pytest.fixture
def third_user(db):
    """Create third test user (neither owner nor recipient).

    Returns:
        Third user instance.
    """
    return User.objects.create_user(
        username='thirduser',
        password='testpass123',
        email='third@example.com',
    )


@pytest.fixture
def storage_root(tmp_path):
    """Directory for the filesystem backend.

    Returns:
        Path of the storage root.
    """
    return tmp_path / 'storage'


@pytest.fixture
def drive_context(storage_root):
    """Context with filesystem storage.

    Yields:
        DriveContext instance, closed afterwards.
    """
    with DriveContext(
        FileSystemBackend(str(storage_root)),
        share_link_base_url='https://drive.example.com',
    ) as context:
        yield context


@pytest.fixture
def file_service(drive_context):
    """File service over the test context."""
    return FileService(drive_context)


@pytest.fixture
def share_service(drive_context):
    """Share service over the test context."""
    return ShareService(drive_context)


@pytest.fixture
def report(file_service, user):
    """File owned by ``user``.

    Returns:
        Uploaded FileNode with 1024 bytes of content.
    """
    return file_service.upload(b'r' * 1024, 'report.pdf', user.id)
