"""Integration tests for the object store backend against MinIO.

These tests need a running MinIO service (for example from Docker
Compose) and are deselected by default; run them with
``pytest -m integration``.
"""
import os
from typing import Final

import boto3
import pytest
from botocore.client import BaseClient
from botocore.exceptions import ClientError

from server.apps.drive.exceptions import StorageNotFoundError
from server.apps.drive.infrastructure.storage import ObjectStoreBackend

_TEST_BUCKET: Final = 'drive'
_TEST_OWNER_ID: Final = 4242
_TEST_FILE_CONTENT: Final = b'Hello from MinIO integration test!'


def _minio_options() -> dict[str, str]:
    return {
        'endpoint_url': os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        'access_key': os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        'secret_key': os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
        'region_name': 'us-east-1',
    }


@pytest.fixture
def s3_client() -> BaseClient:
    """Create S3 client for MinIO.

    Returns:
        Configured boto3 S3 client for MinIO.
    """
    options = _minio_options()
    return boto3.client(
        's3',
        endpoint_url=options['endpoint_url'],
        aws_access_key_id=options['access_key'],
        aws_secret_access_key=options['secret_key'],
        region_name=options['region_name'],
    )


@pytest.fixture
def backend(s3_client: BaseClient) -> ObjectStoreBackend:
    """Object store backend on an existing MinIO bucket.

    Args:
        s3_client: boto3 S3 client.

    Yields:
        ObjectStoreBackend instance.
    """
    try:
        s3_client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        s3_client.create_bucket(Bucket=_TEST_BUCKET)

    object_backend = ObjectStoreBackend(
        bucket_name=_TEST_BUCKET,
        **_minio_options(),
    )
    yield object_backend
    object_backend.close()


@pytest.mark.integration
def test_store_and_fetch(backend: ObjectStoreBackend) -> None:
    """Test content round-trips through MinIO under the owner prefix."""
    stored = backend.store(_TEST_FILE_CONTENT, _TEST_OWNER_ID, 'hello.txt')

    assert stored.storage_path.startswith(f'{_TEST_OWNER_ID}/')
    assert backend.fetch(stored.storage_path) == _TEST_FILE_CONTENT

    backend.delete(stored.storage_path)


@pytest.mark.integration
def test_presigned_url(backend: ObjectStoreBackend) -> None:
    """Test MinIO issues a pre-signed URL for stored objects."""
    stored = backend.store(_TEST_FILE_CONTENT, _TEST_OWNER_ID, 'hello.txt')

    assert stored.storage_url is not None
    assert 'Signature' in stored.storage_url

    backend.delete(stored.storage_path)


@pytest.mark.integration
def test_delete_object(
    backend: ObjectStoreBackend,
    s3_client: BaseClient,
) -> None:
    """Test deleted objects are gone and deleting again is harmless."""
    stored = backend.store(_TEST_FILE_CONTENT, _TEST_OWNER_ID, 'hello.txt')

    backend.delete(stored.storage_path)
    backend.delete(stored.storage_path)

    with pytest.raises(ClientError) as exc_info:
        s3_client.head_object(Bucket=_TEST_BUCKET, Key=stored.storage_path)

    assert exc_info.value.response['Error']['Code'] == '404'
    with pytest.raises(StorageNotFoundError):
        backend.fetch(stored.storage_path)
