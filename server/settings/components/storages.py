"""Storage configuration for drive content.

Drive content goes to one of two backends:
- ``filesystem``: a local directory served through the download route
- ``object_store``: any S3-compatible service (AWS S3, MinIO, R2)

Both are built from ``DRIVE_STORAGE_OPTIONS`` by
``server.apps.drive.infrastructure.storage.build_backend``.
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

# Active backend for new uploads: 'filesystem' or 'object_store'
DRIVE_STORAGE_BACKEND = config('DRIVE_STORAGE_BACKEND', default='filesystem')

DRIVE_STORAGE_OPTIONS: Final[dict[str, dict[str, Any]]] = {
    'filesystem': {
        'location': config(
            'DRIVE_UPLOAD_DIR',
            default=str(BASE_DIR.joinpath('uploads')),
        ),
        'base_url': config(
            'DRIVE_DOWNLOAD_URL',
            default='/api/files/download/',
        ),
    },
    'object_store': {
        'bucket_name': config('AWS_STORAGE_BUCKET_NAME', default='drive'),
        'access_key': config('AWS_ACCESS_KEY_ID', default=None),
        'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
        'endpoint_url': config(
            'AWS_S3_ENDPOINT_URL',
            default=None,
        ),
        'region_name': config(
            'AWS_S3_REGION_NAME',
            default='us-east-1',
        ),
        'file_overwrite': False,  # Prevent accidental overwrites
        'default_acl': None,  # Inherit bucket ACL
        'querystring_expire': 3600,  # Pre-signed URL lifetime in seconds
    },
}

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
