"""Drive and sharing settings."""

from server.settings.components import config

# Uploads larger than this are rejected (100 MB by default)
DRIVE_MAX_UPLOAD_BYTES = config(
    'DRIVE_MAX_UPLOAD_BYTES',
    cast=int,
    default=100 * 1024 * 1024,
)

# Public share links look like {base}/shared/{token}
DRIVE_SHARE_LINK_BASE_URL = config(
    'DRIVE_SHARE_LINK_BASE_URL',
    default='http://localhost:3000',
)

# purge_share_links removes links expired for longer than this
DRIVE_LINK_PURGE_GRACE_DAYS = config(
    'DRIVE_LINK_PURGE_GRACE_DAYS',
    cast=int,
    default=30,
)
