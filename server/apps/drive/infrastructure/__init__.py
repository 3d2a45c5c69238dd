"""Infrastructure layer for drive app.

This package contains integrations with external systems:
- Storage backends (local filesystem, S3/MinIO/R2)
- Upload metadata (names, MIME type, size)
- User lookup for shares

Keep infrastructure concerns separate from business logic.
"""
