"""Business logic layer for drive app.

This package contains all business logic for files and folders:
- Node registry (persistence queries, no permission checks)
- File service: upload, download, rename, delete, folders, search

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
