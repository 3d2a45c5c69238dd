"""Business logic layer for sharing app.

- Share registry: persistence of direct shares and share links
- Access resolution: who may read or change a file
- Share service: share, revoke, link lifecycle, shared-with-me
"""
