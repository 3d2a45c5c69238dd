"""Persistence queries for files and folders.

A plain store over ``FileNode``: nothing here checks ownership or
permissions, callers do.
"""

import logging
from typing import Final
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import Q, QuerySet
from django.utils import timezone

from server.apps.drive.models import FileNode, NodeKind, StorageKind

DEFAULT_PAGE_SIZE: Final = 100

logger = logging.getLogger(__name__)


def create_node(  # noqa: WPS211
    *,
    owner_id: int,
    kind: NodeKind,
    display_name: str,
    original_name: str,
    parent_id: UUID | None = None,
    storage_path: str | None = None,
    storage_url: str | None = None,
    storage_backend: StorageKind | None = None,
    content_type: str | None = None,
    size_bytes: int = 0,
) -> FileNode:
    """Insert a new file or folder row.

    Returns:
        Created FileNode.
    """
    node = FileNode.objects.create(
        owner_id=owner_id,
        kind=kind,
        display_name=display_name,
        original_name=original_name,
        parent_id=parent_id,
        storage_path=storage_path,
        storage_url=storage_url,
        storage_backend=storage_backend,
        content_type=content_type,
        size_bytes=size_bytes,
    )
    logger.debug('Created %s node %s', kind, node.id)
    return node


def find_by_id(node_id: UUID | str) -> FileNode | None:
    """Get a node by id.

    Args:
        node_id: Node id, malformed ids are treated as unknown.

    Returns:
        FileNode or None.
    """
    try:
        return FileNode.objects.get(id=node_id)
    except (FileNode.DoesNotExist, ValidationError, ValueError):
        return None


def children_of(owner_id: int, parent_id: UUID | None) -> QuerySet[FileNode]:
    """Direct children of a folder, or root-level items.

    Args:
        owner_id: Owner of the nodes.
        parent_id: Folder id, None for root level.

    Returns:
        QuerySet of nodes, newest first.
    """
    return FileNode.objects.filter(owner_id=owner_id, parent_id=parent_id)


def find_by_owner(
    owner_id: int,
    parent_id: UUID | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[FileNode]:
    """Page of direct children of a folder.

    Args:
        owner_id: Owner of the nodes.
        parent_id: Folder id, None for root level.
        limit: Maximum number of items.
        offset: Number of items to skip.

    Returns:
        List of nodes, newest first.
    """
    return list(children_of(owner_id, parent_id)[offset:offset + limit])


def count_children(owner_id: int, parent_id: UUID | None) -> int:
    """Number of direct children of a folder (or root-level items)."""
    return children_of(owner_id, parent_id).count()


def _search_queryset(owner_id: int, term: str) -> QuerySet[FileNode]:
    return FileNode.objects.filter(
        Q(display_name__icontains=term) | Q(original_name__icontains=term),
        owner_id=owner_id,
    )


def search_by_owner(
    owner_id: int,
    term: str,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[FileNode]:
    """Case-insensitive substring search over display and original names.

    Args:
        owner_id: Owner of the nodes.
        term: Substring to look for.
        limit: Maximum number of items.
        offset: Number of items to skip.

    Returns:
        List of matching nodes at any depth, newest first.
    """
    return list(_search_queryset(owner_id, term)[offset:offset + limit])


def count_search(owner_id: int, term: str) -> int:
    """Number of nodes matched by ``search_by_owner``."""
    return _search_queryset(owner_id, term).count()


def update_name(node_id: UUID, name: str) -> FileNode | None:
    """Change the display name of a node.

    Args:
        node_id: Node to rename.
        name: New display name.

    Returns:
        Updated node, or None if it no longer exists.
    """
    updated = FileNode.objects.filter(id=node_id).update(
        display_name=name,
        updated_at=timezone.now(),
    )
    if not updated:
        return None
    return find_by_id(node_id)


def delete_node(node_id: UUID) -> bool:
    """Delete a node row.

    Shares and share links of the node are removed with it. A folder
    that still has children cannot be deleted.

    Args:
        node_id: Node to delete.

    Returns:
        True if the row existed and was deleted.

    Raises:
        RestrictedError: If the node is a folder with children.
    """
    _, deleted_per_model = FileNode.objects.filter(id=node_id).delete()
    return deleted_per_model.get(FileNode._meta.label, 0) > 0  # noqa: WPS437


def count_by_owner(owner_id: int) -> int:
    """Number of nodes owned by a user, at any depth."""
    return FileNode.objects.filter(owner_id=owner_id).count()


def find_by_name_and_parent(
    owner_id: int,
    name: str,
    parent_id: UUID | None,
    kind: NodeKind | None = None,
) -> FileNode | None:
    """Find a node by exact display name under a parent.

    Args:
        owner_id: Owner of the nodes.
        name: Display name to match.
        parent_id: Folder id, None for root level.
        kind: Restrict the match to files or folders.

    Returns:
        First matching node or None.
    """
    nodes = children_of(owner_id, parent_id).filter(display_name=name)
    if kind is not None:
        nodes = nodes.filter(kind=kind)
    return nodes.first()
