"""Business logic for files and folders.

``FileService`` is the entry point used by transports for everything
that touches file content or the folder tree. Ownership is enforced
here; the registry below it never checks permissions.
"""

import logging
from dataclasses import dataclass
from typing import final
from uuid import UUID

from django.db import transaction

from server.apps.drive.exceptions import (
    DuplicateNameError,
    EmptyNameError,
    FileTooLargeError,
    ForbiddenError,
    InvalidInputError,
    InvalidParentError,
    IsFolderError,
    MissingPathError,
    NodeNotFoundError,
    StorageError,
)
from server.apps.drive.infrastructure.context import DriveContext
from server.apps.drive.infrastructure.metadata import (
    Content,
    as_django_file,
    detect_mime_type,
    get_file_size,
    validate_storage_path,
)
from server.apps.drive.logic import registry
from server.apps.drive.models import FileNode, NodeKind
from server.apps.sharing.logic.access import decide_access

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class NodePage:
    """One page of files and folders.

    ``total`` counts every node in the listed scope (the folder's direct
    children, or all search matches). ``owner_total`` counts every node
    the owner has at any depth.
    """

    items: list[FileNode]
    total: int
    limit: int
    offset: int
    owner_total: int


@final
@dataclass(frozen=True, slots=True)
class Download:
    """File row together with its stored bytes."""

    node: FileNode
    content: bytes


def _clean_name(name: str | None) -> str:
    cleaned = (name or '').strip()
    if not cleaned:
        raise EmptyNameError
    return cleaned


def _check_page(limit: int, offset: int) -> None:
    if limit < 0 or offset < 0:
        raise InvalidInputError(
            f'limit and offset must be non-negative, got {limit}, {offset}',
        )


@final
class FileService:
    """Upload, download, rename, delete and browse files and folders."""

    def __init__(self, context: DriveContext) -> None:
        """Initialize service.

        Args:
            context: Storage backends and limits shared by the services.
        """
        self._context = context

    def upload(  # noqa: WPS211
        self,
        content: Content,
        original_name: str,
        owner_id: int,
        custom_name: str | None = None,
        parent_id: UUID | str | None = None,
        content_type: str | None = None,
    ) -> FileNode:
        """Store content and create a file row.

        Transaction safety: upload to storage first, then create the
        row. If the row cannot be created, the stored bytes are deleted
        again (rollback).

        Args:
            content: Bytes or file-like object.
            original_name: Name of the uploaded artifact.
            owner_id: Uploading user.
            custom_name: Display name, defaults to the original name.
            parent_id: Target folder, None for root level.
            content_type: MIME type, detected from the name if omitted.

        Returns:
            Created file row.

        Raises:
            EmptyNameError: If the original name is blank.
            InvalidParentError: If the parent is missing or not a folder.
            ForbiddenError: If the parent belongs to another user.
            FileTooLargeError: If the content exceeds the upload limit.
            StorageWriteError: If the backend fails to store the bytes.
        """
        original_name = _clean_name(original_name)
        display_name = (custom_name or '').strip() or original_name
        parent = self._resolve_parent(owner_id, parent_id)

        file_obj = as_django_file(content, original_name)
        size_bytes = get_file_size(file_obj)
        limit_bytes = self._context.max_upload_bytes
        if limit_bytes is not None and size_bytes > limit_bytes:
            raise FileTooLargeError(size_bytes, limit_bytes)

        backend = self._context.storage
        stored = backend.store(file_obj, owner_id, original_name)

        try:
            with transaction.atomic():
                node = registry.create_node(
                    owner_id=owner_id,
                    kind=NodeKind.FILE,
                    display_name=display_name,
                    original_name=original_name,
                    parent_id=parent.id if parent else None,
                    storage_path=stored.storage_path,
                    storage_url=stored.storage_url,
                    storage_backend=backend.kind,
                    content_type=content_type or detect_mime_type(original_name),
                    size_bytes=size_bytes,
                )
        except Exception:
            logger.exception(
                'Database transaction failed, rolling back storage upload: %s',
                stored.storage_path,
            )
            backend.rollback_store(stored.storage_path)
            raise

        logger.info(
            'File uploaded: %s (%d bytes) by user %s',
            node.id,
            size_bytes,
            owner_id,
        )
        return node

    def create_folder(
        self,
        owner_id: int,
        name: str,
        parent_id: UUID | str | None = None,
    ) -> FileNode:
        """Create a folder.

        Args:
            owner_id: Owner of the new folder.
            name: Folder name, trimmed.
            parent_id: Enclosing folder, None for root level.

        Returns:
            Created folder row.

        Raises:
            EmptyNameError: If the name is blank.
            DuplicateNameError: If a folder with this name exists there.
            InvalidParentError: If the parent is missing or not a folder.
            ForbiddenError: If the parent belongs to another user.
        """
        name = _clean_name(name)
        parent = self._resolve_parent(owner_id, parent_id)
        target_id = parent.id if parent else None

        existing = registry.find_by_name_and_parent(
            owner_id,
            name,
            target_id,
            kind=NodeKind.FOLDER,
        )
        if existing is not None:
            raise DuplicateNameError(name, target_id)

        folder = registry.create_node(
            owner_id=owner_id,
            kind=NodeKind.FOLDER,
            display_name=name,
            original_name=name,
            parent_id=target_id,
        )
        logger.info('Folder created: %s by user %s', folder.id, owner_id)
        return folder

    def list(
        self,
        owner_id: int,
        parent_id: UUID | str | None = None,
        limit: int = registry.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> NodePage:
        """Direct children of a folder, or root-level items.

        Args:
            owner_id: Owner of the nodes.
            parent_id: Folder to list, None for root level.
            limit: Maximum number of items.
            offset: Number of items to skip.

        Returns:
            Page of nodes, newest first.
        """
        _check_page(limit, offset)
        parent = registry.find_by_id(parent_id) if parent_id else None
        if parent_id and parent is None:
            return NodePage([], 0, limit, offset, registry.count_by_owner(owner_id))

        scope_id = parent.id if parent else None
        return NodePage(
            items=registry.find_by_owner(owner_id, scope_id, limit, offset),
            total=registry.count_children(owner_id, scope_id),
            limit=limit,
            offset=offset,
            owner_total=registry.count_by_owner(owner_id),
        )

    def get_by_id(self, file_id: UUID | str, user_id: int) -> FileNode:
        """Get a file or folder the user may see.

        Raises:
            NodeNotFoundError: If the node does not exist.
            ForbiddenError: If the user is neither owner nor recipient.
        """
        node = self._get(file_id)
        if not decide_access(node, user_id).granted:
            raise ForbiddenError(user_id, file_id, 'view')
        return node

    def rename(
        self,
        file_id: UUID | str,
        user_id: int,
        new_name: str,
    ) -> FileNode:
        """Change the display name of an owned file or folder.

        Args:
            file_id: Node to rename.
            user_id: Acting user, must be the owner.
            new_name: New display name, trimmed.

        Returns:
            Renamed node.

        Raises:
            NodeNotFoundError: If the node does not exist.
            ForbiddenError: If the user is not the owner.
            EmptyNameError: If the new name is blank.
        """
        node = self._get_owned(file_id, user_id, 'rename')
        new_name = _clean_name(new_name)

        renamed = registry.update_name(node.id, new_name)
        if renamed is None:
            raise NodeNotFoundError(file_id)
        logger.info('Renamed %s to %s', node.id, new_name)
        return renamed

    def delete(self, file_id: UUID | str, user_id: int) -> bool:
        """Delete an owned file, or a folder with everything inside it.

        Folder contents are removed depth-first: for every descendant
        the stored bytes go first, then the row. A failure to delete a
        descendant's bytes is logged and skipped; a failure to delete a
        row stops the operation and leaves the rest of the tree intact.

        Args:
            file_id: Node to delete.
            user_id: Acting user, must be the owner.

        Returns:
            True if the node's own row was deleted.

        Raises:
            NodeNotFoundError: If the node does not exist.
            ForbiddenError: If the user is not the owner.
            StorageError: If the bytes of a single file cannot be deleted.
        """
        node = self._get_owned(file_id, user_id, 'delete')

        if node.is_folder:
            self._delete_children(node)
        elif node.storage_path:
            backend = self._context.backend_for(node.storage_backend)
            backend.delete(node.storage_path)

        deleted = registry.delete_node(node.id)
        logger.info('Deleted %s %s: %s', node.kind, node.id, deleted)
        return deleted

    def download(self, file_id: UUID | str, user_id: int) -> Download:
        """Read the bytes of a file the user may see.

        Args:
            file_id: File to read.
            user_id: Acting user.

        Returns:
            File row and content.

        Raises:
            NodeNotFoundError: If the file does not exist.
            ForbiddenError: If the user is neither owner nor recipient.
            IsFolderError: If the node is a folder.
            MissingPathError: If the file row has no storage path.
            InvalidStoragePathError: If the path is outside the owner's prefix.
            StorageNotFoundError: If the bytes are gone from the backend.
        """
        node = self._get(file_id)
        if not decide_access(node, user_id).granted:
            raise ForbiddenError(user_id, file_id, 'download')

        return self.read_content(node)

    def read_content(self, node: FileNode) -> Download:
        """Fetch the stored bytes of a file row without access checks.

        Callers must have authorized access to ``node`` already.

        Raises:
            IsFolderError: If the node is a folder.
            MissingPathError: If the file row has no storage path.
            InvalidStoragePathError: If the path is outside the owner's prefix.
            StorageError: If the backend fails to read.
        """
        if node.is_folder:
            raise IsFolderError(node.id)
        if not node.storage_path:
            raise MissingPathError(node.id)

        validate_storage_path(node.owner_id, node.storage_path)
        backend = self._context.backend_for(node.storage_backend)
        content = backend.fetch(node.storage_path)
        logger.info('File downloaded: %s (%d bytes)', node.id, len(content))
        return Download(node=node, content=content)

    def search(
        self,
        owner_id: int,
        term: str,
        limit: int = registry.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> NodePage:
        """Find the owner's nodes whose name contains a term.

        A blank term lists the root level instead.

        Args:
            owner_id: Owner of the nodes.
            term: Case-insensitive substring.
            limit: Maximum number of items.
            offset: Number of items to skip.

        Returns:
            Page of matches at any depth, newest first.
        """
        term = (term or '').strip()
        if not term:
            return self.list(owner_id, None, limit, offset)

        _check_page(limit, offset)
        return NodePage(
            items=registry.search_by_owner(owner_id, term, limit, offset),
            total=registry.count_search(owner_id, term),
            limit=limit,
            offset=offset,
            owner_total=registry.count_by_owner(owner_id),
        )

    def _get(self, node_id: UUID | str) -> FileNode:
        node = registry.find_by_id(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def _get_owned(
        self,
        node_id: UUID | str,
        user_id: int,
        action: str,
    ) -> FileNode:
        node = self._get(node_id)
        if node.owner_id != user_id:
            logger.warning(
                'User %s tried to %s %s owned by %s',
                user_id,
                action,
                node.id,
                node.owner_id,
            )
            raise ForbiddenError(user_id, node_id, action)
        return node

    def _resolve_parent(
        self,
        owner_id: int,
        parent_id: UUID | str | None,
    ) -> FileNode | None:
        if not parent_id:
            return None

        parent = registry.find_by_id(parent_id)
        if parent is None:
            raise InvalidParentError(parent_id, 'parent folder does not exist')
        if parent.owner_id != owner_id:
            raise ForbiddenError(owner_id, parent_id, 'add items to')
        if not parent.is_folder:
            raise InvalidParentError(parent_id, 'parent is not a folder')
        return parent

    def _delete_children(self, folder: FileNode) -> None:
        """Delete the subtree under a folder, depth-first."""
        children = list(registry.children_of(folder.owner_id, folder.id))
        for child in children:
            if child.is_folder:
                self._delete_children(child)
            elif child.storage_path:
                try:
                    backend = self._context.backend_for(child.storage_backend)
                    backend.delete(child.storage_path)
                except StorageError:
                    logger.exception(
                        'Failed to delete bytes of %s, continuing',
                        child.id,
                    )
            registry.delete_node(child.id)
