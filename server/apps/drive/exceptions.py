"""Exceptions for drive app.

Every failure the core signals derives from ``DriveError`` and belongs to
one of the kinds below, so a transport layer can map kinds to responses
without looking at backend exceptions.
"""

from uuid import UUID


class DriveError(Exception):
    """Base class for all drive and sharing failures."""


class NotFoundError(DriveError):
    """Raised when a file, folder, link or user does not exist."""


class NodeNotFoundError(NotFoundError):
    """Raised when no file or folder has the requested id."""

    def __init__(self, node_id: UUID | str) -> None:
        """Initialize NodeNotFoundError.

        Args:
            node_id: Id that was looked up.
        """
        self.node_id = node_id
        super().__init__(f'File not found: {node_id}')


class ForbiddenError(DriveError):
    """Raised when an authenticated user may not perform an action."""

    def __init__(
        self,
        user_id: int | None,
        node_id: UUID | str | None,
        action: str,
        message: str | None = None,
    ) -> None:
        """Initialize ForbiddenError.

        Args:
            user_id: Acting user.
            node_id: Target file or folder.
            action: Short name of the denied action (e.g. 'rename').
            message: Replaces the generated message.
        """
        self.user_id = user_id
        self.node_id = node_id
        self.action = action
        super().__init__(
            message or f'User {user_id} may not {action} file {node_id}',
        )


class InvalidInputError(DriveError):
    """Raised for malformed names, parents or permission values."""


class EmptyNameError(InvalidInputError):
    """Raised when a name is blank after trimming."""

    def __init__(self) -> None:
        """Initialize EmptyNameError."""
        super().__init__('Name cannot be empty')


class InvalidParentError(InvalidInputError):
    """Raised when a parent id does not point at an existing folder."""

    def __init__(self, parent_id: UUID | str, reason: str) -> None:
        """Initialize InvalidParentError.

        Args:
            parent_id: Rejected parent id.
            reason: Why the parent was rejected.
        """
        self.parent_id = parent_id
        self.reason = reason
        super().__init__(f'Invalid parent {parent_id}: {reason}')


class IsFolderError(InvalidInputError):
    """Raised when byte content is requested for a folder."""

    def __init__(self, node_id: UUID) -> None:
        """Initialize IsFolderError.

        Args:
            node_id: Id of the folder.
        """
        self.node_id = node_id
        super().__init__(f'Cannot download a folder: {node_id}')


class FileTooLargeError(InvalidInputError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        """Initialize FileTooLargeError.

        Args:
            size_bytes: Size of the rejected upload.
            limit_bytes: Maximum accepted size.
        """
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f'File size {size_bytes} bytes exceeds limit of '
            f'{limit_bytes} bytes',
        )


class ConflictError(DriveError):
    """Raised when an operation clashes with existing state."""


class DuplicateNameError(ConflictError):
    """Raised when a folder with the same name exists under the parent."""

    def __init__(self, name: str, parent_id: UUID | None) -> None:
        """Initialize DuplicateNameError.

        Args:
            name: Conflicting folder name.
            parent_id: Parent folder, None for root level.
        """
        self.name = name
        self.parent_id = parent_id
        location = parent_id or 'root'
        super().__init__(
            f'Folder "{name}" already exists in {location}',
        )


class StorageError(DriveError):
    """Raised when the storage backend fails."""


class StorageWriteError(StorageError):
    """Raised when content cannot be written to the backend."""


class StorageNotFoundError(StorageError):
    """Raised when stored content is missing from the backend."""

    def __init__(self, storage_path: str) -> None:
        """Initialize StorageNotFoundError.

        Args:
            storage_path: Backend path that was not found.
        """
        self.storage_path = storage_path
        super().__init__(f'Stored object not found: {storage_path}')


class MissingPathError(StorageError):
    """Raised when a file row has no storage path."""

    def __init__(self, node_id: UUID) -> None:
        """Initialize MissingPathError.

        Args:
            node_id: Id of the inconsistent file row.
        """
        self.node_id = node_id
        super().__init__(f'File {node_id} has no storage path')


class InvalidStoragePathError(StorageError):
    """Raised when a storage path is outside its owner's namespace."""
