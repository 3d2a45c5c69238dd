"""Exceptions for sharing app."""

from datetime import datetime

from server.apps.drive.exceptions import (
    ConflictError,
    DriveError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)


class RecipientNotFoundError(NotFoundError):
    """Raised when no user has the email a file is shared with."""

    def __init__(self, email: str) -> None:
        """Initialize RecipientNotFoundError.

        Args:
            email: Email address that was looked up.
        """
        self.email = email
        super().__init__(f'User with this email does not exist: {email}')


class SelfShareError(ConflictError):
    """Raised when an owner tries to share a file with themselves."""

    def __init__(self) -> None:
        """Initialize SelfShareError."""
        super().__init__('Cannot share file with yourself')


class InvalidPermissionError(InvalidInputError):
    """Raised for a permission value other than view or edit."""

    def __init__(self, permission: object) -> None:
        """Initialize InvalidPermissionError.

        Args:
            permission: Rejected value.
        """
        self.permission = permission
        super().__init__(
            f'Permission must be "view" or "edit", got {permission!r}',
        )


class InvalidLinkError(NotFoundError):
    """Raised when a share-link token is unknown."""

    def __init__(self) -> None:
        """Initialize InvalidLinkError."""
        super().__init__('Invalid or expired share link')


class LinkExpiredError(DriveError):
    """Raised when a share link is used after its expiry time."""

    def __init__(self, expires_at: datetime) -> None:
        """Initialize LinkExpiredError.

        Args:
            expires_at: When the link expired.
        """
        self.expires_at = expires_at
        super().__init__(f'Share link has expired at {expires_at.isoformat()}')


class LinkPasswordError(ForbiddenError):
    """Raised when a protected link is used without the right password."""

    def __init__(self) -> None:
        """Initialize LinkPasswordError."""
        super().__init__(
            None,
            None,
            'open',
            'Share link password is missing or incorrect',
        )
