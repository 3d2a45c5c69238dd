"""Persistence queries for direct shares and share links.

Like the node registry, this module stores and fetches rows without
checking who is asking.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Final, Self, final
from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone

from server.apps.sharing.models import DirectShare, Permission, ShareLink

logger = logging.getLogger(__name__)

# Token length in bytes (generates 43 URL-safe chars)
_TOKEN_BYTES: Final = 32


@final
@dataclass(frozen=True, slots=True)
class AccessDecision:
    """Outcome of an access check on a file."""

    granted: bool
    permission: Permission | None = None

    @classmethod
    def denied(cls) -> Self:
        """Decision refusing access."""
        return cls(granted=False)


def upsert_share(
    file_id: UUID,
    owner_id: int,
    shared_with_id: int,
    permission: Permission,
) -> DirectShare:
    """Create a direct share, or update the existing one for the pair.

    Args:
        file_id: Shared file or folder.
        owner_id: Owner granting access.
        shared_with_id: Recipient.
        permission: Granted permission.

    Returns:
        Created or updated DirectShare.
    """
    share, created = DirectShare.objects.update_or_create(
        file_id=file_id,
        shared_with_id=shared_with_id,
        defaults={
            'owner_id': owner_id,
            'permission': permission,
            'created_at': timezone.now(),
        },
    )
    logger.info(
        '%s share of %s with user %s (%s)',
        'Created' if created else 'Updated',
        file_id,
        shared_with_id,
        permission,
    )
    return share


def list_shares_by_file(file_id: UUID) -> list[DirectShare]:
    """All direct shares of a file, newest first."""
    return list(DirectShare.objects.filter(file_id=file_id))


def list_shares_by_recipient(user_id: int) -> list[DirectShare]:
    """All direct shares granted to a user, newest first."""
    return list(DirectShare.objects.filter(shared_with_id=user_id))


def delete_share(file_id: UUID, shared_with_id: int) -> bool:
    """Delete the direct share of a file with a user.

    Returns:
        True if a share existed and was deleted.
    """
    deleted, _ = DirectShare.objects.filter(
        file_id=file_id,
        shared_with_id=shared_with_id,
    ).delete()
    return deleted > 0


def generate_token() -> str:
    """Generate an unguessable share-link token."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def create_link(  # noqa: WPS211
    file_id: UUID,
    owner_id: int,
    permission: Permission,
    expires_at: datetime | None = None,
    password: str | None = None,
) -> ShareLink:
    """Create a share link with a fresh token.

    Args:
        file_id: Shared file or folder.
        owner_id: Owner creating the link.
        permission: Permission granted to token holders.
        expires_at: Optional expiry time.
        password: Optional password hash, stored as given.

    Returns:
        Created ShareLink.
    """
    link = ShareLink.objects.create(
        file_id=file_id,
        owner_id=owner_id,
        token=generate_token(),
        permission=permission,
        expires_at=expires_at,
        password=password,
    )
    logger.info('Share link created for %s: %s', file_id, link.token[:8])
    return link


def get_link_by_token(token: str) -> ShareLink | None:
    """Get a share link by token, expired or not."""
    if not token:
        return None
    return ShareLink.objects.filter(token=token).first()


def get_link_by_file(file_id: UUID) -> ShareLink | None:
    """Get the newest share link of a file, expired or not."""
    return ShareLink.objects.filter(file_id=file_id).first()


def delete_link_by_file(file_id: UUID) -> bool:
    """Delete every share link of a file.

    Returns:
        True if at least one link was deleted.
    """
    deleted, _ = ShareLink.objects.filter(file_id=file_id).delete()
    if deleted:
        logger.info('Share links deleted for %s: %d', file_id, deleted)
    return deleted > 0


def check_direct_access(file_id: UUID, user_id: int) -> AccessDecision:
    """Look up the direct share of a file with a user.

    Args:
        file_id: File or folder.
        user_id: Potential recipient.

    Returns:
        Granted decision with the share's permission, or a denial.
    """
    permission = DirectShare.objects.filter(
        file_id=file_id,
        shared_with_id=user_id,
    ).values_list('permission', flat=True).first()

    if permission is None:
        return AccessDecision.denied()
    return AccessDecision(granted=True, permission=Permission(permission))


def expired_links(cutoff: datetime) -> QuerySet[ShareLink]:
    """Links whose expiry time is before the cutoff, oldest first.

    Args:
        cutoff: Links expiring before this time are returned.

    Returns:
        QuerySet of expired links.
    """
    return ShareLink.objects.filter(
        expires_at__lt=cutoff,
    ).order_by('expires_at')


def delete_links(link_ids: list[UUID]) -> int:
    """Delete share links by id.

    Returns:
        Number of deleted links.
    """
    deleted, _ = ShareLink.objects.filter(id__in=link_ids).delete()
    return deleted
