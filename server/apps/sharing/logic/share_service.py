"""Business logic for direct shares and share links.

``ShareService`` is the entry point for granting and revoking access.
Only the owner of a file may change who can see it; recipients and
link holders only ever read.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import final
from uuid import UUID

from django.contrib.auth.hashers import make_password

from server.apps.drive.exceptions import ForbiddenError, NodeNotFoundError
from server.apps.drive.infrastructure.context import DriveContext
from server.apps.drive.infrastructure.identity import get_display_name
from server.apps.drive.logic import registry
from server.apps.drive.logic.file_service import Download, FileService
from server.apps.drive.models import FileNode
from server.apps.sharing.exceptions import (
    InvalidLinkError,
    InvalidPermissionError,
    LinkExpiredError,
    LinkPasswordError,
    RecipientNotFoundError,
    SelfShareError,
)
from server.apps.sharing.logic import share_registry
from server.apps.sharing.logic.access import AccessDecision, decide_access
from server.apps.sharing.models import DirectShare, Permission, ShareLink

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class ShareResult:
    """Shared file and the grant that was created or updated."""

    file: FileNode
    share: DirectShare


@final
@dataclass(frozen=True, slots=True)
class Grantee:
    """Recipient of a direct share, as shown to the owner."""

    user_id: int
    email: str
    name: str
    permission: Permission
    shared_at: datetime


@final
@dataclass(frozen=True, slots=True)
class LinkDescriptor:
    """Active share link of a file, as shown to the owner."""

    token: str
    url: str
    permission: Permission
    expires_at: datetime | None
    password_protected: bool


@final
@dataclass(frozen=True, slots=True)
class ShareInfo:
    """Everyone a file is shared with."""

    shared_with: list[Grantee]
    share_link: LinkDescriptor | None


@final
@dataclass(frozen=True, slots=True)
class SharedBy:
    """Owner of a file shared with the current user."""

    user_id: int
    email: str
    name: str


@final
@dataclass(frozen=True, slots=True)
class SharedFileInfo:
    """File shared with the current user."""

    file: FileNode
    permission: Permission
    shared_at: datetime
    shared_by: SharedBy


@final
@dataclass(frozen=True, slots=True)
class LinkAccess:
    """File reached through a share link and the link's permission."""

    file: FileNode
    permission: Permission


def _coerce_permission(permission: Permission | str | None) -> Permission:
    if permission is None:
        return Permission.VIEW
    try:
        return Permission(permission)
    except ValueError as error:
        raise InvalidPermissionError(permission) from error


@final
class ShareService:
    """Share files with users and through links."""

    def __init__(self, context: DriveContext) -> None:
        """Initialize service.

        Args:
            context: Identity provider and share-link settings.
        """
        self._context = context
        self._files = FileService(context)

    def share_with_user(
        self,
        file_id: UUID | str,
        owner_id: int,
        recipient_email: str,
        permission: Permission | str = Permission.VIEW,
    ) -> ShareResult:
        """Grant a user access to an owned file or folder.

        Sharing again with the same user updates the existing grant.

        Args:
            file_id: File or folder to share.
            owner_id: Acting user, must be the owner.
            recipient_email: Email of the recipient, case-insensitive.
            permission: 'view' or 'edit'.

        Returns:
            The file and the grant.

        Raises:
            InvalidPermissionError: If the permission is unknown.
            NodeNotFoundError: If the file does not exist.
            ForbiddenError: If the user is not the owner.
            RecipientNotFoundError: If no user has this email.
            SelfShareError: If the recipient is the owner.
        """
        permission = _coerce_permission(permission)
        node = self._get_owned(file_id, owner_id, 'share')

        email = (recipient_email or '').strip().lower()
        recipient = self._context.identity.find_user_by_email(email)
        if recipient is None:
            raise RecipientNotFoundError(email)
        if recipient.pk == owner_id:
            raise SelfShareError

        share = share_registry.upsert_share(
            node.id,
            owner_id,
            recipient.pk,
            permission,
        )
        return ShareResult(file=node, share=share)

    def get_share_info(self, file_id: UUID | str, owner_id: int) -> ShareInfo:
        """Describe the direct shares and the active link of a file.

        An expired link is reported as absent; its row is kept.

        Raises:
            NodeNotFoundError: If the file does not exist.
            ForbiddenError: If the user is not the owner.
        """
        node = self._get_owned(file_id, owner_id, 'view shares of')

        grantees = []
        for share in share_registry.list_shares_by_file(node.id):
            user = self._context.identity.find_user_by_id(share.shared_with_id)
            grantees.append(Grantee(
                user_id=share.shared_with_id,
                email=user.email if user else '',
                name=get_display_name(user) if user else '',
                permission=Permission(share.permission),
                shared_at=share.created_at,
            ))

        link = share_registry.get_link_by_file(node.id)
        descriptor = None
        if link is not None and not link.is_expired():
            descriptor = LinkDescriptor(
                token=link.token,
                url=self.link_url(link),
                permission=Permission(link.permission),
                expires_at=link.expires_at,
                password_protected=link.has_password,
            )
        return ShareInfo(shared_with=grantees, share_link=descriptor)

    def create_share_link(  # noqa: WPS211
        self,
        file_id: UUID | str,
        owner_id: int,
        permission: Permission | str = Permission.VIEW,
        expires_at: datetime | None = None,
        password: str | None = None,
    ) -> ShareLink:
        """Create the share link of a file, replacing any previous link.

        Args:
            file_id: File or folder to share.
            owner_id: Acting user, must be the owner.
            permission: 'view' or 'edit'.
            expires_at: Optional expiry time.
            password: Optional plain password, stored hashed.

        Returns:
            New link; its token differs from every earlier one.

        Raises:
            InvalidPermissionError: If the permission is unknown.
            NodeNotFoundError: If the file does not exist.
            ForbiddenError: If the user is not the owner.
        """
        permission = _coerce_permission(permission)
        node = self._get_owned(file_id, owner_id, 'create links for')

        if share_registry.delete_link_by_file(node.id):
            logger.info('Rotating share link of %s', node.id)

        return share_registry.create_link(
            node.id,
            owner_id,
            permission,
            expires_at=expires_at,
            password=make_password(password) if password else None,
        )

    def revoke_share_access(
        self,
        file_id: UUID | str,
        shared_with_id: int,
        owner_id: int,
    ) -> bool:
        """Remove a user's direct share of an owned file.

        Returns:
            True if a share existed and was removed.

        Raises:
            NodeNotFoundError: If the file does not exist.
            ForbiddenError: If the user is not the owner.
        """
        node = self._get_owned(file_id, owner_id, 'revoke access to')
        revoked = share_registry.delete_share(node.id, shared_with_id)
        logger.info(
            'Revoked share of %s with user %s: %s',
            node.id,
            shared_with_id,
            revoked,
        )
        return revoked

    def remove_share_link(self, file_id: UUID | str, owner_id: int) -> bool:
        """Remove the share link of an owned file.

        Returns:
            True if a link existed and was removed.

        Raises:
            NodeNotFoundError: If the file does not exist.
            ForbiddenError: If the user is not the owner.
        """
        node = self._get_owned(file_id, owner_id, 'remove links of')
        return share_registry.delete_link_by_file(node.id)

    def list_shared_with_me(self, user_id: int) -> list[SharedFileInfo]:
        """Files shared directly with a user, newest grant first.

        Grants whose file or owner no longer exists are skipped.
        """
        shared_files = []
        for share in share_registry.list_shares_by_recipient(user_id):
            node = registry.find_by_id(share.file_id)
            owner = self._context.identity.find_user_by_id(share.owner_id)
            if node is None or owner is None:
                logger.debug('Skipping dangling share %s', share.id)
                continue

            shared_files.append(SharedFileInfo(
                file=node,
                permission=Permission(share.permission),
                shared_at=share.created_at,
                shared_by=SharedBy(
                    user_id=owner.pk,
                    email=owner.email,
                    name=get_display_name(owner),
                ),
            ))
        return shared_files

    def resolve_by_token(
        self,
        token: str,
        password: str | None = None,
    ) -> LinkAccess:
        """Open a share link.

        Args:
            token: Link token.
            password: Password, required when the link is protected.

        Returns:
            Linked file and the link's permission.

        Raises:
            InvalidLinkError: If the token is unknown.
            LinkExpiredError: If the link has expired.
            LinkPasswordError: If the password is missing or wrong.
            NodeNotFoundError: If the linked file no longer exists.
        """
        link = share_registry.get_link_by_token(token)
        if link is None:
            raise InvalidLinkError

        if link.is_expired():
            logger.warning('Expired share link used: %s', link.token[:8])
            raise LinkExpiredError(link.expires_at)

        if not link.check_password(password):
            logger.warning('Wrong password for share link: %s', link.token[:8])
            raise LinkPasswordError

        node = registry.find_by_id(link.file_id)
        if node is None:
            raise NodeNotFoundError(link.file_id)
        return LinkAccess(file=node, permission=Permission(link.permission))

    def download_by_token(
        self,
        token: str,
        password: str | None = None,
    ) -> Download:
        """Read the bytes of a file through its share link.

        Raises:
            InvalidLinkError: If the token is unknown.
            LinkExpiredError: If the link has expired.
            LinkPasswordError: If the password is missing or wrong.
            IsFolderError: If the link points at a folder.
        """
        access = self.resolve_by_token(token, password)
        return self._files.read_content(access.file)

    def check_file_access(
        self,
        file_id: UUID | str,
        user_id: int,
    ) -> AccessDecision:
        """Decide whether a user may access a file.

        Returns:
            Edit access for the owner, the share's permission for a
            recipient, a denial for anyone else or a missing file.
        """
        node = registry.find_by_id(file_id)
        if node is None:
            return AccessDecision.denied()
        return decide_access(node, user_id)

    def link_url(self, link: ShareLink) -> str:
        """Public URL of a share link."""
        return f'{self._context.share_link_base_url}/shared/{link.token}'

    def _get_owned(
        self,
        file_id: UUID | str,
        owner_id: int,
        action: str,
    ) -> FileNode:
        node = registry.find_by_id(file_id)
        if node is None:
            raise NodeNotFoundError(file_id)
        if node.owner_id != owner_id:
            logger.warning(
                'User %s tried to %s %s owned by %s',
                owner_id,
                action,
                node.id,
                node.owner_id,
            )
            raise ForbiddenError(owner_id, file_id, action)
        return node
