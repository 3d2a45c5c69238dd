"""Access resolution for files and folders.

This is the only authorization rule of the drive: the owner has full
access, anyone else needs a direct share. Share links are resolved by
token in the share service, never by user id.
"""

import logging
from uuid import UUID

from server.apps.drive.exceptions import NodeNotFoundError
from server.apps.drive.logic import registry
from server.apps.drive.models import FileNode
from server.apps.sharing.logic.share_registry import (
    AccessDecision,
    check_direct_access,
)
from server.apps.sharing.models import Permission

logger = logging.getLogger(__name__)


def decide_access(node: FileNode, user_id: int) -> AccessDecision:
    """Decide whether a user may access a loaded node.

    Args:
        node: File or folder.
        user_id: Acting user.

    Returns:
        Edit access for the owner, the direct share's permission for a
        recipient, a denial otherwise.
    """
    if node.owner_id == user_id:
        return AccessDecision(granted=True, permission=Permission.EDIT)

    decision = check_direct_access(node.id, user_id)
    if not decision.granted:
        logger.warning('Access denied to %s for user %s', node.id, user_id)
    return decision


def resolve_access(node_id: UUID | str, user_id: int) -> AccessDecision:
    """Decide whether a user may access a node by id.

    Args:
        node_id: File or folder id.
        user_id: Acting user.

    Returns:
        Access decision.

    Raises:
        NodeNotFoundError: If the node does not exist.
    """
    node = registry.find_by_id(node_id)
    if node is None:
        raise NodeNotFoundError(node_id)
    return decide_access(node, user_id)
