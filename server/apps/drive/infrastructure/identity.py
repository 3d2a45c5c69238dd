"""Lookup of users referenced by shares.

The core never authenticates anyone; it only resolves user ids and
email addresses to user records for share targets and display.
"""

from typing import Any, Protocol, final

from django.contrib.auth import get_user_model

User = get_user_model()

# User type for Django's dynamic user model
_User = Any


class IdentityProvider(Protocol):
    """Source of user records."""

    def find_user_by_email(self, email: str) -> _User | None:
        """Find a user by email address."""

    def find_user_by_id(self, user_id: int) -> _User | None:
        """Find a user by primary key."""


@final
class DjangoIdentityProvider:
    """Identity provider backed by ``django.contrib.auth``."""

    def find_user_by_email(self, email: str) -> _User | None:
        """Find an active user by email, ignoring case and whitespace.

        Args:
            email: Email address to look up.

        Returns:
            Matching user or None.
        """
        normalized = email.strip()
        if not normalized:
            return None
        return User.objects.filter(
            email__iexact=normalized,
            is_active=True,
        ).order_by('pk').first()

    def find_user_by_id(self, user_id: int) -> _User | None:
        """Find a user by primary key.

        Args:
            user_id: User primary key.

        Returns:
            Matching user or None.
        """
        return User.objects.filter(pk=user_id).first()


def get_display_name(user: _User) -> str:
    """Human-readable name of a user.

    Args:
        user: User record.

    Returns:
        Full name if set, otherwise the username.
    """
    return user.get_full_name() or user.get_username()
