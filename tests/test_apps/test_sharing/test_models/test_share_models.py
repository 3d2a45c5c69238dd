"""Tests for DirectShare and ShareLink models."""

from datetime import timedelta

import pytest
from django.contrib.auth.hashers import make_password
from django.db import IntegrityError, transaction
from django.utils import timezone

from server.apps.sharing.models import DirectShare, Permission, ShareLink


@pytest.mark.django_db
def test_direct_share_unique_per_recipient(report, user, other_user):
    """Test a file is shared with a user at most once."""
    DirectShare.objects.create(file=report, owner=user, shared_with=other_user)

    with pytest.raises(IntegrityError), transaction.atomic():
        DirectShare.objects.create(
            file=report,
            owner=user,
            shared_with=other_user,
            permission=Permission.EDIT,
        )


@pytest.mark.django_db
def test_direct_share_defaults_to_view(report, user, other_user):
    """Test the default permission is view."""
    share = DirectShare.objects.create(
        file=report,
        owner=user,
        shared_with=other_user,
    )

    assert share.permission == Permission.VIEW
    assert str(share) == f'{report.id} -> {other_user.id} (view)'


@pytest.mark.django_db
def test_shares_deleted_with_file(report, user, other_user):
    """Test shares and links go away with their file."""
    DirectShare.objects.create(file=report, owner=user, shared_with=other_user)
    ShareLink.objects.create(file=report, owner=user, token='t' * 43)

    report.delete()

    assert DirectShare.objects.count() == 0
    assert ShareLink.objects.count() == 0


@pytest.mark.django_db
class TestShareLink:
    """Tests for ShareLink helpers."""

    def test_token_unique(self, report, user):
        """Test two links cannot share a token."""
        ShareLink.objects.create(file=report, owner=user, token='same')

        with pytest.raises(IntegrityError), transaction.atomic():
            ShareLink.objects.create(file=report, owner=user, token='same')

    def test_no_expiry_never_expires(self, report, user):
        """Test links without expiry stay valid."""
        link = ShareLink(file=report, owner=user, token='a')

        assert not link.is_expired()

    def test_expiry(self, report, user):
        """Test expiry is evaluated against the reference time."""
        now = timezone.now()
        link = ShareLink(
            file=report,
            owner=user,
            token='a',
            expires_at=now + timedelta(hours=1),
        )

        assert not link.is_expired(now)
        assert link.is_expired(now + timedelta(hours=2))

    def test_unprotected_accepts_any_password(self, report, user):
        """Test links without a password need none."""
        link = ShareLink(file=report, owner=user, token='a')

        assert not link.has_password
        assert link.check_password(None)

    def test_protected_checks_hash(self, report, user):
        """Test protected links verify against the stored hash."""
        link = ShareLink(
            file=report,
            owner=user,
            token='a',
            password=make_password('s3cret'),
        )

        assert link.has_password
        assert link.check_password('s3cret')
        assert not link.check_password('wrong')
        assert not link.check_password(None)
