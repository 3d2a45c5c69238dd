"""Tests for purge_share_links management command."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from server.apps.sharing.logic.share_registry import create_link
from server.apps.sharing.models import Permission, ShareLink


@pytest.mark.django_db
class TestPurgeShareLinksCommand:
    """Tests for purge_share_links management command."""

    def test_purges_long_expired_links(self, report, user):
        """Test links expired beyond the grace period are deleted."""
        link = create_link(
            report.id,
            user.id,
            Permission.VIEW,
            expires_at=timezone.now() - timedelta(days=31),
        )

        out = StringIO()
        call_command('purge_share_links', stdout=out)

        assert not ShareLink.objects.filter(id=link.id).exists()
        assert 'Purged 1 share links' in out.getvalue()

    def test_preserves_recent_and_open_links(self, report, user):
        """Test recently expired and non-expiring links are kept."""
        create_link(
            report.id,
            user.id,
            Permission.VIEW,
            expires_at=timezone.now() - timedelta(days=29),
        )
        create_link(report.id, user.id, Permission.VIEW)

        out = StringIO()
        call_command('purge_share_links', stdout=out)

        assert ShareLink.objects.count() == 2
        assert 'Purged 0 share links' in out.getvalue()

    def test_dry_run(self, report, user):
        """Test dry run reports without deleting."""
        create_link(
            report.id,
            user.id,
            Permission.VIEW,
            expires_at=timezone.now() - timedelta(days=31),
        )

        out = StringIO()
        call_command('purge_share_links', '--dry-run', stdout=out)

        assert ShareLink.objects.count() == 1
        assert 'Would purge 1 share links' in out.getvalue()

    def test_grace_period_setting(self, report, user, settings):
        """Test the grace period comes from settings."""
        settings.DRIVE_LINK_PURGE_GRACE_DAYS = 0
        create_link(
            report.id,
            user.id,
            Permission.VIEW,
            expires_at=timezone.now() - timedelta(hours=1),
        )

        call_command('purge_share_links', stdout=StringIO())

        assert ShareLink.objects.count() == 0

    def test_batch_size(self, report, user):
        """Test at most batch-size links are purged per run."""
        for _ in range(3):
            create_link(
                report.id,
                user.id,
                Permission.VIEW,
                expires_at=timezone.now() - timedelta(days=60),
            )

        call_command('purge_share_links', '--batch-size', '2', stdout=StringIO())

        assert ShareLink.objects.count() == 1
