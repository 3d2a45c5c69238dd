"""Management command to purge long-expired share links."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.sharing.logic.share_registry import delete_links, expired_links

_DEFAULT_GRACE_DAYS: Final = 30
_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete share links that expired more than the grace period ago."""

    help = 'Purge share links expired for longer than the grace period'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max links to process (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the purge command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        grace_days = getattr(
            settings,
            'DRIVE_LINK_PURGE_GRACE_DAYS',
            _DEFAULT_GRACE_DAYS,
        )

        cutoff = timezone.now() - timedelta(days=grace_days)

        self.stdout.write(
            f'Looking for share links expired before {cutoff} '
            f'(older than {grace_days} days)',
        )

        old_links = list(expired_links(cutoff)[:batch_size])

        if dry_run:
            for link in old_links:
                self.stdout.write(
                    f'Would delete: {link.token[:8]}... '
                    f'(file: {link.file_id}, expired: {link.expires_at})',
                )
            self.stdout.write(
                self.style.SUCCESS(f'Would purge {len(old_links)} share links'),
            )
            return

        count = delete_links([link.id for link in old_links])
        logger.info('Purged %d expired share links', count)
        self.stdout.write(
            self.style.SUCCESS(f'Purged {count} share links'),
        )
