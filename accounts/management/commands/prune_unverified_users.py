"""
Management command to delete users who never verified their email.

Usage:
    python manage.py prune_unverified_users
    python manage.py prune_unverified_users --dry-run
"""
import logging

from django.core.management.base import BaseCommand

from accounts.models import User

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Delete users who have not verified their email within a day of registering'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many users would be deleted without deleting them'
        )

    def handle(self, *args, **options):
        users = User.objects.prunable()
        count = users.count()

        if options['dry_run']:
            self.stdout.write(f"{count} unverified user(s) would be pruned.")
            return

        for user in users.iterator():
            user.delete_avatar(save=False)
            user.delete()

        logger.info(f"Pruned {count} unverified users")
        self.stdout.write(self.style.SUCCESS(f"Pruned {count} unverified user(s)."))
