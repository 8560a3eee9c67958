"""
Management command to run the deadline digest immediately.

Usage:
    python manage.py run_digest                 # digest emails + notifications
    python manage.py run_digest --refresh-only  # notifications only, no email
"""
from django.core.management.base import BaseCommand

from apps.notifications import tasks


class Command(BaseCommand):
    help = 'Run the deadline digest (or only the notification refresh) now'

    def add_arguments(self, parser):
        parser.add_argument(
            '--refresh-only',
            action='store_true',
            help='Only reconcile due-soon / overdue notifications; send no email',
        )

    def handle(self, *args, **options):
        if options['refresh_only']:
            stats = tasks.refresh_overdue_notifications()
            self.stdout.write(self.style.SUCCESS(
                f"Refreshed notifications for {stats['users']} user(s): "
                f"{stats['created']} created, {stats['updated']} updated, "
                f"{stats['unchanged']} unchanged, {stats['errors']} error(s)"
            ))
            return

        stats = tasks.run_digest_now()
        self.stdout.write(self.style.SUCCESS(
            f"Digest done for {stats['users']} user(s): "
            f"{stats['emails_sent']} sent, {stats['emails_skipped']} skipped, "
            f"{stats['emails_failed']} failed, {stats['errors']} error(s)"
        ))
