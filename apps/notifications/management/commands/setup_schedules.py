"""
Management command to set up Django-Q2 schedules for notification jobs.

For deployments that run a Django-Q2 cluster instead of the in-process
scheduler (run_scheduler). Registers:
- Daily deadline digest (DIGEST_SEND_HOUR:DIGEST_SEND_MINUTE)
- Due-soon / overdue notification refresh (every OVERDUE_REFRESH_MINUTES)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
Existing schedules will be updated if their configuration changes.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule


def schedule_definitions():
    """Name → Schedule defaults for every notification job."""
    return {
        'Daily Deadline Digest': {
            'func': 'apps.notifications.tasks.run_daily_digest',
            'schedule_type': Schedule.CRON,
            'cron': f'{settings.DIGEST_SEND_MINUTE} {settings.DIGEST_SEND_HOUR} * * *',
            'repeats': -1,  # Run forever
        },
        'Deadline Notification Refresh': {
            'func': 'apps.notifications.tasks.refresh_overdue_notifications',
            'schedule_type': Schedule.MINUTES,
            'minutes': settings.OVERDUE_REFRESH_MINUTES,
            'repeats': -1,
        },
    }


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for notification jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        schedules_created = 0
        schedules_updated = 0

        for name, defaults in schedule_definitions().items():
            _, created = Schedule.objects.update_or_create(name=name, defaults=defaults)
            if created:
                schedules_created += 1
                self.stdout.write(self.style.SUCCESS(f'✓ Created schedule: {name}'))
            else:
                schedules_updated += 1
                self.stdout.write(self.style.WARNING(f'↻ Updated schedule: {name}'))

        total = schedules_created + schedules_updated
        self.stdout.write('')
        self.stdout.write(
            self.style.SUCCESS(
                f'Done! {schedules_created} schedule(s) created, '
                f'{schedules_updated} schedule(s) updated. '
                f'Total: {total} schedules configured.'
            )
        )

        self.stdout.write('')
        self.stdout.write('Schedule Summary:')
        self.stdout.write(
            f'  • Daily Deadline Digest         → Daily at '
            f'{settings.DIGEST_SEND_HOUR:02d}:{settings.DIGEST_SEND_MINUTE:02d} '
            f'({settings.DEADLINE_TIME_ZONE})'
        )
        self.stdout.write(
            f'  • Deadline Notification Refresh → Every '
            f'{settings.OVERDUE_REFRESH_MINUTES} minutes'
        )
        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
