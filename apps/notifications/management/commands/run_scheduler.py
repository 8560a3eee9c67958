"""
Management command to run the in-process notification scheduler.

Starts the daily digest and the due-soon / overdue refresh timers and
blocks until interrupted, then shuts the scheduler down.

Usage:
    python manage.py run_scheduler
    python manage.py run_scheduler --run-now   # also run the digest once at startup
"""
import signal
import threading

from django.core.management.base import BaseCommand

from apps.notifications import scheduler, tasks


class Command(BaseCommand):
    help = 'Run the in-process notification scheduler'

    def add_arguments(self, parser):
        parser.add_argument(
            '--run-now',
            action='store_true',
            help='Run the daily digest once immediately after starting',
        )

    def handle(self, *args, **options):
        stop_event = threading.Event()

        def _request_stop(signum, frame):
            stop_event.set()

        signal.signal(signal.SIGTERM, _request_stop)
        signal.signal(signal.SIGINT, _request_stop)

        handle = scheduler.initialize()
        try:
            self.stdout.write(self.style.SUCCESS('Notification scheduler running.'))
            for job_id, next_run in handle.next_run_times().items():
                self.stdout.write(f'  • {job_id} → next run {next_run}')

            if options['run_now']:
                stats = scheduler.run_job('manual_digest', tasks.run_digest_now)
                self.stdout.write(f'Digest run: {stats}')

            stop_event.wait()
        finally:
            handle.shutdown()
            self.stdout.write(self.style.WARNING('Notification scheduler stopped.'))
