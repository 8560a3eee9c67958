import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SystemNotification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('EMAIL_SENT', 'Digest Email Sent'), ('DUE_SOON', 'Due Soon'), ('OVERDUE', 'Overdue')], max_length=20)),
                ('title', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('severity', models.CharField(choices=[('info', 'Info'), ('warn', 'Warning'), ('critical', 'Critical')], default='info', max_length=10)),
                ('unread', models.BooleanField(db_index=True, default=True)),
                ('last_triggered_at', models.DateTimeField(default=django.utils.timezone.now, help_text='When the underlying state last changed (or the digest was re-synced)')),
                ('tracking_metadata', models.JSONField(blank=True, default=dict, help_text='Change-detection state (counts), not for display')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='system_notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'system notification',
                'verbose_name_plural': 'system notifications',
                'ordering': ['-last_triggered_at'],
                'indexes': [
                    models.Index(fields=['user', 'unread'], name='notif_user_unread_idx'),
                    models.Index(fields=['user', '-last_triggered_at'], name='notif_user_triggered_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'kind'), name='unique_system_notification_per_kind'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DigestLogEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('digest_date', models.CharField(db_index=True, help_text='YYYY-MM-DD in the deadline calendar timezone', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('sent', 'Sent'), ('failed', 'Failed')], default='pending', max_length=10)),
                ('upcoming_count', models.PositiveIntegerField(default=0)),
                ('overdue_count', models.PositiveIntegerField(default=0)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('provider_message_id', models.CharField(blank=True, max_length=255, null=True)),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='digest_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'digest log entry',
                'verbose_name_plural': 'digest log entries',
                'ordering': ['-digest_date', 'user_id'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'digest_date'), name='unique_digest_per_user_per_day'),
                ],
            },
        ),
    ]
