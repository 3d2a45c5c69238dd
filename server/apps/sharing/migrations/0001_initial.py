import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('drive', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DirectShare',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('permission', models.CharField(choices=[('view', 'View'), ('edit', 'Edit')], default='view', max_length=8)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('file', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='direct_shares', to='drive.filenode')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='granted_shares', to=settings.AUTH_USER_MODEL)),
                ('shared_with', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='received_shares', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Direct share',
                'verbose_name_plural': 'Direct shares',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['shared_with', '-created_at'], name='sharing_recipient_recent_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('file', 'shared_with'), name='sharing_file_recipient_unique'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ShareLink',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('token', models.CharField(editable=False, max_length=64, unique=True)),
                ('permission', models.CharField(choices=[('view', 'View'), ('edit', 'Edit')], default='view', max_length=8)),
                ('expires_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('password', models.CharField(blank=True, default=None, help_text='Password hash, empty for unprotected links', max_length=128, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('file', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='share_links', to='drive.filenode')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='share_links', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Share link',
                'verbose_name_plural': 'Share links',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['file', '-created_at'], name='sharing_link_file_recent_idx'),
                ],
            },
        ),
    ]
