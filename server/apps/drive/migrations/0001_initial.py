import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FileNode',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('file', 'File'), ('folder', 'Folder')], default='file', max_length=16)),
                ('display_name', models.CharField(help_text='User-visible name, changed by rename', max_length=255)),
                ('original_name', models.CharField(editable=False, help_text='Name of the uploaded artifact (folder name for folders)', max_length=255)),
                ('storage_path', models.CharField(blank=True, default=None, help_text='Backend path or key: {owner_id}/{uuid}_{name}', max_length=1024, null=True)),
                ('storage_url', models.CharField(blank=True, default=None, help_text='Access hint issued by the backend at upload time', max_length=2048, null=True)),
                ('storage_backend', models.CharField(blank=True, choices=[('filesystem', 'Filesystem'), ('object_store', 'Object store')], default=None, max_length=16, null=True)),
                ('content_type', models.CharField(blank=True, default=None, max_length=255, null=True)),
                ('size_bytes', models.BigIntegerField(default=0, help_text='File size in bytes, always 0 for folders')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='nodes', to=settings.AUTH_USER_MODEL)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name='children', to='drive.filenode')),
            ],
            options={
                'verbose_name': 'File node',
                'verbose_name_plural': 'File nodes',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'parent'], name='drive_owner_parent_idx'),
                    models.Index(fields=['owner', '-created_at'], name='drive_owner_recent_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('kind', 'folder'), ('size_bytes', 0), ('storage_backend__isnull', True), ('storage_path__isnull', True)),
                            models.Q(('kind', 'file'), ('storage_backend__isnull', False), ('storage_path__isnull', False)),
                            _connector='OR',
                        ),
                        name='drive_node_kind_fields',
                    ),
                    models.CheckConstraint(condition=models.Q(('size_bytes__gte', 0)), name='drive_size_bytes_non_negative'),
                ],
            },
        ),
    ]
