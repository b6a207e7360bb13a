# Generated manually for receipts app

import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Receipt',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('receipt_number', models.PositiveIntegerField(db_index=True)),
                ('state', models.CharField(choices=[('unissued', 'Not Issued'), ('issued', 'Issued'), ('used', 'Used')], default='unissued', max_length=20)),
                ('student_name', models.CharField(blank=True, max_length=200)),
                ('section', models.CharField(blank=True, max_length=50)),
                ('issuing_party', models.CharField(blank=True, max_length=200)),
                ('issued_at', models.DateTimeField(blank=True, null=True)),
                ('used_by', models.CharField(blank=True, max_length=200)),
                ('used_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'receipts',
                'ordering': ['receipt_number', 'created_at'],
                'indexes': [
                    models.Index(fields=['state'], name='receipts_state_idx'),
                    models.Index(fields=['student_name'], name='receipts_student_name_idx'),
                ],
            },
        ),
    ]
