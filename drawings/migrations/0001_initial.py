import django.db.models.deletion
from django.db import migrations, models

import drawings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='UploadedFile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('original_name', models.CharField(help_text='File name as sent by the client.', max_length=255)),
                ('stored_file_name', models.CharField(help_text='Unique name of the temporary copy inside UPLOAD_DIR.', max_length=255, unique=True)),
                ('status', models.CharField(choices=[('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed')], db_index=True, default='processing', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='BlockRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, help_text='Name of the block definition being placed.', max_length=255)),
                ('layer', models.CharField(blank=True, max_length=255, null=True)),
                ('coordinates', models.JSONField(validators=[drawings.models.validate_coordinates])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('file', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='blocks', to='drawings.uploadedfile')),
            ],
            options={
                'ordering': ['name', 'id'],
            },
        ),
    ]
