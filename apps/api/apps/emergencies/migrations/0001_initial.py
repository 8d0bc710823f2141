# Generated migration for emergencies app

import uuid
import django.core.validators
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


BLOOD_GROUPS = [
    ('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'),
    ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='EmergencyPost',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('blood_group', models.CharField(choices=BLOOD_GROUPS, max_length=3)),
                ('quantity', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('location', models.CharField(max_length=255)),
                ('urgency_level', models.CharField(choices=[('critical', 'Critical'), ('high', 'High'), ('medium', 'Medium'), ('low', 'Low')], default='high', max_length=10)),
                ('description', models.TextField(blank=True, null=True)),
                ('contact_phone', models.CharField(max_length=30)),
                ('status', models.CharField(choices=[('active', 'Active'), ('fulfilled', 'Fulfilled'), ('closed', 'Closed')], default='active', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('posted_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='emergency_posts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Emergency Post',
                'verbose_name_plural': 'Emergency Posts',
                'db_table': 'emergency_posts',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Participation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('volunteer_name', models.CharField(blank=True, max_length=255, null=True)),
                ('age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('gender', models.CharField(blank=True, max_length=10, null=True)),
                ('weight', models.DecimalField(blank=True, decimal_places=1, max_digits=5, null=True)),
                ('city', models.CharField(blank=True, max_length=120, null=True)),
                ('contact_number', models.CharField(blank=True, max_length=30, null=True)),
                ('blood_sugar_level', models.CharField(blank=True, max_length=50, null=True)),
                ('stress_level', models.CharField(blank=True, max_length=50, null=True)),
                ('type_of_work', models.CharField(blank=True, max_length=100, null=True)),
                ('major_diseases_history', models.TextField(blank=True, null=True)),
                ('previous_donation', models.BooleanField(blank=True, null=True)),
                ('message', models.TextField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('declined', 'Declined')], default='pending', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('emergency', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participations', to='emergencies.emergencypost')),
                ('volunteer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='participations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Participation',
                'verbose_name_plural': 'Participations',
                'db_table': 'participations',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='emergencypost',
            constraint=models.CheckConstraint(condition=models.Q(('quantity__gte', 1)), name='emergency_post_quantity_positive'),
        ),
        migrations.AddIndex(
            model_name='emergencypost',
            index=models.Index(fields=['status', '-created_at'], name='idx_post_status_created'),
        ),
        migrations.AddIndex(
            model_name='emergencypost',
            index=models.Index(fields=['posted_by'], name='idx_post_posted_by'),
        ),
        migrations.AddIndex(
            model_name='emergencypost',
            index=models.Index(fields=['blood_group'], name='idx_post_blood_group'),
        ),
        migrations.AddIndex(
            model_name='participation',
            index=models.Index(fields=['emergency', 'status'], name='idx_participation_post'),
        ),
        migrations.AddIndex(
            model_name='participation',
            index=models.Index(fields=['volunteer'], name='idx_participation_volunteer'),
        ),
    ]
