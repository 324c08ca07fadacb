# Generated manually: initial schema for deceased records and death registrations

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DeceasedRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('middle_name', models.CharField(blank=True, max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('suffix', models.CharField(blank=True, max_length=20)),
                ('sex', models.CharField(choices=[('MALE', 'Male'), ('FEMALE', 'Female')], default='MALE', max_length=10)),
                ('date_of_birth', models.DateField()),
                ('date_of_death', models.DateField()),
                ('age', models.PositiveIntegerField(blank=True, null=True)),
                ('civil_status', models.CharField(default='Single', max_length=30)),
                ('citizenship', models.CharField(default='Filipino', max_length=50)),
                ('occupation', models.CharField(blank=True, max_length=100)),
                ('religion', models.CharField(blank=True, max_length=100)),
                ('place_of_death', models.CharField(blank=True, max_length=255)),
                ('cause_of_death', models.TextField(blank=True)),
                ('residence_address', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'deceased_records',
                'ordering': ['last_name', 'first_name'],
                'indexes': [models.Index(fields=['last_name', 'first_name'], name='idx_deceased_name')],
            },
        ),
        migrations.CreateModel(
            name='DeathRegistration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('registration_number', models.CharField(max_length=30, unique=True)),
                ('registration_type', models.CharField(choices=[('REGULAR', 'Regular'), ('DELAYED', 'Delayed')], default='REGULAR', max_length=10)),
                ('informant_name', models.CharField(max_length=200)),
                ('informant_relationship', models.CharField(blank=True, max_length=100)),
                ('informant_address', models.TextField(blank=True)),
                ('informant_contact', models.CharField(blank=True, max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('SUBMITTED', 'Submitted'), ('PENDING_VERIFICATION', 'Pending Verification'), ('FOR_PAYMENT', 'For Payment'), ('PAID', 'Paid'), ('PROCESSING', 'Processing'), ('REGISTERED', 'Registered'), ('FOR_PICKUP', 'For Pickup'), ('CLAIMED', 'Claimed'), ('RETURNED', 'Returned'), ('REJECTED', 'Rejected'), ('EXPIRED', 'Expired')], default='SUBMITTED', max_length=30)),
                ('amount_due', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('or_number', models.CharField(blank=True, max_length=50)),
                ('processing_due_date', models.DateField(blank=True, null=True)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('registered_at', models.DateTimeField(blank=True, null=True)),
                ('pickup_status', models.CharField(choices=[('NOT_READY', 'Not Ready'), ('READY_FOR_PICKUP', 'Ready for Pickup'), ('CLAIMED', 'Claimed')], default='NOT_READY', max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deceased', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='registrations', to='registry.deceasedrecord')),
                ('submitted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='death_registrations', to=settings.AUTH_USER_MODEL)),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_registrations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'death_registrations',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['status'], name='idx_death_reg_status'),
                    models.Index(fields=['submitted_by', 'status'], name='idx_death_reg_owner_status'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RegistrationDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('doc_type', models.CharField(max_length=50)),
                ('file', models.FileField(upload_to='registrations/%Y/%m/')),
                ('original_name', models.CharField(max_length=255)),
                ('mime_type', models.CharField(max_length=100)),
                ('size', models.PositiveIntegerField()),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('registration', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documents', to='registry.deathregistration')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'registration_documents',
                'ordering': ['uploaded_at'],
            },
        ),
    ]
