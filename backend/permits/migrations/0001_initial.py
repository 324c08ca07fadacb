# Generated manually: initial schema for permits

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('cemetery', '0001_initial'),
        ('registry', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Permit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('permit_number', models.CharField(max_length=30, unique=True)),
                ('permit_type', models.CharField(choices=[('BURIAL', 'Burial'), ('EXHUMATION', 'Exhumation'), ('CREMATION', 'Cremation')], default='BURIAL', max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('SUBMITTED', 'Submitted'), ('PENDING_VERIFICATION', 'Pending Verification'), ('FOR_PAYMENT', 'For Payment'), ('PAID', 'Paid'), ('ISSUED', 'Issued'), ('FOR_PICKUP', 'For Pickup'), ('CLAIMED', 'Claimed'), ('REJECTED', 'Rejected'), ('CANCELLED', 'Cancelled')], default='SUBMITTED', max_length=30)),
                ('amount_due', models.DecimalField(decimal_places=2, default=Decimal('500.00'), max_digits=10)),
                ('or_number', models.CharField(blank=True, max_length=50)),
                ('issued_at', models.DateTimeField(blank=True, null=True)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('pickup_status', models.CharField(choices=[('NOT_READY', 'Not Ready'), ('READY', 'Ready'), ('CLAIMED', 'Claimed')], default='NOT_READY', max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('death_registration', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='permits', to='registry.deathregistration')),
                ('deceased', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='permits', to='registry.deceasedrecord')),
                ('plot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='permits', to='cemetery.cemeteryplot')),
                ('requested_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='permits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'permits',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['permit_type', 'status'], name='idx_permit_type_status'),
                    models.Index(fields=['requested_by'], name='idx_permit_requester'),
                ],
            },
        ),
    ]
