# Generated manually: initial schema for RIS requests and issuances

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RISRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ris_number', models.CharField(max_length=30, unique=True)),
                ('department', models.CharField(max_length=200)),
                ('requested_by', models.CharField(max_length=200)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('purpose', models.TextField()),
                ('date_needed', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('PENDING_APPROVAL', 'Pending Approval'), ('APPROVED', 'Approved'), ('NO_STOCK', 'No Stock'), ('REJECTED', 'Rejected'), ('ISSUED', 'Issued')], default='PENDING_APPROVAL', max_length=20)),
                ('approved_by', models.CharField(blank=True, max_length=200)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_by', models.CharField(blank=True, max_length=200)),
                ('rejection_reason', models.TextField(blank=True)),
                ('issued_by', models.CharField(blank=True, max_length=200)),
                ('issued_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='ris_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'RIS request',
                'db_table': 'ris_requests',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='RISItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity_requested', models.PositiveIntegerField()),
                ('quantity_approved', models.PositiveIntegerField(blank=True, null=True)),
                ('justification', models.TextField(blank=True)),
                ('remarks', models.TextField(blank=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ris_items', to='inventory.item')),
                ('ris', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='requisitions.risrequest')),
            ],
            options={
                'db_table': 'ris_items',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Issuance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('issuance_number', models.CharField(max_length=30, unique=True)),
                ('issued_to', models.CharField(max_length=200)),
                ('department', models.CharField(max_length=200)),
                ('purpose', models.TextField(blank=True)),
                ('issued_by', models.CharField(max_length=200)),
                ('issued_at', models.DateTimeField()),
                ('acknowledged_by', models.CharField(blank=True, max_length=200)),
                ('acknowledged_at', models.DateTimeField(blank=True, null=True)),
                ('remarks', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('ris', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='issuance', to='requisitions.risrequest')),
            ],
            options={
                'db_table': 'issuances',
                'ordering': ['-issued_at'],
            },
        ),
        migrations.CreateModel(
            name='IssuanceItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField()),
                ('unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('issuance', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='requisitions.issuance')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='issuance_items', to='inventory.item')),
            ],
            options={
                'db_table': 'issuance_items',
                'ordering': ['id'],
            },
        ),
    ]
