# Generated manually: initial schema for physical count sessions

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
            name='PhysicalCountSession',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('session_number', models.CharField(max_length=30, unique=True)),
                ('count_date', models.DateField()),
                ('conducted_by', models.CharField(max_length=200)),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'In Progress'), ('BALANCED', 'Balanced'), ('DISCREPANCY_FOUND', 'Discrepancy Found'), ('COMPLETED', 'Completed')], default='IN_PROGRESS', max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('items_counted', models.PositiveIntegerField(default=0)),
                ('discrepancies', models.PositiveIntegerField(default=0)),
                ('adjustment_made', models.BooleanField(default=False)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='count_sessions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'physical_count_sessions',
                'ordering': ['-count_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PhysicalCountEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('system_quantity', models.IntegerField()),
                ('actual_quantity', models.PositiveIntegerField()),
                ('variance', models.IntegerField()),
                ('unit_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('discrepancy_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('remarks', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='count_entries', to='inventory.item')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='physical_inventory.physicalcountsession')),
            ],
            options={
                'db_table': 'physical_count_entries',
                'ordering': ['id'],
                'constraints': [
                    models.UniqueConstraint(fields=('session', 'item'), name='unique_count_entry_per_item'),
                ],
            },
        ),
    ]
