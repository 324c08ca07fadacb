# Generated manually: initial schema for the cemetery hierarchy

import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('registry', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Cemetery',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('address', models.TextField(blank=True)),
                ('city', models.CharField(default='Quezon City', max_length=100)),
                ('postal_code', models.CharField(blank=True, max_length=10)),
                ('established_date', models.DateField(blank=True, null=True)),
                ('total_area', models.FloatField(blank=True, help_text='Square meters', null=True)),
                ('boundary', models.JSONField(blank=True, default=list)),
                ('standard_price', models.DecimalField(decimal_places=2, default=Decimal('5000.00'), max_digits=10)),
                ('large_price', models.DecimalField(decimal_places=2, default=Decimal('8000.00'), max_digits=10)),
                ('family_price', models.DecimalField(decimal_places=2, default=Decimal('15000.00'), max_digits=10)),
                ('niche_price', models.DecimalField(decimal_places=2, default=Decimal('3000.00'), max_digits=10)),
                ('maintenance_fee', models.DecimalField(decimal_places=2, default=Decimal('500.00'), max_digits=10)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'cemeteries',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CemeterySection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('capacity', models.PositiveIntegerField(default=100)),
                ('boundary', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cemetery', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sections', to='cemetery.cemetery')),
            ],
            options={
                'db_table': 'cemetery_sections',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CemeteryBlock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('block_type', models.CharField(choices=[('STANDARD', 'Standard'), ('PREMIUM', 'Premium'), ('FAMILY', 'Family'), ('NICHE', 'Niche')], default='STANDARD', max_length=20)),
                ('capacity', models.PositiveIntegerField(default=50)),
                ('boundary', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='blocks', to='cemetery.cemeterysection')),
            ],
            options={
                'db_table': 'cemetery_blocks',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='CemeteryPlot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('plot_number', models.CharField(max_length=50)),
                ('plot_code', models.CharField(blank=True, max_length=50)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('boundary', models.JSONField(blank=True, default=list)),
                ('size', models.CharField(choices=[('STANDARD', 'Standard'), ('LARGE', 'Large'), ('FAMILY', 'Family'), ('NICHE', 'Niche')], default='STANDARD', max_length=20)),
                ('length', models.DecimalField(decimal_places=2, default=Decimal('2.00'), max_digits=5)),
                ('width', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=5)),
                ('depth', models.DecimalField(decimal_places=2, default=Decimal('1.50'), max_digits=5)),
                ('base_fee', models.DecimalField(decimal_places=2, default=Decimal('5000.00'), max_digits=10)),
                ('maintenance_fee', models.DecimalField(decimal_places=2, default=Decimal('500.00'), max_digits=10)),
                ('orientation', models.CharField(choices=[('NORTH', 'North'), ('SOUTH', 'South'), ('EAST', 'East'), ('WEST', 'West')], default='NORTH', max_length=10)),
                ('accessibility', models.BooleanField(default=True)),
                ('status', models.CharField(choices=[('VACANT', 'Vacant'), ('RESERVED', 'Reserved'), ('OCCUPIED', 'Occupied'), ('BLOCKED', 'Blocked')], default='VACANT', max_length=20)),
                ('max_layers', models.PositiveSmallIntegerField(default=3)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cemetery', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='plots', to='cemetery.cemetery')),
                ('section', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='plots', to='cemetery.cemeterysection')),
                ('block', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='plots', to='cemetery.cemeteryblock')),
            ],
            options={
                'db_table': 'cemetery_plots',
                'ordering': ['plot_number'],
                'indexes': [models.Index(fields=['cemetery', 'status'], name='idx_plot_cemetery_status')],
                'constraints': [
                    models.UniqueConstraint(fields=('cemetery', 'plot_number'), name='uniq_plot_number_per_cemetery'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PlotAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('layer', models.PositiveSmallIntegerField(default=1)),
                ('status', models.CharField(choices=[('ASSIGNED', 'Assigned'), ('EXHUMED', 'Exhumed'), ('TRANSFERRED', 'Transferred')], default='ASSIGNED', max_length=20)),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('released_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='plot_assignments', to=settings.AUTH_USER_MODEL)),
                ('deceased', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='plot_assignments', to='registry.deceasedrecord')),
                ('plot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='assignments', to='cemetery.cemeteryplot')),
            ],
            options={
                'db_table': 'plot_assignments',
                'ordering': ['plot', 'layer'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(status='ASSIGNED'), fields=('plot', 'layer'), name='uniq_active_layer_per_plot'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Gravestone',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('material', models.CharField(choices=[('GRANITE', 'Granite'), ('MARBLE', 'Marble'), ('BRONZE', 'Bronze'), ('CONCRETE', 'Concrete'), ('OTHER', 'Other')], default='GRANITE', max_length=20)),
                ('inscription', models.TextField(blank=True)),
                ('date_installed', models.DateField(blank=True, null=True)),
                ('condition', models.CharField(choices=[('GOOD', 'Good'), ('FAIR', 'Fair'), ('POOR', 'Poor'), ('DAMAGED', 'Damaged')], default='GOOD', max_length=20)),
                ('height', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('width', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('thickness', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('manufacturer', models.CharField(blank=True, max_length=200)),
                ('deceased_info', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('plot', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='gravestones', to='cemetery.cemeteryplot')),
            ],
            options={
                'db_table': 'gravestones',
            },
        ),
    ]
