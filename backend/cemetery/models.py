from decimal import Decimal

from django.conf import settings
from django.db import models


class Cemetery(models.Model):
    """Municipal cemetery with its map boundary and default plot pricing"""
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, default='Quezon City')
    postal_code = models.CharField(max_length=10, blank=True)
    established_date = models.DateField(null=True, blank=True)
    total_area = models.FloatField(null=True, blank=True, help_text="Square meters")
    boundary = models.JSONField(default=list, blank=True)
    standard_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('5000.00'))
    large_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('8000.00'))
    family_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('15000.00'))
    niche_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('3000.00'))
    maintenance_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('500.00'))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'cemeteries'
        ordering = ['name']


class CemeterySection(models.Model):
    cemetery = models.ForeignKey(Cemetery, on_delete=models.PROTECT, related_name='sections')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    capacity = models.PositiveIntegerField(default=100)
    boundary = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'{self.cemetery.name} / {self.name}'

    class Meta:
        db_table = 'cemetery_sections'
        ordering = ['name']


class CemeteryBlock(models.Model):
    BLOCK_TYPE_CHOICES = [
        ('STANDARD', 'Standard'),
        ('PREMIUM', 'Premium'),
        ('FAMILY', 'Family'),
        ('NICHE', 'Niche'),
    ]

    section = models.ForeignKey(CemeterySection, on_delete=models.PROTECT, related_name='blocks')
    name = models.CharField(max_length=100)
    block_type = models.CharField(max_length=20, choices=BLOCK_TYPE_CHOICES, default='STANDARD')
    capacity = models.PositiveIntegerField(default=50)
    boundary = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'{self.section} / {self.name}'

    class Meta:
        db_table = 'cemetery_blocks'
        ordering = ['name']


class CemeteryPlot(models.Model):
    STATUS_VACANT = 'VACANT'
    STATUS_RESERVED = 'RESERVED'
    STATUS_OCCUPIED = 'OCCUPIED'
    STATUS_BLOCKED = 'BLOCKED'
    STATUS_CHOICES = [
        (STATUS_VACANT, 'Vacant'),
        (STATUS_RESERVED, 'Reserved'),
        (STATUS_OCCUPIED, 'Occupied'),
        (STATUS_BLOCKED, 'Blocked'),
    ]
    SIZE_CHOICES = [
        ('STANDARD', 'Standard'),
        ('LARGE', 'Large'),
        ('FAMILY', 'Family'),
        ('NICHE', 'Niche'),
    ]
    ORIENTATION_CHOICES = [
        ('NORTH', 'North'),
        ('SOUTH', 'South'),
        ('EAST', 'East'),
        ('WEST', 'West'),
    ]

    cemetery = models.ForeignKey(Cemetery, on_delete=models.PROTECT, related_name='plots')
    section = models.ForeignKey(CemeterySection, on_delete=models.PROTECT, related_name='plots', null=True, blank=True)
    block = models.ForeignKey(CemeteryBlock, on_delete=models.PROTECT, related_name='plots', null=True, blank=True)
    plot_number = models.CharField(max_length=50)
    plot_code = models.CharField(max_length=50, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    boundary = models.JSONField(default=list, blank=True)
    size = models.CharField(max_length=20, choices=SIZE_CHOICES, default='STANDARD')
    length = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('2.00'))
    width = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'))
    depth = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.50'))
    base_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('5000.00'))
    maintenance_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('500.00'))
    orientation = models.CharField(max_length=10, choices=ORIENTATION_CHOICES, default='NORTH')
    accessibility = models.BooleanField(default=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_VACANT)
    max_layers = models.PositiveSmallIntegerField(default=3)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.plot_code or self.plot_number

    def save(self, *args, **kwargs):
        if not self.plot_code:
            self.plot_code = self.plot_number
        super().save(*args, **kwargs)

    def occupied_layers(self):
        return set(self.assignments.filter(status=PlotAssignment.STATUS_ASSIGNED).values_list('layer', flat=True))

    class Meta:
        db_table = 'cemetery_plots'
        ordering = ['plot_number']
        constraints = [
            models.UniqueConstraint(fields=['cemetery', 'plot_number'], name='uniq_plot_number_per_cemetery'),
        ]
        indexes = [
            models.Index(fields=['cemetery', 'status'], name='idx_plot_cemetery_status'),
        ]


class PlotAssignment(models.Model):
    """A deceased person interred in one layer of a plot"""
    STATUS_ASSIGNED = 'ASSIGNED'
    STATUS_EXHUMED = 'EXHUMED'
    STATUS_TRANSFERRED = 'TRANSFERRED'
    STATUS_CHOICES = [
        (STATUS_ASSIGNED, 'Assigned'),
        (STATUS_EXHUMED, 'Exhumed'),
        (STATUS_TRANSFERRED, 'Transferred'),
    ]

    plot = models.ForeignKey(CemeteryPlot, on_delete=models.PROTECT, related_name='assignments')
    deceased = models.ForeignKey('registry.DeceasedRecord', on_delete=models.PROTECT, related_name='plot_assignments')
    layer = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ASSIGNED)
    assigned_at = models.DateTimeField(auto_now_add=True)
    assigned_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='plot_assignments')
    released_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    def __str__(self):
        return f'{self.plot} L{self.layer}'

    class Meta:
        db_table = 'plot_assignments'
        ordering = ['plot', 'layer']
        constraints = [
            models.UniqueConstraint(
                fields=['plot', 'layer'],
                condition=models.Q(status='ASSIGNED'),
                name='uniq_active_layer_per_plot',
            ),
        ]


class Gravestone(models.Model):
    MATERIAL_CHOICES = [
        ('GRANITE', 'Granite'),
        ('MARBLE', 'Marble'),
        ('BRONZE', 'Bronze'),
        ('CONCRETE', 'Concrete'),
        ('OTHER', 'Other'),
    ]
    CONDITION_CHOICES = [
        ('GOOD', 'Good'),
        ('FAIR', 'Fair'),
        ('POOR', 'Poor'),
        ('DAMAGED', 'Damaged'),
    ]

    plot = models.ForeignKey(CemeteryPlot, on_delete=models.CASCADE, related_name='gravestones')
    material = models.CharField(max_length=20, choices=MATERIAL_CHOICES, default='GRANITE')
    inscription = models.TextField(blank=True)
    date_installed = models.DateField(null=True, blank=True)
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='GOOD')
    height = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    width = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    thickness = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    manufacturer = models.CharField(max_length=200, blank=True)
    deceased_info = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'Gravestone {self.plot}'

    class Meta:
        db_table = 'gravestones'
