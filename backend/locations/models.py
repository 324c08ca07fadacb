from django.db import models


class StorageZone(models.Model):
    """Warehouse zones"""
    zone_name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.zone_name

    class Meta:
        db_table = 'storage_zones'
        ordering = ['zone_name']


class StorageRack(models.Model):
    """Racks inside a zone"""
    rack_code = models.CharField(max_length=50, unique=True)
    zone = models.ForeignKey(StorageZone, on_delete=models.PROTECT, related_name='racks')
    level = models.PositiveSmallIntegerField(null=True, blank=True)
    position = models.CharField(max_length=50, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.rack_code

    class Meta:
        db_table = 'storage_racks'
        ordering = ['rack_code']


class StockLocation(models.Model):
    """Where a quantity of an item physically sits"""
    STATUS_CHOICES = [
        ('IN_STOCK', 'In Stock'),
        ('RESERVED', 'Reserved'),
        ('DEPLETED', 'Depleted'),
    ]

    tag_code = models.CharField(max_length=50, unique=True, null=True, blank=True)
    rack = models.ForeignKey(StorageRack, on_delete=models.PROTECT, related_name='locations')
    item = models.ForeignKey('inventory.Item', on_delete=models.PROTECT, related_name='locations')
    quantity = models.PositiveIntegerField(default=0)
    batch_number = models.CharField(max_length=100, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='IN_STOCK')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.tag_code or f'{self.rack.rack_code}:{self.item.item_code}'

    class Meta:
        db_table = 'stock_locations'
        ordering = ['rack', 'item']
