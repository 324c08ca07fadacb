from decimal import Decimal

from django.conf import settings
from django.db import models


class Supplier(models.Model):
    name = models.CharField(max_length=200)
    contact_person = models.CharField(max_length=200)
    contact_number = models.CharField(max_length=30)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    tin_number = models.CharField(max_length=30, blank=True)
    business_type = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']


class Item(models.Model):
    """Catalog entry for a supply item; stock lives in the movement ledger"""
    item_code = models.CharField(max_length=50, unique=True)
    item_name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100)
    unit_of_measure = models.CharField(max_length=30)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    reorder_level = models.PositiveIntegerField(default=10)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f'{self.item_code} - {self.item_name}'

    class Meta:
        db_table = 'items'
        ordering = ['item_name']
        indexes = [
            models.Index(fields=['category'], name='idx_item_category'),
        ]


class StockMovement(models.Model):
    """Append-only stock ledger; balance_after of the latest row is the item's stock"""
    TYPE_RECEIVED = 'RECEIVED'
    TYPE_OUT = 'OUT'
    TYPE_ADJUSTMENT = 'ADJUSTMENT'
    TYPE_RETURN = 'RETURN'
    MOVEMENT_TYPE_CHOICES = [
        (TYPE_RECEIVED, 'Received'),
        (TYPE_OUT, 'Issued Out'),
        (TYPE_ADJUSTMENT, 'Adjustment'),
        (TYPE_RETURN, 'Return'),
    ]

    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='movements')
    movement_type = models.CharField(max_length=20, choices=MOVEMENT_TYPE_CHOICES)
    quantity = models.IntegerField(help_text="Signed change in stock")
    balance_before = models.IntegerField()
    balance_after = models.IntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    reference_type = models.CharField(max_length=30, blank=True)
    reference_id = models.CharField(max_length=50, blank=True)
    remarks = models.TextField(blank=True)
    performed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f'{self.movement_type} {self.quantity} {self.item.item_code}'

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['item', '-created_at'], name='idx_movement_item_created'),
            models.Index(fields=['reference_type', 'reference_id'], name='idx_movement_reference'),
        ]
