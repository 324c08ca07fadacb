from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q


class PurchaseOrder(models.Model):
    """Purchase order issued to a supplier"""
    po_number = models.CharField(max_length=100, unique=True)
    supplier = models.ForeignKey('inventory.Supplier', on_delete=models.PROTECT, related_name='purchase_orders')
    po_date = models.DateField()
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.po_number

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-po_date', '-created_at']


class DeliveryReceipt(models.Model):
    """Delivery receipt (DR) recorded when a supplier drops off goods"""
    STATUS_PENDING = 'PENDING_VERIFICATION'
    STATUS_VERIFIED = 'VERIFIED'
    STATUS_STORED = 'STORED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Verification'),
        (STATUS_VERIFIED, 'Verified'),
        (STATUS_STORED, 'Stored'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    dr_number = models.CharField(max_length=100, unique=True)
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.PROTECT, null=True, blank=True,
                                       related_name='deliveries')
    supplier = models.ForeignKey('inventory.Supplier', on_delete=models.PROTECT, related_name='deliveries')
    delivery_date = models.DateField()
    received_by = models.CharField(max_length=200)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING)
    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='verified_deliveries')
    verified_at = models.DateTimeField(null=True, blank=True)
    dr_document = models.FileField(upload_to='deliveries/', null=True, blank=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.dr_number

    def get_total(self):
        return sum((line.quantity_delivered * line.unit_cost for line in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'delivery_receipts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_delivery_status'),
            models.Index(fields=['supplier', 'status'], name='idx_delivery_supplier_status'),
        ]


class DeliveryItem(models.Model):
    """Delivery receipt line"""
    delivery = models.ForeignKey(DeliveryReceipt, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey('inventory.Item', on_delete=models.PROTECT, related_name='delivery_items')
    quantity_ordered = models.PositiveIntegerField(default=0)
    quantity_delivered = models.PositiveIntegerField(default=0)
    quantity_accepted = models.PositiveIntegerField(default=0)
    quantity_rejected = models.PositiveIntegerField(default=0)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = 'delivery_items'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_accepted__lte=F('quantity_delivered') - F('quantity_rejected')),
                name='delivery_item_accepted_within_delivered',
            ),
        ]
