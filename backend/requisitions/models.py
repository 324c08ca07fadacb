from decimal import Decimal

from django.conf import settings
from django.db import models


class RISRequest(models.Model):
    """Requisition and Issue Slip raised by a department"""
    STATUS_PENDING = 'PENDING_APPROVAL'
    STATUS_APPROVED = 'APPROVED'
    STATUS_NO_STOCK = 'NO_STOCK'
    STATUS_REJECTED = 'REJECTED'
    STATUS_ISSUED = 'ISSUED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Approval'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_NO_STOCK, 'No Stock'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_ISSUED, 'Issued'),
    ]

    ris_number = models.CharField(max_length=30, unique=True)
    department = models.CharField(max_length=200)
    requested_by = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    purpose = models.TextField()
    date_needed = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    approved_by = models.CharField(max_length=200, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.CharField(max_length=200, blank=True)
    rejection_reason = models.TextField(blank=True)
    issued_by = models.CharField(max_length=200, blank=True)
    issued_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='ris_requests')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.ris_number

    class Meta:
        db_table = 'ris_requests'
        ordering = ['-created_at']
        verbose_name = 'RIS request'


class RISItem(models.Model):
    ris = models.ForeignKey(RISRequest, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey('inventory.Item', on_delete=models.PROTECT, related_name='ris_items')
    quantity_requested = models.PositiveIntegerField()
    quantity_approved = models.PositiveIntegerField(null=True, blank=True)
    justification = models.TextField(blank=True)
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = 'ris_items'
        ordering = ['id']


class Issuance(models.Model):
    """Goods released against an approved RIS"""
    issuance_number = models.CharField(max_length=30, unique=True)
    ris = models.OneToOneField(RISRequest, on_delete=models.PROTECT, related_name='issuance')
    issued_to = models.CharField(max_length=200)
    department = models.CharField(max_length=200)
    purpose = models.TextField(blank=True)
    issued_by = models.CharField(max_length=200)
    issued_at = models.DateTimeField()
    acknowledged_by = models.CharField(max_length=200, blank=True)
    acknowledged_at = models.DateTimeField(null=True, blank=True)
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.issuance_number

    @property
    def is_acknowledged(self):
        return self.acknowledged_at is not None

    class Meta:
        db_table = 'issuances'
        ordering = ['-issued_at']


class IssuanceItem(models.Model):
    issuance = models.ForeignKey(Issuance, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey('inventory.Item', on_delete=models.PROTECT, related_name='issuance_items')
    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        db_table = 'issuance_items'
        ordering = ['id']
