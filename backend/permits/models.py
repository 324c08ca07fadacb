from decimal import Decimal

from django.conf import settings
from django.db import models


class Permit(models.Model):
    """Burial, exhumation or cremation permit requested against a registered death"""
    TYPE_BURIAL = 'BURIAL'
    TYPE_EXHUMATION = 'EXHUMATION'
    TYPE_CREMATION = 'CREMATION'
    TYPE_CHOICES = [
        (TYPE_BURIAL, 'Burial'),
        (TYPE_EXHUMATION, 'Exhumation'),
        (TYPE_CREMATION, 'Cremation'),
    ]
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('SUBMITTED', 'Submitted'),
        ('PENDING_VERIFICATION', 'Pending Verification'),
        ('FOR_PAYMENT', 'For Payment'),
        ('PAID', 'Paid'),
        ('ISSUED', 'Issued'),
        ('FOR_PICKUP', 'For Pickup'),
        ('CLAIMED', 'Claimed'),
        ('REJECTED', 'Rejected'),
        ('CANCELLED', 'Cancelled'),
    ]
    PICKUP_CHOICES = [
        ('NOT_READY', 'Not Ready'),
        ('READY', 'Ready'),
        ('CLAIMED', 'Claimed'),
    ]

    permit_number = models.CharField(max_length=30, unique=True)
    permit_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_BURIAL)
    death_registration = models.ForeignKey('registry.DeathRegistration', on_delete=models.SET_NULL, null=True, blank=True, related_name='permits')
    deceased = models.ForeignKey('registry.DeceasedRecord', on_delete=models.SET_NULL, null=True, blank=True, related_name='permits')
    plot = models.ForeignKey('cemetery.CemeteryPlot', on_delete=models.SET_NULL, null=True, blank=True, related_name='permits')
    requested_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='permits')
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='SUBMITTED')
    amount_due = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('500.00'))
    or_number = models.CharField(max_length=50, blank=True)
    issued_at = models.DateTimeField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    pickup_status = models.CharField(max_length=20, choices=PICKUP_CHOICES, default='NOT_READY')
    remarks = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.permit_number

    class Meta:
        db_table = 'permits'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['permit_type', 'status'], name='idx_permit_type_status'),
            models.Index(fields=['requested_by'], name='idx_permit_requester'),
        ]
