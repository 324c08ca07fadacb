from decimal import Decimal

from django.conf import settings
from django.db import models


class PhysicalCountSession(models.Model):
    """A stock-take: counted quantities are compared against the ledger"""
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_BALANCED = 'BALANCED'
    STATUS_DISCREPANCY = 'DISCREPANCY_FOUND'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_BALANCED, 'Balanced'),
        (STATUS_DISCREPANCY, 'Discrepancy Found'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    session_number = models.CharField(max_length=30, unique=True)
    count_date = models.DateField()
    conducted_by = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_PROGRESS)
    remarks = models.TextField(blank=True)
    items_counted = models.PositiveIntegerField(default=0)
    discrepancies = models.PositiveIntegerField(default=0)
    adjustment_made = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='count_sessions')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.session_number

    class Meta:
        db_table = 'physical_count_sessions'
        ordering = ['-count_date', '-created_at']


class PhysicalCountEntry(models.Model):
    session = models.ForeignKey(PhysicalCountSession, on_delete=models.CASCADE, related_name='entries')
    item = models.ForeignKey('inventory.Item', on_delete=models.PROTECT, related_name='count_entries')
    system_quantity = models.IntegerField()
    actual_quantity = models.PositiveIntegerField()
    variance = models.IntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discrepancy_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    remarks = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.variance = self.actual_quantity - self.system_quantity
        self.discrepancy_value = self.variance * self.unit_cost
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'physical_count_entries'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['session', 'item'], name='unique_count_entry_per_item'),
        ]
