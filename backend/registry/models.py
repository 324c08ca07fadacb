from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


def compute_age(date_of_birth, date_of_death):
    """Whole years between birth and death using 365.25-day years"""
    if not date_of_birth or not date_of_death:
        return None
    return max(0, int((date_of_death - date_of_birth).days / 365.25))


class DeceasedRecord(models.Model):
    SEX_CHOICES = [
        ('MALE', 'Male'),
        ('FEMALE', 'Female'),
    ]

    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100)
    suffix = models.CharField(max_length=20, blank=True)
    sex = models.CharField(max_length=10, choices=SEX_CHOICES, default='MALE')
    date_of_birth = models.DateField()
    date_of_death = models.DateField()
    age = models.PositiveIntegerField(null=True, blank=True)
    civil_status = models.CharField(max_length=30, default='Single')
    citizenship = models.CharField(max_length=50, default='Filipino')
    occupation = models.CharField(max_length=100, blank=True)
    religion = models.CharField(max_length=100, blank=True)
    place_of_death = models.CharField(max_length=255, blank=True)
    cause_of_death = models.TextField(blank=True)
    residence_address = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        name = ' '.join(p for p in [self.first_name, self.middle_name, self.last_name] if p)
        return f'{name} {self.suffix}'.strip() if self.suffix else name

    def clean(self):
        if self.date_of_birth and self.date_of_death and self.date_of_death < self.date_of_birth:
            raise ValidationError('Date of death cannot be before date of birth')

    def save(self, *args, **kwargs):
        self.age = compute_age(self.date_of_birth, self.date_of_death)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'deceased_records'
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['last_name', 'first_name'], name='idx_deceased_name'),
        ]


class DeathRegistration(models.Model):
    TYPE_REGULAR = 'REGULAR'
    TYPE_DELAYED = 'DELAYED'
    TYPE_CHOICES = [
        (TYPE_REGULAR, 'Regular'),
        (TYPE_DELAYED, 'Delayed'),
    ]
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('SUBMITTED', 'Submitted'),
        ('PENDING_VERIFICATION', 'Pending Verification'),
        ('FOR_PAYMENT', 'For Payment'),
        ('PAID', 'Paid'),
        ('PROCESSING', 'Processing'),
        ('REGISTERED', 'Registered'),
        ('FOR_PICKUP', 'For Pickup'),
        ('CLAIMED', 'Claimed'),
        ('RETURNED', 'Returned'),
        ('REJECTED', 'Rejected'),
        ('EXPIRED', 'Expired'),
    ]
    PICKUP_CHOICES = [
        ('NOT_READY', 'Not Ready'),
        ('READY_FOR_PICKUP', 'Ready for Pickup'),
        ('CLAIMED', 'Claimed'),
    ]

    registration_number = models.CharField(max_length=30, unique=True)
    registration_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_REGULAR)
    deceased = models.ForeignKey(DeceasedRecord, on_delete=models.PROTECT, related_name='registrations')
    submitted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='death_registrations')
    informant_name = models.CharField(max_length=200)
    informant_relationship = models.CharField(max_length=100, blank=True)
    informant_address = models.TextField(blank=True)
    informant_contact = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='SUBMITTED')
    amount_due = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    or_number = models.CharField(max_length=50, blank=True)
    processing_due_date = models.DateField(null=True, blank=True)
    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='verified_registrations')
    verified_at = models.DateTimeField(null=True, blank=True)
    registered_at = models.DateTimeField(null=True, blank=True)
    pickup_status = models.CharField(max_length=20, choices=PICKUP_CHOICES, default='NOT_READY')
    remarks = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.registration_number

    class Meta:
        db_table = 'death_registrations'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='idx_death_reg_status'),
            models.Index(fields=['submitted_by', 'status'], name='idx_death_reg_owner_status'),
        ]


class RegistrationDocument(models.Model):
    registration = models.ForeignKey(DeathRegistration, on_delete=models.CASCADE, related_name='documents')
    doc_type = models.CharField(max_length=50)
    file = models.FileField(upload_to='registrations/%Y/%m/')
    original_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100)
    size = models.PositiveIntegerField()
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f'{self.doc_type}: {self.original_name}'

    class Meta:
        db_table = 'registration_documents'
        ordering = ['uploaded_at']
