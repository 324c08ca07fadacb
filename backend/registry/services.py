import logging

from django.db import transaction

from backend.core.utils import next_sequence_number
from .models import DeceasedRecord, DeathRegistration
from .workflow import registration_fee, processing_due_date

logger = logging.getLogger('backend.registry')


def create_deceased(validated_data):
    """Create a deceased record from DeceasedRecordSerializer.validated_data"""
    return DeceasedRecord.objects.create(**validated_data)


@transaction.atomic
def create_registration(data, user=None):
    """
    Create the deceased record, then a SUBMITTED registration carrying the
    fee and processing due date for its type.
    """
    deceased = create_deceased(data['deceased'])
    registration_type = data['registrationType']
    registration = DeathRegistration.objects.create(
        registration_number=next_sequence_number(DeathRegistration, 'registration_number', 'DR', width=6),
        registration_type=registration_type,
        deceased=deceased,
        submitted_by=user if user is not None and user.is_authenticated else None,
        informant_name=data['informantName'],
        informant_relationship=data.get('informantRelationship', ''),
        informant_address=data.get('informantAddress', ''),
        informant_contact=data.get('informantContact', ''),
        remarks=data.get('remarks', ''),
        status='SUBMITTED',
        amount_due=registration_fee(registration_type),
        processing_due_date=processing_due_date(registration_type),
    )
    logger.info(f"Death registration {registration.registration_number} created for {deceased.full_name}")
    return registration


def deceased_in_use(deceased, exclude_registration=None):
    registrations = deceased.registrations.all()
    if exclude_registration is not None:
        registrations = registrations.exclude(pk=exclude_registration.pk)
    return registrations.exists() or deceased.plot_assignments.exists() or deceased.permits.exists()


@transaction.atomic
def delete_registration(registration):
    """Remove a registration, its documents, and its deceased record when nothing else uses it"""
    deceased = registration.deceased
    for document in registration.documents.all():
        document.file.delete(save=False)
    registration.documents.all().delete()
    remove_deceased = not deceased_in_use(deceased, exclude_registration=registration)
    registration.delete()
    if remove_deceased:
        deceased.delete()
    return remove_deceased
