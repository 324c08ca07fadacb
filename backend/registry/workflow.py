"""
Death registration lifecycle: fees, due dates, the status transition table
and the admin override actions that bypass it.
"""
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from rest_framework import status as http_status

from backend.core.exceptions import ServiceError
from backend.core.utils import append_note
from .models import DeathRegistration

REGISTRATION_FEES = {
    DeathRegistration.TYPE_REGULAR: Decimal('50.00'),
    DeathRegistration.TYPE_DELAYED: Decimal('150.00'),
}
PROCESSING_DAYS = {
    DeathRegistration.TYPE_REGULAR: 3,
    DeathRegistration.TYPE_DELAYED: 10,
}

REGISTRATION_TRANSITIONS = {
    'DRAFT': ['SUBMITTED'],
    'SUBMITTED': ['PENDING_VERIFICATION', 'PROCESSING', 'REJECTED', 'RETURNED'],
    'PENDING_VERIFICATION': ['PROCESSING', 'FOR_PAYMENT', 'REJECTED', 'RETURNED'],
    'FOR_PAYMENT': ['PAID', 'EXPIRED'],
    'PROCESSING': ['PAID', 'FOR_PAYMENT', 'REJECTED'],
    'PAID': ['REGISTERED'],
    'REGISTERED': ['FOR_PICKUP'],
    'FOR_PICKUP': ['CLAIMED'],
    'RETURNED': ['SUBMITTED'],
}

TERMINAL_STATUSES = {'CLAIMED', 'REJECTED', 'EXPIRED'}

# Statuses in which a death is on record and permits may be requested against it
COMPLETED_STATUSES = ['REGISTERED', 'FOR_PICKUP', 'CLAIMED']

OVERRIDE_ACTIONS = ['approve', 'reject', 'edit', 'waive_fee', 'reset_status', 'adjust_fee']

EDITABLE_FIELDS = {
    'informantName': 'informant_name',
    'informantRelationship': 'informant_relationship',
    'informantAddress': 'informant_address',
    'informantContact': 'informant_contact',
    'remarks': 'remarks',
    'orNumber': 'or_number',
}


def registration_fee(registration_type):
    return REGISTRATION_FEES.get(registration_type, REGISTRATION_FEES[DeathRegistration.TYPE_DELAYED])


def processing_due_date(registration_type, start=None):
    start = start or timezone.localdate()
    days = PROCESSING_DAYS.get(registration_type, PROCESSING_DAYS[DeathRegistration.TYPE_DELAYED])
    return start + timedelta(days=days)


def allowed_transitions(current):
    return REGISTRATION_TRANSITIONS.get(current, [])


def can_transition(current, new_status):
    return new_status in allowed_transitions(current)


def _enter_status(registration, new_status, user=None):
    """Side effects of arriving in a status, shared by transitions and overrides"""
    now = timezone.now()
    previous = registration.status
    registration.status = new_status
    if new_status == 'REGISTERED':
        registration.registered_at = now
        registration.pickup_status = 'READY_FOR_PICKUP'
    elif new_status == 'CLAIMED':
        registration.pickup_status = 'CLAIMED'
    elif new_status in ('PROCESSING', 'PENDING_VERIFICATION') and previous == 'SUBMITTED':
        registration.verified_at = now
        if user is not None and user.is_authenticated:
            registration.verified_by = user


def apply_status(registration, new_status, user=None, remarks=None, or_number=None):
    """
    Move a registration along the transition table.
    Returns the previous status; raises ServiceError on a disallowed move.
    """
    new_status = (new_status or '').upper()
    valid = {code for code, _ in DeathRegistration.STATUS_CHOICES}
    if new_status not in valid:
        raise ServiceError(f'Unknown status: {new_status}')

    previous = registration.status
    if not can_transition(previous, new_status):
        raise ServiceError(
            'Invalid status transition',
            details={'from': previous, 'to': new_status, 'allowed': allowed_transitions(previous)},
        )

    _enter_status(registration, new_status, user)
    if remarks:
        registration.remarks = remarks
    if or_number:
        registration.or_number = or_number
    registration.save()
    return previous


def _parse_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ServiceError('newAmount must be a number')
    if amount < 0:
        raise ServiceError('newAmount cannot be negative')
    return amount.quantize(Decimal('0.01'))


def apply_override(registration, action, reason, user=None, changes=None, new_amount=None):
    """
    Admin override: applies the action regardless of the transition table
    and records it in the registration notes. Returns the note message.
    """
    if action not in OVERRIDE_ACTIONS:
        raise ServiceError(f'Invalid action. Must be one of: {", ".join(OVERRIDE_ACTIONS)}')
    if not reason or not str(reason).strip():
        raise ServiceError('Reason is required for admin override')

    if action == 'approve':
        _enter_status(registration, 'REGISTERED', user)
        message = 'Application approved (status set to REGISTERED)'
    elif action == 'reject':
        registration.status = 'REJECTED'
        message = 'Application rejected'
    elif action == 'edit':
        if not changes or not isinstance(changes, dict):
            raise ServiceError('changes are required for the edit action')
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ServiceError(f'Fields cannot be edited: {", ".join(unknown)}')
        for key, value in changes.items():
            setattr(registration, EDITABLE_FIELDS[key], value or '')
        message = f'Fields edited: {", ".join(sorted(changes))}'
    elif action == 'waive_fee':
        old = registration.amount_due
        registration.amount_due = Decimal('0.00')
        message = f'Fee waived (was {old})'
    elif action == 'adjust_fee':
        if new_amount is None:
            raise ServiceError('newAmount is required for adjust_fee')
        old = registration.amount_due
        registration.amount_due = _parse_amount(new_amount)
        message = f'Fee adjusted from {old} to {registration.amount_due}'
    else:  # reset_status
        registration.status = 'SUBMITTED'
        registration.registered_at = None
        registration.pickup_status = 'NOT_READY'
        message = 'Status reset to SUBMITTED'

    message = f'{message}. Reason: {reason}'
    registration.notes = append_note(registration.notes, message)
    registration.save()
    return message
