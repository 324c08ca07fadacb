"""Permit fees, numbering, transition table and admin overrides"""
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from backend.core.exceptions import ServiceError
from backend.core.utils import append_note, next_sequence_number
from .models import Permit

PERMIT_FEES = {
    Permit.TYPE_BURIAL: Decimal('500.00'),
    Permit.TYPE_EXHUMATION: Decimal('1000.00'),
    Permit.TYPE_CREMATION: Decimal('750.00'),
}
DEFAULT_PERMIT_FEE = Decimal('500.00')

PERMIT_PREFIXES = {
    Permit.TYPE_BURIAL: 'BP',
    Permit.TYPE_EXHUMATION: 'EP',
    Permit.TYPE_CREMATION: 'CP',
}

PERMIT_VALIDITY_DAYS = 30

PERMIT_TRANSITIONS = {
    'DRAFT': ['SUBMITTED', 'CANCELLED'],
    'SUBMITTED': ['PENDING_VERIFICATION', 'FOR_PAYMENT', 'REJECTED', 'CANCELLED'],
    'PENDING_VERIFICATION': ['FOR_PAYMENT', 'REJECTED', 'CANCELLED'],
    'FOR_PAYMENT': ['PAID', 'CANCELLED'],
    'PAID': ['ISSUED'],
    'ISSUED': ['FOR_PICKUP', 'CLAIMED'],
    'FOR_PICKUP': ['CLAIMED'],
}

OVERRIDE_ACTIONS = ['approve', 'reject', 'waive_fee', 'adjust_fee', 'reset_status']


def permit_fee(permit_type):
    return PERMIT_FEES.get(permit_type, DEFAULT_PERMIT_FEE)


def next_permit_number(permit_type):
    return next_sequence_number(Permit, 'permit_number', PERMIT_PREFIXES.get(permit_type, 'BP'), width=6)


def can_transition(current, new_status):
    return new_status in PERMIT_TRANSITIONS.get(current, [])


def _issue(permit):
    permit.status = 'ISSUED'
    permit.issued_at = timezone.now()
    permit.pickup_status = 'READY'
    permit.expiry_date = timezone.localdate() + timedelta(days=PERMIT_VALIDITY_DAYS)


def apply_status(permit, new_status, remarks=None, or_number=None):
    new_status = (new_status or '').upper()
    if new_status not in {code for code, _ in Permit.STATUS_CHOICES}:
        raise ServiceError(f'Unknown status: {new_status}')

    previous = permit.status
    if not can_transition(previous, new_status):
        raise ServiceError(
            'Invalid status transition',
            details={'from': previous, 'to': new_status, 'allowed': PERMIT_TRANSITIONS.get(previous, [])},
        )

    if new_status == 'ISSUED':
        _issue(permit)
    else:
        permit.status = new_status
        if new_status == 'CLAIMED':
            permit.pickup_status = 'CLAIMED'
    if remarks:
        permit.remarks = f'{permit.remarks}\n{remarks}' if permit.remarks else remarks
    if or_number:
        permit.or_number = or_number
    permit.save()
    return previous


def apply_override(permit, action, reason, new_amount=None):
    if action not in OVERRIDE_ACTIONS:
        raise ServiceError(f'Invalid action. Must be one of: {", ".join(OVERRIDE_ACTIONS)}')
    if not reason or not str(reason).strip():
        raise ServiceError('Reason is required for admin override')

    if action == 'approve':
        _issue(permit)
        message = 'Permit approved and issued'
    elif action == 'reject':
        permit.status = 'REJECTED'
        message = 'Permit rejected'
    elif action == 'waive_fee':
        message = f'Fee waived (was {permit.amount_due})'
        permit.amount_due = Decimal('0.00')
    elif action == 'adjust_fee':
        try:
            amount = Decimal(str(new_amount))
        except (InvalidOperation, TypeError, ValueError):
            raise ServiceError('newAmount is required for adjust_fee and must be a number')
        if amount < 0:
            raise ServiceError('newAmount cannot be negative')
        message = f'Fee adjusted from {permit.amount_due} to {amount}'
        permit.amount_due = amount.quantize(Decimal('0.01'))
    else:  # reset_status
        permit.status = 'SUBMITTED'
        permit.issued_at = None
        permit.expiry_date = None
        permit.pickup_status = 'NOT_READY'
        message = 'Status reset to SUBMITTED'

    message = f'{message}. Reason: {reason}'
    permit.notes = append_note(permit.notes, message)
    permit.save()
    return message
