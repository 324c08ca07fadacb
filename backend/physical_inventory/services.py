"""Counting session workflow"""
import logging

from django.db import transaction
from django.utils import timezone

from backend.core.exceptions import ServiceError
from backend.core.utils import lock_for_update, next_sequence_number
from backend.inventory.models import StockMovement
from backend.inventory.services import current_stock, record_movement
from .models import PhysicalCountSession, PhysicalCountEntry

logger = logging.getLogger('backend.physical_inventory')

ADJUSTABLE_STATUSES = (PhysicalCountSession.STATUS_DISCREPANCY, PhysicalCountSession.STATUS_BALANCED)


@transaction.atomic
def create_session(count_date, conducted_by, remarks='', user=None):
    session = PhysicalCountSession.objects.create(
        session_number=next_sequence_number(PhysicalCountSession, 'session_number', 'PC', width=5),
        count_date=count_date,
        conducted_by=conducted_by,
        remarks=remarks,
        created_by=user if user is not None and user.is_authenticated else None,
    )
    logger.info(f"Count session {session.session_number} opened by {conducted_by}")
    return session


def add_entry(session, item, actual_quantity, remarks=''):
    """Record a counted quantity against the item's current ledger balance"""
    if session.status != PhysicalCountSession.STATUS_IN_PROGRESS:
        raise ServiceError('Can only add entries to IN_PROGRESS sessions')
    if session.entries.filter(item=item).exists():
        raise ServiceError('Item already counted in this session', status_code=409)

    entry = PhysicalCountEntry(
        session=session,
        item=item,
        system_quantity=current_stock(item),
        actual_quantity=actual_quantity,
        unit_cost=item.unit_cost,
        remarks=remarks,
    )
    entry.save()
    return entry


@transaction.atomic
def complete_session(session):
    lock_for_update(session)
    if session.status != PhysicalCountSession.STATUS_IN_PROGRESS:
        raise ServiceError('Can only complete IN_PROGRESS sessions')
    entries = list(session.entries.all())
    if not entries:
        raise ServiceError('Cannot complete session with no count entries')

    discrepancies = sum(1 for entry in entries if entry.variance != 0)
    session.items_counted = len(entries)
    session.discrepancies = discrepancies
    session.status = PhysicalCountSession.STATUS_DISCREPANCY if discrepancies else PhysicalCountSession.STATUS_BALANCED
    session.completed_at = timezone.now()
    session.save()
    logger.info(f"Count session {session.session_number} completed: {discrepancies} discrepancy(ies)")
    return session


@transaction.atomic
def adjust_session(session, user=None):
    """Post each non-zero variance to the ledger as an ADJUSTMENT"""
    lock_for_update(session)
    if session.status not in ADJUSTABLE_STATUSES:
        raise ServiceError('Can only create adjustments for completed sessions')
    discrepant = list(session.entries.select_related('item').exclude(variance=0))
    if not discrepant:
        raise ServiceError('No discrepancies found to adjust')

    movements = [
        record_movement(
            entry.item,
            StockMovement.TYPE_ADJUSTMENT,
            entry.variance,
            user=user,
            reference_type='PHYSICAL_COUNT',
            reference_id=session.session_number,
            unit_cost=entry.unit_cost,
            remarks=entry.remarks or f'Physical count adjustment ({session.session_number})',
            allow_negative=True,
        )
        for entry in discrepant
    ]
    session.adjustment_made = True
    session.status = PhysicalCountSession.STATUS_COMPLETED
    session.save()
    logger.info(f"Count session {session.session_number} posted {len(movements)} adjustment(s)")
    return movements
