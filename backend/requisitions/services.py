"""RIS approval and issuance"""
import logging

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from backend.core.exceptions import ServiceError
from backend.core.utils import lock_for_update, next_sequence_number
from backend.inventory.models import StockMovement
from backend.inventory.services import current_stock, record_movement
from .models import RISRequest, RISItem, Issuance, IssuanceItem

logger = logging.getLogger('backend.requisitions')

ISSUABLE_STATUSES = (RISRequest.STATUS_APPROVED, RISRequest.STATUS_NO_STOCK)


@transaction.atomic
def create_ris(department, requested_by, purpose, lines, email='', date_needed=None, user=None):
    ris = RISRequest.objects.create(
        ris_number=next_sequence_number(RISRequest, 'ris_number', 'RIS', width=5),
        department=department,
        requested_by=requested_by,
        email=email,
        purpose=purpose,
        date_needed=date_needed,
        created_by=user if user is not None and user.is_authenticated else None,
    )
    RISItem.objects.bulk_create([
        RISItem(
            ris=ris,
            item=line['item'],
            quantity_requested=line['quantity_requested'],
            justification=line.get('justification', ''),
            remarks=line.get('remarks', ''),
        )
        for line in lines
    ])
    logger.info(f"RIS {ris.ris_number} created for {department} with {len(lines)} line(s)")
    return ris


@transaction.atomic
def approve_ris(ris, approved_by):
    """
    Approve each line up to the available stock.

    Returns True when every line was approved in full; otherwise the RIS is
    marked NO_STOCK and short lines carry an "Insufficient stock" remark.
    """
    lock_for_update(ris)
    if ris.status != RISRequest.STATUS_PENDING:
        raise ServiceError('Only pending requests can be approved')

    fully_stocked = True
    for line in ris.items.select_related('item'):
        available = max(0, current_stock(line.item))
        line.quantity_approved = min(line.quantity_requested, available)
        if available < line.quantity_requested:
            fully_stocked = False
            line.remarks = f'Insufficient stock. Only {available} available.'
        line.save(update_fields=['quantity_approved', 'remarks'])

    ris.status = RISRequest.STATUS_APPROVED if fully_stocked else RISRequest.STATUS_NO_STOCK
    ris.approved_by = approved_by
    ris.approved_at = timezone.now()
    ris.save()
    logger.info(f"RIS {ris.ris_number} approved by {approved_by} ({ris.status})")
    return fully_stocked


@transaction.atomic
def reject_ris(ris, rejected_by, reason):
    lock_for_update(ris)
    if ris.status != RISRequest.STATUS_PENDING:
        raise ServiceError('Only pending requests can be rejected')
    ris.status = RISRequest.STATUS_REJECTED
    ris.rejected_by = rejected_by
    ris.rejection_reason = reason
    ris.save()
    logger.info(f"RIS {ris.ris_number} rejected by {rejected_by}")
    return ris


@transaction.atomic
def issue_ris(ris, issued_by, user=None, remarks=''):
    """Release approved quantities: one OUT movement and one issuance line per item"""
    lock_for_update(ris)
    if ris.status not in ISSUABLE_STATUSES:
        raise ServiceError('Only approved requests can be issued')

    lines = [line for line in ris.items.select_related('item') if (line.quantity_approved or 0) > 0]
    if not lines:
        raise ServiceError('No approved quantities to issue')

    now = timezone.now()
    issuance = Issuance.objects.create(
        issuance_number=next_sequence_number(Issuance, 'issuance_number', 'ISS', width=6),
        ris=ris,
        issued_to=ris.requested_by,
        department=ris.department,
        purpose=ris.purpose,
        issued_by=issued_by,
        issued_at=now,
        remarks=remarks,
    )
    for line in lines:
        # record_movement raises 409 if stock dropped since approval
        record_movement(
            line.item,
            StockMovement.TYPE_OUT,
            line.quantity_approved,
            user=user,
            reference_type='RIS',
            reference_id=ris.ris_number,
            remarks=f'Issued to {ris.department} - {ris.purpose}',
        )
        IssuanceItem.objects.create(
            issuance=issuance,
            item=line.item,
            quantity=line.quantity_approved,
            unit_cost=line.item.unit_cost,
            total_cost=line.quantity_approved * line.item.unit_cost,
        )

    ris.status = RISRequest.STATUS_ISSUED
    ris.issued_by = issued_by
    ris.issued_at = now
    ris.save()
    logger.info(f"RIS {ris.ris_number} issued as {issuance.issuance_number}")
    return issuance


@transaction.atomic
def acknowledge_issuance(issuance, acknowledged_by, remarks=None):
    lock_for_update(issuance)
    if issuance.is_acknowledged:
        raise ServiceError('Issuance already acknowledged')
    issuance.acknowledged_by = acknowledged_by
    issuance.acknowledged_at = timezone.now()
    if remarks:
        issuance.remarks = remarks
    issuance.save()
    return issuance


def issuance_summary():
    total = Issuance.objects.count()
    acknowledged = Issuance.objects.filter(acknowledged_at__isnull=False).count()
    total_items = IssuanceItem.objects.aggregate(total=Sum('quantity'))['total'] or 0
    top_items = (
        IssuanceItem.objects.values('item_id', 'item__item_code', 'item__item_name')
        .annotate(total_quantity=Sum('quantity'), times_issued=Count('id'))
        .order_by('-total_quantity')[:5]
    )
    return {
        'total': total,
        'acknowledged': acknowledged,
        'pending': total - acknowledged,
        'totalItemsIssued': total_items,
        'topItems': [
            {
                'itemId': row['item_id'],
                'itemCode': row['item__item_code'],
                'itemName': row['item__item_name'],
                'totalQuantity': row['total_quantity'],
                'timesIssued': row['times_issued'],
            }
            for row in top_items
        ],
        'acknowledgementRate': round(acknowledged / total * 100, 1) if total else 0,
    }


def issuances_by_department():
    issuance_counts = {
        row['department']: row['total']
        for row in Issuance.objects.order_by().values('department').annotate(total=Count('id'))
    }
    item_totals = {
        row['issuance__department']: row['total']
        for row in IssuanceItem.objects.order_by().values('issuance__department').annotate(total=Sum('quantity'))
    }
    rows = [
        {'department': department, 'totalIssuances': count, 'totalItems': item_totals.get(department) or 0}
        for department, count in issuance_counts.items()
    ]
    return sorted(rows, key=lambda row: row['totalIssuances'], reverse=True)
