"""Delivery receipt workflow"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from backend.core.exceptions import ServiceError
from backend.core.utils import lock_for_update
from backend.inventory.models import Item, StockMovement
from backend.inventory.services import record_movement
from .models import PurchaseOrder, DeliveryReceipt, DeliveryItem

logger = logging.getLogger('backend.purchasing')

DELIVERY_TRANSITIONS = {
    DeliveryReceipt.STATUS_PENDING: {DeliveryReceipt.STATUS_VERIFIED, DeliveryReceipt.STATUS_REJECTED},
    DeliveryReceipt.STATUS_VERIFIED: {DeliveryReceipt.STATUS_STORED},
}


@transaction.atomic
def create_delivery(supplier, po_number, dr_number, delivery_date, received_by, lines, dr_document=None,
                    remarks=''):
    """
    Record a delivery receipt with its lines.

    The purchase order is looked up by number and created when missing; line
    items are matched to the catalog by code and created when missing.
    """
    line_total = sum(
        (Decimal(line.get('unit_cost') or 0) * line['quantity_delivered'] for line in lines), Decimal('0.00')
    )
    purchase_order, po_created = PurchaseOrder.objects.get_or_create(
        po_number=po_number,
        defaults={
            'supplier': supplier,
            'po_date': delivery_date,
            'total_amount': line_total,
            'remarks': 'Auto-created from delivery receipt',
        },
    )
    if po_created:
        logger.info(f"Purchase order {po_number} auto-created for DR {dr_number}")

    delivery = DeliveryReceipt.objects.create(
        dr_number=dr_number,
        purchase_order=purchase_order,
        supplier=supplier,
        delivery_date=delivery_date,
        received_by=received_by,
        dr_document=dr_document,
        remarks=remarks,
    )

    for line in lines:
        unit_cost = line.get('unit_cost')
        item, _ = Item.objects.get_or_create(
            item_code=line['item_code'],
            defaults={
                'item_name': line['item_name'],
                'description': line.get('description', ''),
                'category': line.get('category') or 'Uncategorized',
                'unit_of_measure': line['unit_of_measure'],
                'unit_cost': unit_cost or Decimal('0.00'),
            },
        )
        delivered = line['quantity_delivered']
        rejected = line.get('quantity_rejected') or 0
        accepted = line.get('quantity_accepted')
        if accepted is None:
            accepted = delivered - rejected
        if accepted < 0 or accepted + rejected > delivered:
            raise ServiceError(
                f'Accepted and rejected quantities for {item.item_code} exceed the delivered quantity'
            )
        DeliveryItem.objects.create(
            delivery=delivery,
            item=item,
            quantity_ordered=line['quantity_ordered'],
            quantity_delivered=delivered,
            quantity_accepted=accepted,
            quantity_rejected=rejected,
            unit_cost=item.unit_cost if unit_cost is None else unit_cost,
            remarks=line.get('remarks', ''),
        )

    logger.info(f"Delivery {dr_number} recorded with {len(lines)} line(s)")
    return delivery


@transaction.atomic
def change_delivery_status(delivery, new_status, user, remarks=None):
    """Move a delivery along its workflow; STORED posts accepted quantities to the ledger"""
    lock_for_update(delivery)
    allowed = DELIVERY_TRANSITIONS.get(delivery.status, set())
    if new_status not in allowed:
        raise ServiceError(f'Invalid status transition from {delivery.status} to {new_status}')

    previous = delivery.status
    delivery.status = new_status
    if new_status in (DeliveryReceipt.STATUS_VERIFIED, DeliveryReceipt.STATUS_STORED):
        if delivery.verified_at is None:
            delivery.verified_at = timezone.now()
            delivery.verified_by = user
    if remarks:
        delivery.remarks = remarks
    delivery.save()

    if new_status == DeliveryReceipt.STATUS_STORED:
        for line in delivery.items.select_related('item'):
            if line.quantity_accepted > 0:
                record_movement(
                    line.item,
                    StockMovement.TYPE_RECEIVED,
                    line.quantity_accepted,
                    user=user,
                    reference_type='DELIVERY',
                    reference_id=delivery.id,
                    unit_cost=line.unit_cost,
                    remarks=f'Stored from DR {delivery.dr_number}',
                )

    logger.info(f"Delivery {delivery.dr_number} moved {previous} -> {new_status}")
    return previous
