"""Stock ledger operations"""
import logging

from django.db import transaction
from django.db.models import OuterRef, Subquery, Value, IntegerField
from django.db.models.functions import Coalesce

from backend.core.exceptions import ServiceError
from .models import Item, StockMovement

logger = logging.getLogger('backend.inventory')

SIGNED_TYPES = {StockMovement.TYPE_ADJUSTMENT}
OUTBOUND_TYPES = {StockMovement.TYPE_OUT}


def current_stock(item):
    """Latest ledger balance for the item, 0 when it has never moved"""
    item_id = item.pk if isinstance(item, Item) else item
    balance = (
        StockMovement.objects.filter(item_id=item_id)
        .order_by('-id')
        .values_list('balance_after', flat=True)
        .first()
    )
    return balance or 0


def with_current_stock(queryset):
    """Annotate an Item queryset with current_stock from the ledger"""
    latest = StockMovement.objects.filter(item=OuterRef('pk')).order_by('-id')
    return queryset.annotate(
        current_stock=Coalesce(Subquery(latest.values('balance_after')[:1]), Value(0), output_field=IntegerField())
    )


@transaction.atomic
def record_movement(item, movement_type, quantity, user=None, reference_type='', reference_id='',
                    remarks='', unit_cost=None, allow_negative=False):
    """
    Append a ledger row and return it.

    quantity is a magnitude for RECEIVED/RETURN/OUT and a signed delta for
    ADJUSTMENT. The item row is locked so concurrent movements serialize.
    """
    Item.objects.select_for_update().filter(pk=item.pk).first()
    quantity = int(quantity)
    if movement_type in SIGNED_TYPES:
        delta = quantity
    elif movement_type in OUTBOUND_TYPES:
        delta = -abs(quantity)
    else:
        delta = abs(quantity)

    before = current_stock(item)
    after = before + delta
    if after < 0 and not allow_negative:
        raise ServiceError(
            f'Insufficient stock for {item.item_code}: available {before}, requested {abs(delta)}',
            status_code=409,
        )

    movement = StockMovement.objects.create(
        item=item,
        movement_type=movement_type,
        quantity=delta,
        balance_before=before,
        balance_after=after,
        unit_cost=item.unit_cost if unit_cost is None else unit_cost,
        reference_type=reference_type,
        reference_id=str(reference_id) if reference_id != '' else '',
        remarks=remarks,
        performed_by=user if user is not None and user.is_authenticated else None,
    )
    logger.info(f"{movement_type} {delta:+d} {item.item_code}: {before} -> {after}")
    return movement
