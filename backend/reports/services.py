"""Aggregates behind the dashboards; each payload is cached briefly"""
import logging

from django.db.models import Count, F

from backend.cemetery.models import Cemetery, CemeteryPlot
from backend.core.cache_utils import cached_query, DASHBOARD_CACHE_TTL
from backend.core.models import AuditLog
from backend.inventory.models import Supplier, Item, StockMovement
from backend.inventory.services import with_current_stock
from backend.permits.models import Permit
from backend.purchasing.models import DeliveryReceipt
from backend.registry.models import DeathRegistration
from backend.requisitions.models import RISRequest, Issuance

logger = logging.getLogger('backend.reports')

PENDING_REGISTRATION_STATUSES = ('SUBMITTED', 'PENDING_VERIFICATION')
PENDING_PERMIT_STATUSES = ('SUBMITTED', 'PENDING_VERIFICATION')
ISSUED_PERMIT_STATUSES = ('ISSUED', 'FOR_PICKUP', 'CLAIMED')


def _counts_by(queryset, field):
    return {row[field]: row['count'] for row in queryset.order_by().values(field).annotate(count=Count('id'))}


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix='dashboard_burial')
def burial_dashboard():
    registrations_by_status = _counts_by(DeathRegistration.objects.all(), 'status')
    permits_by_type = _counts_by(Permit.objects.all(), 'permit_type')
    permits_by_status = _counts_by(Permit.objects.all(), 'status')
    plots_by_status = _counts_by(CemeteryPlot.objects.all(), 'status')

    recent = AuditLog.objects.select_related('user').order_by('-created_at', '-id')[:10]
    logger.debug("Burial dashboard recomputed")
    return {
        'registrations': {
            'total': sum(registrations_by_status.values()),
            'pending': sum(registrations_by_status.get(s, 0) for s in PENDING_REGISTRATION_STATUSES),
            'registered': registrations_by_status.get('REGISTERED', 0),
            'byStatus': registrations_by_status,
        },
        'permits': {
            'total': sum(permits_by_type.values()),
            'pending': sum(permits_by_status.get(s, 0) for s in PENDING_PERMIT_STATUSES),
            'issued': sum(permits_by_status.get(s, 0) for s in ISSUED_PERMIT_STATUSES),
            'byType': permits_by_type,
        },
        'cemeteries': Cemetery.objects.count(),
        'plots': {
            'total': sum(plots_by_status.values()),
            'vacant': plots_by_status.get(CemeteryPlot.STATUS_VACANT, 0),
            'occupied': plots_by_status.get(CemeteryPlot.STATUS_OCCUPIED, 0),
            'reserved': plots_by_status.get(CemeteryPlot.STATUS_RESERVED, 0),
        },
        'recentActivities': [
            {
                'id': log.id,
                'action': log.action,
                'modelName': log.model_name,
                'objectId': log.object_id,
                'objectName': log.object_name,
                'user': log.user.email if log.user else None,
                'createdAt': log.created_at.isoformat(),
            }
            for log in recent
        ],
    }


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix='dashboard_inventory')
def inventory_dashboard():
    items = with_current_stock(Item.objects.filter(is_active=True))
    low_stock = list(
        items.filter(current_stock__lte=F('reorder_level')).order_by('current_stock', 'item_name')
        .values('id', 'item_code', 'item_name', 'current_stock', 'reorder_level')
    )
    out_of_stock = [row for row in low_stock if row['current_stock'] <= 0]
    running_low = [row for row in low_stock if row['current_stock'] > 0]

    stock_by_category = {}
    for row in items.values('category', 'current_stock'):
        stock_by_category[row['category']] = stock_by_category.get(row['category'], 0) + row['current_stock']

    pending_deliveries = DeliveryReceipt.objects.filter(status=DeliveryReceipt.STATUS_PENDING).count()
    pending_ris = RISRequest.objects.filter(status=RISRequest.STATUS_PENDING).count()

    alerts = []
    if out_of_stock:
        alerts.append({
            'type': 'OUT_OF_STOCK',
            'severity': 'critical',
            'message': f'{len(out_of_stock)} item(s) are out of stock',
            'count': len(out_of_stock),
        })
    if running_low:
        alerts.append({
            'type': 'LOW_STOCK',
            'severity': 'warning',
            'message': f'{len(running_low)} item(s) are at or below their reorder level',
            'count': len(running_low),
        })
    if pending_deliveries:
        alerts.append({
            'type': 'PENDING_VERIFICATION',
            'severity': 'info',
            'message': f'{pending_deliveries} delivery receipt(s) pending verification',
            'count': pending_deliveries,
        })
    if pending_ris:
        alerts.append({
            'type': 'PENDING_APPROVAL',
            'severity': 'info',
            'message': f'{pending_ris} RIS request(s) pending approval',
            'count': pending_ris,
        })

    movements = StockMovement.objects.select_related('item').order_by('-created_at', '-id')[:10]
    return {
        'counts': {
            'suppliers': Supplier.objects.count(),
            'items': Item.objects.count(),
            'deliveries': DeliveryReceipt.objects.count(),
            'risRequests': RISRequest.objects.count(),
            'issuances': Issuance.objects.count(),
        },
        'lowStockItems': [
            {
                'id': row['id'],
                'itemCode': row['item_code'],
                'itemName': row['item_name'],
                'currentStock': row['current_stock'],
                'reorderLevel': row['reorder_level'],
            }
            for row in low_stock
        ],
        'recentMovements': [
            {
                'id': movement.id,
                'itemCode': movement.item.item_code,
                'itemName': movement.item.item_name,
                'movementType': movement.movement_type,
                'quantity': movement.quantity,
                'balanceAfter': movement.balance_after,
                'createdAt': movement.created_at.isoformat(),
            }
            for movement in movements
        ],
        'stockByCategory': [
            {'category': category, 'totalStock': total}
            for category, total in sorted(stock_by_category.items())
        ],
        'alerts': alerts,
    }
