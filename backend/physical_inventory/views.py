import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee
from backend.core.utils import create_audit_log, paginate
from backend.inventory.models import Item
from .models import PhysicalCountSession
from .serializers import (
    PhysicalCountSessionSerializer, PhysicalCountSessionDetailSerializer, PhysicalCountEntrySerializer
)
from . import services

logger = logging.getLogger('backend.physical_inventory')


def _detail(session):
    session = PhysicalCountSession.objects.prefetch_related('entries', 'entries__item').get(pk=session.pk)
    return PhysicalCountSessionDetailSerializer(session).data


@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def session_list_create(request):
    """List counting sessions or open a new one"""
    if request.method == 'GET':
        queryset = PhysicalCountSession.objects.all()
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        sessions, pagination = paginate(request, queryset)
        return Response({'sessions': PhysicalCountSessionSerializer(sessions, many=True).data,
                         'pagination': pagination})

    serializer = PhysicalCountSessionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    session = services.create_session(
        count_date=data.get('count_date') or timezone.localdate(),
        conducted_by=data['conducted_by'],
        remarks=data.get('remarks', ''),
        user=request.user,
    )
    return Response(PhysicalCountSessionSerializer(session).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsEmployee])
def session_detail(request, pk):
    session = get_object_or_404(PhysicalCountSession, pk=pk)

    if request.method == 'GET':
        return Response(_detail(session))

    if session.status != PhysicalCountSession.STATUS_IN_PROGRESS:
        return Response({'error': 'Can only delete IN_PROGRESS sessions'}, status=status.HTTP_400_BAD_REQUEST)
    session.delete()
    logger.info(f"Count session {pk} deleted by {request.user.email}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def session_entries(request, pk):
    session = get_object_or_404(PhysicalCountSession, pk=pk)

    if request.method == 'GET':
        entries = session.entries.select_related('item')
        return Response(PhysicalCountEntrySerializer(entries, many=True).data)

    item_id = request.data.get('itemId')
    actual_quantity = request.data.get('actualQuantity')
    if item_id in (None, '') or actual_quantity in (None, ''):
        return Response({'error': 'itemId and actualQuantity are required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        actual_quantity = int(actual_quantity)
    except (TypeError, ValueError):
        return Response({'error': 'actualQuantity must be a whole number'}, status=status.HTTP_400_BAD_REQUEST)
    if actual_quantity < 0:
        return Response({'error': 'actualQuantity cannot be negative'}, status=status.HTTP_400_BAD_REQUEST)
    item = Item.objects.filter(pk=item_id).first()
    if item is None:
        return Response({'error': 'Item not found'}, status=status.HTTP_404_NOT_FOUND)

    entry = services.add_entry(session, item, actual_quantity, remarks=request.data.get('remarks', ''))
    return Response(PhysicalCountEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsEmployee])
def session_complete(request, pk):
    session = get_object_or_404(PhysicalCountSession, pk=pk)
    services.complete_session(session)
    return Response(_detail(session))


@api_view(['POST'])
@permission_classes([IsEmployee])
def session_adjust(request, pk):
    """Write ADJUSTMENT movements for every discrepancy in the session"""
    session = get_object_or_404(PhysicalCountSession, pk=pk)
    movements = services.adjust_session(session, user=request.user)
    create_audit_log(
        request=request,
        action='INVENTORY_ADJUSTED',
        model_name='PhysicalCountSession',
        object_id=session.id,
        object_name=session.session_number,
        changes={'adjustments': [{'item': m.item.item_code, 'quantity': m.quantity} for m in movements]},
    )
    return Response({'message': 'Stock adjustments created successfully', 'adjustments': len(movements),
                     'session': _detail(session)})
