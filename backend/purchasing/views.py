import logging

from django.conf import settings
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee
from backend.core.utils import create_audit_log, paginate
from .models import DeliveryReceipt
from .serializers import DeliveryReceiptSerializer, DeliveryCreateSerializer, DeliveryStatusSerializer
from .services import create_delivery, change_delivery_status

logger = logging.getLogger('backend.purchasing')


def _delivery_queryset():
    return DeliveryReceipt.objects.select_related('supplier', 'purchase_order', 'verified_by').prefetch_related(
        'items', 'items__item'
    )


@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def delivery_list_create(request):
    """List delivery receipts or record a new delivery"""
    if request.method == 'GET':
        queryset = _delivery_queryset()

        status_filter = request.query_params.get('status')
        supplier_id = request.query_params.get('supplierId')
        search = request.query_params.get('search')

        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)
        if search:
            queryset = queryset.filter(
                Q(dr_number__icontains=search) |
                Q(purchase_order__po_number__icontains=search)
            )

        deliveries, pagination = paginate(request, queryset, default_limit=15)
        return Response({
            'deliveries': DeliveryReceiptSerializer(deliveries, many=True).data,
            'pagination': pagination,
        })

    serializer = DeliveryCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Delivery validation failed: {serializer.errors}")
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    if DeliveryReceipt.objects.filter(dr_number=data['dr_number']).exists():
        return Response({'error': f"DR number {data['dr_number']} already exists"}, status=status.HTTP_409_CONFLICT)
    dr_document = data.get('dr_document')
    if dr_document is not None:
        if dr_document.content_type != 'application/pdf':
            return Response({'error': 'Only PDF files are allowed'}, status=status.HTTP_400_BAD_REQUEST)
        if dr_document.size > settings.MAX_UPLOAD_SIZE:
            return Response({'error': 'File too large'}, status=status.HTTP_400_BAD_REQUEST)

    delivery = create_delivery(
        supplier=data['supplier'],
        po_number=data['po_number'],
        dr_number=data['dr_number'],
        delivery_date=data['delivery_date'],
        received_by=data['received_by'],
        lines=data['items'],
        dr_document=dr_document,
        remarks=data.get('remarks', ''),
    )
    create_audit_log(
        request=request,
        action='DELIVERY_CREATED',
        model_name='DeliveryReceipt',
        object_id=delivery.id,
        object_name=delivery.dr_number,
        changes={'supplier_id': delivery.supplier_id, 'items': len(data['items'])},
    )
    return Response(DeliveryReceiptSerializer(_delivery_queryset().get(pk=delivery.pk)).data,
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsEmployee])
def delivery_detail(request, pk):
    delivery = get_object_or_404(_delivery_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(DeliveryReceiptSerializer(delivery).data)

    if not request.user.is_admin:
        return Response({'error': 'Administrator access required'}, status=status.HTTP_403_FORBIDDEN)
    if delivery.status != DeliveryReceipt.STATUS_PENDING:
        return Response({'error': 'Only deliveries pending verification can be deleted'},
                        status=status.HTTP_400_BAD_REQUEST)
    dr_number = delivery.dr_number
    delivery.delete()
    create_audit_log(request=request, action='DELIVERY_DELETED', model_name='DeliveryReceipt',
                     object_id=pk, object_name=dr_number)
    logger.info(f"Delivery {dr_number} deleted by {request.user.email}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsEmployee])
def delivery_status(request, pk):
    """Verify, reject or store a delivery"""
    delivery = get_object_or_404(DeliveryReceipt, pk=pk)
    serializer = DeliveryStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    new_status = serializer.validated_data['status']
    previous = change_delivery_status(delivery, new_status, request.user,
                                      remarks=serializer.validated_data.get('remarks'))
    create_audit_log(
        request=request,
        action='DELIVERY_STATUS_CHANGED',
        model_name='DeliveryReceipt',
        object_id=delivery.id,
        object_name=delivery.dr_number,
        changes={'from': previous, 'to': new_status},
    )
    return Response(DeliveryReceiptSerializer(_delivery_queryset().get(pk=delivery.pk)).data)
