import logging

from django.db.models import Q, F
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee
from backend.core.utils import create_audit_log, paginate, parse_bool
from .models import Supplier, Item, StockMovement
from .serializers import SupplierSerializer, ItemSerializer, StockMovementSerializer
from .services import with_current_stock

logger = logging.getLogger('backend.inventory')


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def supplier_list_create(request):
    if request.method == 'GET':
        queryset = Supplier.objects.all()
        search = request.query_params.get('search')
        is_active = parse_bool(request.query_params.get('isActive'))
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(contact_person__icontains=search) |
                Q(email__icontains=search)
            )
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return Response(SupplierSerializer(queryset, many=True).data)

    serializer = SupplierSerializer(data=request.data)
    if serializer.is_valid():
        supplier = serializer.save()
        logger.info(f"Supplier '{supplier.name}' created by {request.user.email}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    logger.warning(f"Supplier validation failed: {serializer.errors}")
    return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployee])
def supplier_detail(request, pk):
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        return Response(SupplierSerializer(supplier).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if supplier.deliveries.exists() or supplier.purchase_orders.exists():
            return Response({'error': 'Cannot delete supplier with existing deliveries or purchase orders'},
                            status=status.HTTP_400_BAD_REQUEST)
        supplier.delete()
        logger.info(f"Supplier {pk} deleted by {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# Item views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def item_list_create(request):
    if request.method == 'GET':
        queryset = with_current_stock(Item.objects.all())

        search = request.query_params.get('search')
        category = request.query_params.get('category')
        is_active = parse_bool(request.query_params.get('isActive'))
        low_stock = parse_bool(request.query_params.get('lowStock'))

        if search:
            queryset = queryset.filter(
                Q(item_code__icontains=search) |
                Q(item_name__icontains=search) |
                Q(description__icontains=search)
            )
        if category:
            queryset = queryset.filter(category=category)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        if low_stock:
            queryset = queryset.filter(current_stock__lte=F('reorder_level'))

        items, pagination = paginate(request, queryset, default_limit=50)
        return Response({'items': ItemSerializer(items, many=True).data, 'pagination': pagination})

    serializer = ItemSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    if Item.objects.filter(item_code=serializer.validated_data['item_code']).exists():
        return Response({'error': 'Item code already exists'}, status=status.HTTP_409_CONFLICT)
    item = serializer.save()
    logger.info(f"Item {item.item_code} created by {request.user.email}")
    create_audit_log(request, action='ITEM_CREATED', model_name='Item', object_id=item.id, object_name=item.item_code)
    return Response(ItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployee])
def item_detail(request, pk):
    item = get_object_or_404(Item, pk=pk)

    if request.method == 'GET':
        return Response(ItemSerializer(item).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ItemSerializer(item, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        code = serializer.validated_data.get('item_code', item.item_code)
        if Item.objects.filter(item_code=code).exclude(pk=item.pk).exists():
            return Response({'error': 'Item code already exists'}, status=status.HTTP_409_CONFLICT)
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        if item.movements.exists():
            return Response({'error': 'Cannot delete item with stock movement history. Deactivate it instead.'},
                            status=status.HTTP_400_BAD_REQUEST)
        item.delete()
        logger.info(f"Item {pk} deleted by {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsEmployee])
def item_history(request, pk):
    item = get_object_or_404(Item, pk=pk)
    try:
        limit = max(1, min(int(request.query_params.get('limit', 50)), 500))
    except ValueError:
        limit = 50
    movements = item.movements.select_related('performed_by').order_by('-id')[:limit]
    return Response({
        'item': ItemSerializer(item).data,
        'movements': StockMovementSerializer(movements, many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsEmployee])
def item_categories(request):
    categories = Item.objects.order_by('category').values_list('category', flat=True).distinct()
    return Response(list(categories))


@api_view(['GET'])
@permission_classes([IsEmployee])
def stock_movement_list(request):
    queryset = StockMovement.objects.select_related('item', 'performed_by')
    item_id = request.query_params.get('itemId')
    movement_type = request.query_params.get('type')
    if item_id:
        queryset = queryset.filter(item_id=item_id)
    if movement_type:
        queryset = queryset.filter(movement_type=movement_type.upper())
    movements, pagination = paginate(request, queryset, default_limit=50)
    return Response({'movements': StockMovementSerializer(movements, many=True).data, 'pagination': pagination})
