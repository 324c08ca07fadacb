import logging

from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee
from .models import StorageZone, StorageRack, StockLocation
from .serializers import StorageZoneSerializer, StorageRackSerializer, StockLocationSerializer

logger = logging.getLogger('backend.locations')


def _conflict_if_taken(model, field, value, label, exclude_pk=None):
    queryset = model.objects.filter(**{field: value})
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    if value and queryset.exists():
        return Response({'error': f'{label} {value} already exists'}, status=status.HTTP_409_CONFLICT)
    return None


# Zone views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def zone_list_create(request):
    """List all storage zones or create a new zone"""
    if request.method == 'GET':
        zones = StorageZone.objects.annotate(rack_count=Count('racks'))
        return Response(StorageZoneSerializer(zones, many=True).data)

    serializer = StorageZoneSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    conflict = _conflict_if_taken(StorageZone, 'zone_name', serializer.validated_data['zone_name'], 'Zone')
    if conflict:
        return conflict
    zone = serializer.save()
    logger.info(f"Storage zone '{zone.zone_name}' created by {request.user.email}")
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployee])
def zone_detail(request, pk):
    """Retrieve, update or delete a storage zone"""
    zone = get_object_or_404(StorageZone, pk=pk)

    if request.method == 'GET':
        return Response(StorageZoneSerializer(zone).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StorageZoneSerializer(zone, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        conflict = _conflict_if_taken(StorageZone, 'zone_name', serializer.validated_data.get('zone_name'), 'Zone', zone.pk)
        if conflict:
            return conflict
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        if zone.racks.exists():
            return Response({'error': 'Cannot delete zone with existing racks'}, status=status.HTTP_400_BAD_REQUEST)
        zone.delete()
        logger.info(f"Storage zone {pk} deleted by {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# Rack views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def rack_list_create(request):
    if request.method == 'GET':
        racks = StorageRack.objects.select_related('zone')
        zone_id = request.query_params.get('zoneId')
        if zone_id:
            racks = racks.filter(zone_id=zone_id)
        return Response(StorageRackSerializer(racks, many=True).data)

    serializer = StorageRackSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    conflict = _conflict_if_taken(StorageRack, 'rack_code', serializer.validated_data['rack_code'], 'Rack')
    if conflict:
        return conflict
    serializer.save()
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployee])
def rack_detail(request, pk):
    rack = get_object_or_404(StorageRack.objects.select_related('zone'), pk=pk)

    if request.method == 'GET':
        return Response(StorageRackSerializer(rack).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StorageRackSerializer(rack, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        conflict = _conflict_if_taken(StorageRack, 'rack_code', serializer.validated_data.get('rack_code'), 'Rack', rack.pk)
        if conflict:
            return conflict
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        if rack.locations.exists():
            return Response({'error': 'Cannot delete rack with existing stock locations'}, status=status.HTTP_400_BAD_REQUEST)
        rack.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Stock location views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def location_list_create(request):
    if request.method == 'GET':
        locations = StockLocation.objects.select_related('rack', 'item')
        rack_id = request.query_params.get('rackId')
        item_id = request.query_params.get('itemId')
        if rack_id:
            locations = locations.filter(rack_id=rack_id)
        if item_id:
            locations = locations.filter(item_id=item_id)
        return Response(StockLocationSerializer(locations, many=True).data)

    serializer = StockLocationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    conflict = _conflict_if_taken(StockLocation, 'tag_code', serializer.validated_data.get('tag_code'), 'Tag')
    if conflict:
        return conflict
    serializer.save()
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployee])
def location_detail(request, pk):
    location = get_object_or_404(StockLocation.objects.select_related('rack', 'item'), pk=pk)

    if request.method == 'GET':
        return Response(StockLocationSerializer(location).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = StockLocationSerializer(location, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        conflict = _conflict_if_taken(StockLocation, 'tag_code', serializer.validated_data.get('tag_code'), 'Tag', location.pk)
        if conflict:
            return conflict
        serializer.save()
        return Response(serializer.data)
    else:  # DELETE
        location.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
