import logging

from django.db.models import Count, Q, Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee, IsEmployeeOrReadOnly
from backend.core.utils import create_audit_log, parse_bool
from .filters import PlotFilter
from .geometry import plot_boundary, polygon_area_sq_meters
from .models import Cemetery, CemeterySection, CemeteryBlock, CemeteryPlot, PlotAssignment, Gravestone
from .serializers import (
    CemeterySerializer, CemeteryDetailSerializer, CemeterySectionSerializer, CemeteryBlockSerializer,
    CemeteryPlotSerializer, CemeteryPlotDetailSerializer, PlotAssignmentSerializer, GravestoneSerializer
)
from .services import (
    delete_cemetery_tree, cemetery_statistics, assign_occupant, reserve_plot, release_layer,
    search_occupants
)

logger = logging.getLogger('backend.cemetery')


def _with_area(serializer):
    """Fill total_area from the boundary when the client did not send one"""
    data = serializer.validated_data
    boundary = data.get('boundary')
    if boundary and data.get('total_area') is None:
        return {'total_area': round(polygon_area_sq_meters(boundary), 2)}
    return {}


# Cemetery views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployeeOrReadOnly])
def cemetery_list_create(request):
    """List cemeteries or create a new cemetery"""
    if request.method == 'GET':
        queryset = Cemetery.objects.annotate(
            plot_count=Count('plots', distinct=True),
            section_count=Count('sections', distinct=True),
        )
        search = request.query_params.get('search')
        is_active = parse_bool(request.query_params.get('isActive'))
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(city__icontains=search))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return Response(CemeterySerializer(queryset, many=True).data)

    serializer = CemeterySerializer(data=request.data)
    if serializer.is_valid():
        cemetery = serializer.save(**_with_area(serializer))
        logger.info(f"Cemetery '{cemetery.name}' created by {request.user.email}")
        create_audit_log(request, action='CEMETERY_CREATED', model_name='Cemetery',
                         object_id=cemetery.id, object_name=cemetery.name)
        return Response(CemeterySerializer(cemetery).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Cemetery creation validation failed: {serializer.errors}")
    return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployeeOrReadOnly])
def cemetery_detail(request, pk):
    """Retrieve, update or delete a cemetery; ?cascade=true removes the whole tree"""
    cemetery = get_object_or_404(Cemetery, pk=pk)

    if request.method == 'GET':
        cemetery = Cemetery.objects.prefetch_related(
            Prefetch('sections', queryset=CemeterySection.objects.prefetch_related('blocks'))
        ).get(pk=pk)
        return Response(CemeteryDetailSerializer(cemetery).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CemeterySerializer(cemetery, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save(**_with_area(serializer))
            logger.info(f"Cemetery {pk} updated by {request.user.email}")
            return Response(serializer.data)
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        name = cemetery.name
        if parse_bool(request.query_params.get('cascade')):
            counts = delete_cemetery_tree(cemetery)
            create_audit_log(request, action='CEMETERY_DELETED', model_name='Cemetery',
                             object_id=pk, object_name=name, changes={'cascade': True, **counts})
            return Response({'message': f'Cemetery {name} and all related records deleted', 'deleted': counts})

        if cemetery.plots.exists() or cemetery.sections.exists():
            return Response({
                'error': 'Cannot delete cemetery with existing plots or sections. Use cascade=true to delete everything.',
                'plots': cemetery.plots.count(),
                'sections': cemetery.sections.count(),
            }, status=status.HTTP_400_BAD_REQUEST)
        cemetery.delete()
        create_audit_log(request, action='CEMETERY_DELETED', model_name='Cemetery', object_id=pk, object_name=name)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsEmployeeOrReadOnly])
def cemetery_statistics_view(request, pk):
    cemetery = get_object_or_404(Cemetery, pk=pk)
    return Response(cemetery_statistics(cemetery))


# Section views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployeeOrReadOnly])
def section_list_create(request):
    if request.method == 'GET':
        queryset = CemeterySection.objects.annotate(
            block_count=Count('blocks', distinct=True),
            plot_count=Count('plots', distinct=True),
        ).order_by('name')
        cemetery_id = request.query_params.get('cemeteryId')
        if cemetery_id:
            queryset = queryset.filter(cemetery_id=cemetery_id)
        return Response(CemeterySectionSerializer(queryset, many=True).data)

    serializer = CemeterySectionSerializer(data=request.data)
    if serializer.is_valid():
        section = serializer.save()
        logger.info(f"Section '{section.name}' created in cemetery {section.cemetery_id}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployeeOrReadOnly])
def section_detail(request, pk):
    section = get_object_or_404(CemeterySection, pk=pk)

    if request.method == 'GET':
        return Response(CemeterySectionSerializer(section).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CemeterySectionSerializer(section, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if section.blocks.exists():
            return Response({'error': 'Cannot delete section with existing blocks'}, status=status.HTTP_400_BAD_REQUEST)
        if section.plots.exists():
            return Response({'error': 'Cannot delete section with existing plots'}, status=status.HTTP_400_BAD_REQUEST)
        section.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Block views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployeeOrReadOnly])
def block_list_create(request):
    if request.method == 'GET':
        queryset = CemeteryBlock.objects.annotate(plot_count=Count('plots')).order_by('name')
        section_id = request.query_params.get('sectionId')
        cemetery_id = request.query_params.get('cemeteryId')
        if section_id:
            queryset = queryset.filter(section_id=section_id)
        if cemetery_id:
            queryset = queryset.filter(section__cemetery_id=cemetery_id)
        return Response(CemeteryBlockSerializer(queryset, many=True).data)

    serializer = CemeteryBlockSerializer(data=request.data)
    if serializer.is_valid():
        block = serializer.save()
        logger.info(f"Block '{block.name}' ({block.block_type}) created in section {block.section_id}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployeeOrReadOnly])
def block_detail(request, pk):
    block = get_object_or_404(CemeteryBlock, pk=pk)

    if request.method == 'GET':
        return Response(CemeteryBlockSerializer(block).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CemeteryBlockSerializer(block, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if block.plots.exists():
            return Response({'error': 'Cannot delete block with existing plots'}, status=status.HTTP_400_BAD_REQUEST)
        block.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Plot views
def _plot_queryset():
    return CemeteryPlot.objects.select_related('cemetery', 'section', 'block').prefetch_related('assignments')


@api_view(['GET', 'POST'])
@permission_classes([IsEmployeeOrReadOnly])
def plot_list_create(request):
    if request.method == 'GET':
        filterset = PlotFilter(request.query_params, queryset=_plot_queryset())
        if not filterset.is_valid():
            return Response({'error': 'Validation Error', 'details': filterset.errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CemeteryPlotSerializer(filterset.qs, many=True).data)

    serializer = CemeteryPlotSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    if CemeteryPlot.objects.filter(cemetery=data['cemetery'], plot_number=data['plot_number']).exists():
        return Response({'error': f"Plot number {data['plot_number']} already exists in this cemetery"},
                        status=status.HTTP_409_CONFLICT)

    extra = {}
    if not data.get('boundary') and data.get('latitude') is not None and data.get('longitude') is not None:
        extra['boundary'] = plot_boundary(
            data['latitude'], data['longitude'],
            float(data.get('length', 2)), float(data.get('width', 1)),
        )
    plot = serializer.save(**extra)
    logger.info(f"Plot {plot.plot_code} created in cemetery {plot.cemetery_id}")
    return Response(CemeteryPlotSerializer(plot).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployeeOrReadOnly])
def plot_detail(request, pk):
    """
    Retrieve, update or delete a plot.

    PUT with occupantDetails assigns a deceased person to a layer; PUT with
    reservationDetails reserves a vacant plot. Any other PUT/PATCH edits the plot.
    """
    plot = get_object_or_404(CemeteryPlot, pk=pk)

    if request.method == 'GET':
        plot = _plot_queryset().prefetch_related('assignments__deceased', 'gravestones').get(pk=pk)
        return Response(CemeteryPlotDetailSerializer(plot).data)

    if request.method == 'DELETE':
        if plot.assignments.exists():
            return Response({'error': 'Cannot delete plot with burial assignments'}, status=status.HTTP_400_BAD_REQUEST)
        code = plot.plot_code
        plot.gravestones.all().delete()
        plot.delete()
        logger.info(f"Plot {code} deleted by {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    occupant = request.data.get('occupantDetails')
    reservation = request.data.get('reservationDetails')
    if request.method == 'PUT' and occupant:
        if not isinstance(occupant, dict):
            return Response({'error': 'occupantDetails must be an object'}, status=status.HTTP_400_BAD_REQUEST)
        assign_occupant(plot, occupant, user=request.user, request=request)
        plot = _plot_queryset().prefetch_related('assignments__deceased', 'gravestones').get(pk=pk)
        return Response(CemeteryPlotDetailSerializer(plot).data)
    if request.method == 'PUT' and reservation:
        if not isinstance(reservation, dict):
            return Response({'error': 'reservationDetails must be an object'}, status=status.HTTP_400_BAD_REQUEST)
        reserve_plot(plot, reservation, user=request.user, request=request)
        plot.refresh_from_db()
        return Response(CemeteryPlotSerializer(plot).data)

    serializer = CemeteryPlotSerializer(plot, data=request.data, partial=True if request.method == 'PATCH' else False)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    cemetery = data.get('cemetery', plot.cemetery)
    plot_number = data.get('plot_number', plot.plot_number)
    if CemeteryPlot.objects.filter(cemetery=cemetery, plot_number=plot_number).exclude(pk=plot.pk).exists():
        return Response({'error': f'Plot number {plot_number} already exists in this cemetery'},
                        status=status.HTTP_409_CONFLICT)
    serializer.save()
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsEmployee])
def plot_release(request, pk):
    """Mark a layer's occupant as exhumed or transferred"""
    plot = get_object_or_404(CemeteryPlot, pk=pk)
    try:
        layer = int(request.data.get('layer', 1))
    except (TypeError, ValueError):
        return Response({'error': 'layer must be a whole number'}, status=status.HTTP_400_BAD_REQUEST)
    release_status = (request.data.get('status') or PlotAssignment.STATUS_EXHUMED).upper()
    if release_status not in (PlotAssignment.STATUS_EXHUMED, PlotAssignment.STATUS_TRANSFERRED):
        return Response({'error': 'status must be EXHUMED or TRANSFERRED'}, status=status.HTTP_400_BAD_REQUEST)

    assignment = release_layer(plot, layer, status=release_status, user=request.user, request=request)
    return Response(PlotAssignmentSerializer(assignment).data)


@api_view(['GET'])
@permission_classes([IsEmployeeOrReadOnly])
def plot_search(request):
    """Find where a person is buried by name"""
    name = (request.query_params.get('name') or request.query_params.get('q') or '').strip()
    if len(name) < 2:
        return Response({'error': 'Search query must be at least 2 characters long'}, status=status.HTTP_400_BAD_REQUEST)
    results = search_occupants(name)
    return Response({'results': results, 'count': len(results)})


# Gravestone views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployeeOrReadOnly])
def gravestone_list_create(request):
    if request.method == 'GET':
        queryset = Gravestone.objects.select_related('plot').order_by('-created_at')
        plot_id = request.query_params.get('plotId')
        if plot_id:
            queryset = queryset.filter(plot_id=plot_id)
        return Response(GravestoneSerializer(queryset, many=True).data)

    serializer = GravestoneSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployeeOrReadOnly])
def gravestone_detail(request, pk):
    gravestone = get_object_or_404(Gravestone, pk=pk)

    if request.method == 'GET':
        return Response(GravestoneSerializer(gravestone).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = GravestoneSerializer(gravestone, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        gravestone.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
