import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee
from backend.core.utils import create_audit_log, paginate
from .models import RISRequest, Issuance
from .serializers import RISRequestSerializer, RISCreateSerializer, IssuanceSerializer
from . import services

logger = logging.getLogger('backend.requisitions')


def _ris_queryset():
    return RISRequest.objects.prefetch_related('items', 'items__item')


def _issuance_queryset():
    return Issuance.objects.select_related('ris').prefetch_related('items', 'items__item')


def _required(request, *fields):
    missing = [field for field in fields if not request.data.get(field)]
    if missing:
        return Response({'error': f"Missing required fields: {', '.join(missing)}"},
                        status=status.HTTP_400_BAD_REQUEST)
    return None


# RIS views
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def ris_list_create(request):
    if request.method == 'GET':
        queryset = _ris_queryset()
        status_filter = request.query_params.get('status')
        department = request.query_params.get('department')
        search = request.query_params.get('search')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if department:
            queryset = queryset.filter(department__icontains=department)
        if search:
            queryset = queryset.filter(
                Q(ris_number__icontains=search) |
                Q(requested_by__icontains=search) |
                Q(purpose__icontains=search)
            )
        requests, pagination = paginate(request, queryset)
        return Response({'requests': RISRequestSerializer(requests, many=True).data, 'pagination': pagination})

    serializer = RISCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"RIS validation failed: {serializer.errors}")
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    ris = services.create_ris(
        department=data['department'],
        requested_by=data['requested_by'],
        purpose=data['purpose'],
        lines=data['items'],
        email=data.get('email', ''),
        date_needed=data.get('date_needed'),
        user=request.user,
    )
    create_audit_log(request=request, action='RIS_CREATED', model_name='RISRequest', object_id=ris.id,
                     object_name=ris.ris_number, changes={'department': ris.department, 'items': len(data['items'])})
    return Response(RISRequestSerializer(_ris_queryset().get(pk=ris.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsEmployee])
def ris_detail(request, pk):
    ris = get_object_or_404(_ris_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(RISRequestSerializer(ris).data)

    if ris.status != RISRequest.STATUS_PENDING:
        return Response({'error': 'Only pending requests can be deleted'}, status=status.HTTP_400_BAD_REQUEST)
    ris_number = ris.ris_number
    ris.delete()
    create_audit_log(request=request, action='RIS_DELETED', model_name='RISRequest', object_id=pk,
                     object_name=ris_number)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsEmployee])
def ris_approve(request, pk):
    ris = get_object_or_404(RISRequest, pk=pk)
    missing = _required(request, 'approvedBy')
    if missing:
        return missing
    fully_stocked = services.approve_ris(ris, request.data['approvedBy'])
    create_audit_log(request=request, action='RIS_APPROVED', model_name='RISRequest', object_id=ris.id,
                     object_name=ris.ris_number, changes={'status': ris.status})
    return Response({
        'message': 'RIS approved successfully' if fully_stocked else 'RIS approved with stock limitations',
        'request': RISRequestSerializer(_ris_queryset().get(pk=ris.pk)).data,
    })


@api_view(['POST'])
@permission_classes([IsEmployee])
def ris_reject(request, pk):
    ris = get_object_or_404(RISRequest, pk=pk)
    missing = _required(request, 'rejectedBy', 'reason')
    if missing:
        return missing
    services.reject_ris(ris, request.data['rejectedBy'], request.data['reason'])
    create_audit_log(request=request, action='RIS_REJECTED', model_name='RISRequest', object_id=ris.id,
                     object_name=ris.ris_number, changes={'reason': ris.rejection_reason})
    return Response(RISRequestSerializer(_ris_queryset().get(pk=ris.pk)).data)


@api_view(['POST'])
@permission_classes([IsEmployee])
def ris_issue(request, pk):
    ris = get_object_or_404(RISRequest, pk=pk)
    missing = _required(request, 'issuedBy')
    if missing:
        return missing
    issuance = services.issue_ris(ris, request.data['issuedBy'], user=request.user,
                                  remarks=request.data.get('remarks', ''))
    create_audit_log(request=request, action='RIS_ISSUED', model_name='RISRequest', object_id=ris.id,
                     object_name=ris.ris_number, changes={'issuance': issuance.issuance_number})
    return Response(IssuanceSerializer(_issuance_queryset().get(pk=issuance.pk)).data)


# Issuance views
@api_view(['GET'])
@permission_classes([IsEmployee])
def issuance_list(request):
    queryset = _issuance_queryset()
    date_from = request.query_params.get('dateFrom')
    date_to = request.query_params.get('dateTo')
    search = request.query_params.get('search')
    if date_from:
        queryset = queryset.filter(issued_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(issued_at__date__lte=date_to)
    if search:
        queryset = queryset.filter(Q(issuance_number__icontains=search) | Q(issued_to__icontains=search))
    issuances, pagination = paginate(request, queryset)
    return Response({'issuances': IssuanceSerializer(issuances, many=True).data, 'pagination': pagination})


@api_view(['GET'])
@permission_classes([IsEmployee])
def issuance_detail(request, pk):
    issuance = get_object_or_404(_issuance_queryset(), pk=pk)
    return Response(IssuanceSerializer(issuance).data)


@api_view(['POST', 'PATCH'])
@permission_classes([IsEmployee])
def issuance_acknowledge(request, pk):
    issuance = get_object_or_404(Issuance, pk=pk)
    missing = _required(request, 'acknowledgedBy')
    if missing:
        return missing
    services.acknowledge_issuance(issuance, request.data['acknowledgedBy'], remarks=request.data.get('remarks'))
    create_audit_log(request=request, action='ISSUANCE_ACKNOWLEDGED', model_name='Issuance', object_id=issuance.id,
                     object_name=issuance.issuance_number)
    return Response(IssuanceSerializer(_issuance_queryset().get(pk=issuance.pk)).data)


@api_view(['GET'])
@permission_classes([IsEmployee])
def issuance_stats_summary(request):
    return Response(services.issuance_summary())


@api_view(['GET'])
@permission_classes([IsEmployee])
def issuance_stats_by_department(request):
    return Response(services.issuances_by_department())
