import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.cemetery.models import CemeteryPlot
from backend.core.permissions import IsAdmin, IsEmployee
from backend.core.utils import create_audit_log, paginate
from backend.registry.models import DeathRegistration
from .models import Permit
from .serializers import PermitSerializer, PermitCreateSerializer
from .workflow import apply_status, apply_override, permit_fee, next_permit_number

logger = logging.getLogger('backend.permits')


def _permit_queryset():
    return Permit.objects.select_related('death_registration', 'deceased', 'requested_by', 'plot')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def permit_list_create(request):
    """List permits (citizens see their own) or request a new permit"""
    if request.method == 'GET':
        queryset = _permit_queryset()
        if not request.user.is_employee:
            queryset = queryset.filter(requested_by=request.user)

        permit_type = request.query_params.get('type')
        status_filter = request.query_params.get('status')
        if permit_type:
            queryset = queryset.filter(permit_type=permit_type.upper())
        if status_filter:
            queryset = queryset.filter(status__in=[s.strip().upper() for s in status_filter.split(',') if s.strip()])

        permits, pagination = paginate(request, queryset)
        return Response({'permits': PermitSerializer(permits, many=True).data, 'pagination': pagination})

    serializer = PermitCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Permit request validation failed: {serializer.errors}")
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    registration = None
    if data.get('deathId'):
        registration = DeathRegistration.objects.filter(pk=data['deathId']).select_related('deceased').first()
        if registration is None:
            return Response({'error': 'Death registration not found'}, status=status.HTTP_404_NOT_FOUND)
        if not request.user.is_employee and registration.submitted_by_id != request.user.id:
            logger.warning(f"User {request.user.email} requested a permit against registration {registration.id} they do not own")
            return Response({'error': 'Access denied'}, status=status.HTTP_403_FORBIDDEN)

    plot = None
    if data.get('plotId'):
        plot = CemeteryPlot.objects.filter(pk=data['plotId']).first()
        if plot is None:
            return Response({'error': 'Plot not found'}, status=status.HTTP_404_NOT_FOUND)

    permit_type = data['permitType']
    permit = Permit.objects.create(
        permit_number=next_permit_number(permit_type),
        permit_type=permit_type,
        death_registration=registration,
        deceased=registration.deceased if registration else None,
        plot=plot,
        requested_by=request.user,
        status='SUBMITTED',
        amount_due=permit_fee(permit_type),
        remarks=serializer.build_remarks(),
    )
    logger.info(f"Permit {permit.permit_number} requested by {request.user.email}")
    create_audit_log(request, action='PERMIT_CREATED', model_name='Permit', object_id=permit.id,
                     object_name=permit.permit_number,
                     changes={'type': permit_type, 'deathId': registration.id if registration else None})
    return Response(PermitSerializer(permit).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def permit_detail(request, pk):
    permit = get_object_or_404(_permit_queryset(), pk=pk)

    if request.method == 'GET':
        if not request.user.is_employee and permit.requested_by_id != request.user.id:
            return Response({'error': 'Access denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response(PermitSerializer(permit).data)

    if not request.user.is_admin:
        return Response({'error': 'Administrator access required'}, status=status.HTTP_403_FORBIDDEN)
    number = permit.permit_number
    permit.delete()
    logger.info(f"Permit {number} deleted by {request.user.email}")
    create_audit_log(request, action='PERMIT_DELETED', model_name='Permit', object_id=pk, object_name=number)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH', 'PUT'])
@permission_classes([IsEmployee])
def permit_status(request, pk):
    permit = get_object_or_404(_permit_queryset(), pk=pk)
    new_status = request.data.get('status')
    if not new_status:
        return Response({'error': 'status is required'}, status=status.HTTP_400_BAD_REQUEST)

    previous = apply_status(permit, new_status, remarks=request.data.get('remarks'), or_number=request.data.get('orNumber'))
    logger.info(f"Permit {permit.permit_number}: {previous} -> {permit.status} by {request.user.email}")
    create_audit_log(request, action='PERMIT_STATUS_CHANGED', model_name='Permit', object_id=permit.id,
                     object_name=permit.permit_number, changes={'from': previous, 'to': permit.status})
    return Response(PermitSerializer(permit).data)


@api_view(['POST'])
@permission_classes([IsAdmin])
def permit_override(request, pk):
    permit = get_object_or_404(_permit_queryset(), pk=pk)
    action = request.data.get('action')
    previous = permit.status

    message = apply_override(permit, action, request.data.get('reason'), new_amount=request.data.get('newAmount'))
    logger.info(f"Admin override '{action}' on permit {permit.permit_number} by {request.user.email}")
    create_audit_log(request, action=f'PERMIT_OVERRIDE_{action.upper()}', model_name='Permit', object_id=permit.id,
                     object_name=permit.permit_number,
                     changes={'from': previous, 'to': permit.status, 'message': message})
    return Response({'message': message, 'permit': PermitSerializer(permit).data})
