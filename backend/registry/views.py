import logging
import os

from django.conf import settings
from django.db.models import Q, Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.core.permissions import IsAdmin, IsEmployee
from backend.core.utils import create_audit_log, paginate
from .models import DeceasedRecord, DeathRegistration, RegistrationDocument
from .serializers import (
    DeceasedRecordSerializer, DeathRegistrationSerializer, DeathRegistrationDetailSerializer,
    DeathRegistrationCreateSerializer
)
from .services import create_registration, delete_registration, deceased_in_use
from .workflow import apply_status, apply_override, COMPLETED_STATUSES

logger = logging.getLogger('backend.registry')

ALLOWED_DOCUMENT_TYPES = ['image/jpeg', 'image/png', 'image/gif', 'application/pdf']
CITIZEN_STATUS_COUNTS = ['PENDING_VERIFICATION', 'PROCESSING', 'REGISTERED', 'FOR_PICKUP', 'CLAIMED', 'REJECTED']


def _registration_queryset():
    return DeathRegistration.objects.select_related('deceased', 'submitted_by')


def _can_view(user, registration):
    return user.is_employee or registration.submitted_by_id == user.id


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def registration_list_create(request):
    """Staff list all registrations; any signed-in user may file one"""
    if request.method == 'GET':
        if not request.user.is_employee:
            return Response({'error': 'Employee access required'}, status=status.HTTP_403_FORBIDDEN)

        queryset = _registration_queryset()
        status_filter = request.query_params.get('status')
        type_filter = request.query_params.get('type')
        search = request.query_params.get('search')

        if status_filter:
            queryset = queryset.filter(status__in=[s.strip().upper() for s in status_filter.split(',') if s.strip()])
        if type_filter:
            queryset = queryset.filter(registration_type=type_filter.upper())
        if search:
            queryset = queryset.filter(
                Q(registration_number__icontains=search) |
                Q(deceased__first_name__icontains=search) |
                Q(deceased__last_name__icontains=search) |
                Q(informant_name__icontains=search)
            )

        registrations, pagination = paginate(request, queryset)
        return Response({
            'registrations': DeathRegistrationSerializer(registrations, many=True).data,
            'pagination': pagination,
        })

    serializer = DeathRegistrationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Death registration validation failed: {serializer.errors}")
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    registration = create_registration(serializer.validated_data, user=request.user)
    create_audit_log(request, action='DEATH_REGISTRATION_CREATED', model_name='DeathRegistration',
                     object_id=registration.id, object_name=registration.registration_number,
                     changes={'type': registration.registration_type, 'amountDue': str(registration.amount_due)})
    return Response(DeathRegistrationDetailSerializer(registration).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def registration_detail(request, pk):
    registration = get_object_or_404(_registration_queryset().prefetch_related('documents'), pk=pk)

    if request.method == 'GET':
        if not _can_view(request.user, registration):
            return Response({'error': 'Access denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response(DeathRegistrationDetailSerializer(registration).data)

    if not request.user.is_admin:
        logger.warning(f"User {request.user.email} attempted to delete registration {pk}")
        return Response({'error': 'Administrator access required'}, status=status.HTTP_403_FORBIDDEN)

    number = registration.registration_number
    deceased_removed = delete_registration(registration)
    logger.info(f"Death registration {number} deleted by {request.user.email}")
    create_audit_log(request, action='DEATH_REGISTRATION_DELETED', model_name='DeathRegistration',
                     object_id=pk, object_name=number, changes={'deceasedRemoved': deceased_removed})
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH', 'PUT'])
@permission_classes([IsEmployee])
def registration_status(request, pk):
    """Move a registration to its next status through the transition table"""
    registration = get_object_or_404(DeathRegistration, pk=pk)
    new_status = request.data.get('status')
    if not new_status:
        return Response({'error': 'status is required'}, status=status.HTTP_400_BAD_REQUEST)

    previous = apply_status(
        registration, new_status, user=request.user,
        remarks=request.data.get('remarks'), or_number=request.data.get('orNumber'),
    )
    logger.info(f"Registration {registration.registration_number}: {previous} -> {registration.status} by {request.user.email}")
    create_audit_log(request, action='DEATH_REGISTRATION_STATUS_CHANGED', model_name='DeathRegistration',
                     object_id=registration.id, object_name=registration.registration_number,
                     changes={'from': previous, 'to': registration.status})
    registration = _registration_queryset().prefetch_related('documents').get(pk=pk)
    return Response(DeathRegistrationDetailSerializer(registration).data)


@api_view(['POST'])
@permission_classes([IsAdmin])
def registration_override(request, pk):
    registration = get_object_or_404(DeathRegistration, pk=pk)
    action = request.data.get('action')
    previous = registration.status

    message = apply_override(
        registration, action, request.data.get('reason'), user=request.user,
        changes=request.data.get('changes'), new_amount=request.data.get('newAmount'),
    )
    logger.info(f"Admin override '{action}' on {registration.registration_number} by {request.user.email}")
    create_audit_log(request, action='DEATH_REGISTRATION_OVERRIDE', model_name='DeathRegistration',
                     object_id=registration.id, object_name=registration.registration_number,
                     changes={'action': action, 'from': previous, 'to': registration.status, 'message': message})
    registration = _registration_queryset().prefetch_related('documents').get(pk=pk)
    return Response({'message': message, 'registration': DeathRegistrationDetailSerializer(registration).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def registration_document_upload(request, pk):
    registration = get_object_or_404(DeathRegistration, pk=pk)
    if not _can_view(request.user, registration):
        return Response({'error': 'Access denied'}, status=status.HTTP_403_FORBIDDEN)

    upload = request.FILES.get('file')
    doc_type = request.data.get('docType')
    if upload is None:
        return Response({'error': 'No file uploaded'}, status=status.HTTP_400_BAD_REQUEST)
    if not doc_type:
        return Response({'error': 'docType is required'}, status=status.HTTP_400_BAD_REQUEST)
    if upload.content_type not in ALLOWED_DOCUMENT_TYPES:
        return Response({'error': 'Only images and PDF files are allowed'}, status=status.HTTP_400_BAD_REQUEST)
    if upload.size > settings.MAX_UPLOAD_SIZE:
        return Response({'error': f'File exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit'}, status=status.HTTP_400_BAD_REQUEST)

    document = RegistrationDocument.objects.create(
        registration=registration,
        doc_type=doc_type,
        file=upload,
        original_name=os.path.basename(upload.name),
        mime_type=upload.content_type,
        size=upload.size,
        uploaded_by=request.user,
    )
    logger.info(f"Document {document.doc_type} uploaded to {registration.registration_number}")
    create_audit_log(request, action='DOCUMENT_UPLOADED', model_name='DeathRegistration',
                     object_id=registration.id, object_name=registration.registration_number,
                     changes={'docType': doc_type, 'file': document.original_name})
    return Response({
        'id': document.id,
        'docType': document.doc_type,
        'originalName': document.original_name,
        'mimeType': document.mime_type,
        'size': document.size,
        'url': document.file.url,
    }, status=status.HTTP_201_CREATED)


# Citizen views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def citizen_registrations(request):
    """The signed-in user's own applications, with per-status counts"""
    own = DeathRegistration.objects.filter(submitted_by=request.user)
    queryset = own.select_related('deceased', 'submitted_by')

    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status__in=[s.strip().upper() for s in status_filter.split(',') if s.strip()])

    registrations, pagination = paginate(request, queryset)

    counts = {row['status']: row['total'] for row in own.order_by().values('status').annotate(total=Count('id'))}
    status_counts = {'total': own.count()}
    for code in CITIZEN_STATUS_COUNTS:
        status_counts[code] = counts.get(code, 0)

    return Response({
        'registrations': DeathRegistrationSerializer(registrations, many=True).data,
        'pagination': pagination,
        'statusCounts': status_counts,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def citizen_deceased(request):
    """Deceased persons whose registration by this user has been completed"""
    deceased = DeceasedRecord.objects.filter(
        registrations__submitted_by=request.user,
        registrations__status__in=COMPLETED_STATUSES,
    ).distinct()
    return Response({'deceased': DeceasedRecordSerializer(deceased, many=True).data})


# Deceased records
@api_view(['GET', 'POST'])
@permission_classes([IsEmployee])
def deceased_list_create(request):
    if request.method == 'GET':
        queryset = DeceasedRecord.objects.all()
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search) |
                Q(middle_name__icontains=search) |
                Q(last_name__icontains=search)
            )
        records, pagination = paginate(request, queryset, default_limit=20)
        return Response({'deceased': DeceasedRecordSerializer(records, many=True).data, 'pagination': pagination})

    serializer = DeceasedRecordSerializer(data=request.data)
    if serializer.is_valid():
        record = serializer.save()
        logger.info(f"Deceased record {record.id} ({record.full_name}) created by {request.user.email}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsEmployee])
def deceased_detail(request, pk):
    record = get_object_or_404(DeceasedRecord, pk=pk)

    if request.method == 'GET':
        return Response(DeceasedRecordSerializer(record).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DeceasedRecordSerializer(record, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if deceased_in_use(record):
            return Response({'error': 'Cannot delete a deceased record that is referenced by registrations, permits or plot assignments'},
                            status=status.HTTP_400_BAD_REQUEST)
        record.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
