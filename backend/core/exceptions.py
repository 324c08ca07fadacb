"""
Exception handling for the API.

Domain code raises ServiceError for rule violations; ORM errors that escape a
view are translated into the same {'error': ...} payload the views return.
"""
import logging

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError, RestrictedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('backend.core')


class ServiceError(Exception):
    """A business rule rejected the request"""

    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST, details=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def _is_unique_violation(exc):
    message = str(exc).lower()
    return 'unique' in message or 'duplicate' in message


def api_exception_handler(exc, context):
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, ServiceError):
        payload = {'error': exc.message}
        if exc.details:
            payload['details'] = exc.details
        return Response(payload, status=exc.status_code)

    if isinstance(exc, IntegrityError):
        if _is_unique_violation(exc):
            logger.warning(f"Unique constraint violated in {view_name}: {exc}")
            return Response({'error': 'A record with this data already exists'}, status=status.HTTP_409_CONFLICT)
        logger.warning(f"Integrity error in {view_name}: {exc}")
        return Response({'error': 'Foreign key constraint failed'}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, (ProtectedError, RestrictedError)):
        logger.warning(f"Delete blocked by related records in {view_name}: {exc}")
        return Response({'error': 'Foreign key constraint failed'}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, (ObjectDoesNotExist, Http404)):
        return Response({'error': 'Record not found'}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, DjangoValidationError):
        return Response({'error': 'Validation Error', 'details': exc.messages}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is not None:
        if not isinstance(exc, ValidationError) and isinstance(response.data, dict) and 'detail' in response.data:
            response.data = {'error': str(response.data['detail'])}
        return response

    logger.error(f"Unhandled error in {view_name}: {str(exc)}", exc_info=exc)
    payload = {'error': 'Internal Server Error'}
    if settings.DEBUG:
        payload['message'] = str(exc)
    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
