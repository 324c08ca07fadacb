"""Utility functions for audit logging and list pagination"""
import logging

from django.core.paginator import Paginator
from django.db import transaction
from django.utils import timezone

from .models import AuditLog

logger = logging.getLogger('backend.core')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action name (USER_LOGIN, PERMIT_CREATED, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., registration number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    try:
        # Savepoint, so a failed insert leaves an enclosing transaction usable
        with transaction.atomic():
            return AuditLog.objects.create(
                user=audit_user if audit_user and audit_user.is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_name=object_name,
                changes=changes or {},
                ip_address=get_client_ip(request) if request else None,
            )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log for {action} {model_name}#{object_id}: {str(e)}", exc_info=True)
        return None


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def paginate(request, queryset, default_limit=10, max_limit=100):
    """
    Slice a queryset using ?page= and ?limit= query params.

    Returns (objects, pagination) where pagination is
    {'page', 'limit', 'total', 'totalPages'}.
    """
    page = _positive_int(request.query_params.get('page'), 1)
    limit = min(_positive_int(request.query_params.get('limit'), default_limit), max_limit)

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    return list(page_obj.object_list), {
        'page': page_obj.number,
        'limit': limit,
        'total': paginator.count,
        'totalPages': paginator.num_pages if paginator.count else 0,
    }


def parse_bool(value):
    """Query-string boolean: returns None when the param is absent"""
    if value is None or value == '':
        return None
    return str(value).lower() in ('1', 'true', 'yes')


def next_sequence_number(model, field, prefix, width=5, year=None):
    """
    Next number in a yearly series such as RIS-2025-00001.

    Reads the highest existing number for the year; callers run inside a
    transaction and the field's unique constraint guards concurrent writers.
    """
    year = year or timezone.now().year
    series = f"{prefix}-{year}-"
    last = (
        model.objects.filter(**{f"{field}__startswith": series})
        .order_by(f"-{field}")
        .values_list(field, flat=True)
        .first()
    )
    sequence = 1
    if last:
        try:
            sequence = int(last[len(series):]) + 1
        except ValueError:
            sequence = model.objects.filter(**{f"{field}__startswith": series}).count() + 1
    return f"{series}{sequence:0{width}d}"


def append_note(notes, message, label='ADMIN OVERRIDE'):
    """Append a timestamped line to a free-text notes field"""
    line = f"[{timezone.now().isoformat()}] {label}: {message}"
    return f"{notes}\n{line}" if notes else line


def lock_for_update(instance):
    """
    Take a row lock on instance and reload it, so status checks inside the
    current transaction see the committed state. Must run inside atomic().
    """
    type(instance).objects.select_for_update().get(pk=instance.pk)
    instance.refresh_from_db()
    return instance
