"""Response envelope, pagination and audit logging helpers"""
import hashlib
import logging
import re
import secrets

from django.core.paginator import Paginator, EmptyPage
from rest_framework import status
from rest_framework.response import Response

from .models import AuditLog

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def success_response(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    """Build the `{success, data, message}` envelope"""
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    body.update(extra)
    return Response(body, status=status_code)


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST, errors=None):
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return Response(body, status=status_code)


def parse_int(value, default, minimum=1, maximum=None):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    number = max(number, minimum)
    if maximum is not None:
        number = min(number, maximum)
    return number


def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def paginate(request, queryset, default_limit=20):
    """
    Slice a queryset with `page`/`limit` query parameters.

    Returns (page_items, pagination_dict).
    """
    page_number = parse_int(request.query_params.get('page'), 1)
    limit = parse_int(request.query_params.get('limit'), default_limit, maximum=MAX_PAGE_SIZE)

    paginator = Paginator(queryset, limit)
    try:
        page = paginator.page(page_number)
        items = page.object_list
    except EmptyPage:
        items = []

    pages = paginator.num_pages if paginator.count else 0
    pagination = {
        'page': page_number,
        'limit': limit,
        'total': paginator.count,
        'pages': pages,
        'has_next': page_number < pages,
        'has_prev': page_number > 1,
    }
    return items, pagination


def slugify_name(name):
    """Lowercase, spaces to hyphens, non-word characters stripped"""
    slug = (name or '').strip().lower()
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'[^\w-]+', '', slug)
    return slug


def generate_token():
    """Return (raw_token, sha256_hash) for mailed one-time links"""
    raw = secrets.token_hex(32)
    return raw, hash_token(raw)


def hash_token(raw):
    return hashlib.sha256(raw.encode()).hexdigest()


def generate_otp():
    """Return (six_digit_code, sha256_hash) for mailed one-time passcodes"""
    raw = f"{secrets.randbelow(900000) + 100000}"
    return raw, hash_token(raw)


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
        request: request object (for user and IP), optional if user is provided
        action: one of AuditLog.ACTION_CHOICES
        model_name: name of the model being acted upon
        object_id: id of the object
        changes: dictionary describing the change
        user: optional user override (defaults to request.user)
        object_name: human-readable name (product name, order number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        # Audit failures never break the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def first_error_message(errors, default='Validation error'):
    """First message from serializer.errors, for the envelope's `message`"""
    if isinstance(errors, dict):
        for value in errors.values():
            return first_error_message(value, default)
    if isinstance(errors, (list, tuple)):
        for value in errors:
            return first_error_message(value, default)
    return str(errors) if errors else default
