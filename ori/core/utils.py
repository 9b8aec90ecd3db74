"""Shared helpers: audit logging, pagination, data scope, notifications"""
import json
import logging

from django.core.paginator import Paginator
from django.db.models import Q
from rest_framework.response import Response

from .models import AuditLog, Notification, Setting

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 15
MAX_PAGE_SIZE = 200


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
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, status_change, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., company name, quote folio)
        object_reference: Reference identifier (e.g., folio, SKU)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def paginated_response(request, queryset, serializer_class, context=None, default_limit=DEFAULT_PAGE_SIZE):
    """Paginate a queryset with ?page= and ?limit= (or ?page_size=)"""
    try:
        page = int(request.query_params.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(request.query_params.get('limit') or request.query_params.get('page_size') or default_limit)
    except (TypeError, ValueError):
        limit = default_limit
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })


def scope_queryset(user, queryset, owner_fields=('owner',)):
    """
    Restrict a queryset to what the user's role may see.

    own  -> rows where any of owner_fields is the user
    team -> rows where any of owner_fields belongs to the user's team
    all  -> unrestricted
    """
    scope = user.data_scope
    if scope == 'all':
        return queryset

    condition = Q()
    for field in owner_fields:
        if scope == 'team' and user.team_id:
            condition |= Q(**{f'{field}__team_id': user.team_id})
        else:
            condition |= Q(**{field: user})
    return queryset.filter(condition).distinct()


def notify(user, title, message='', type='system', link=''):
    """Create an in-app notification for a user"""
    if user is None:
        return None
    return Notification.objects.create(user=user, title=title, message=message, type=type, link=link)


def get_setting_json(key, default=None):
    setting = Setting.objects.filter(key=key).first()
    if setting is None:
        return default
    return setting.get_json(default)


def set_setting_json(key, value, description=''):
    setting, _ = Setting.objects.update_or_create(
        key=key,
        defaults={'value': json.dumps(value, default=str), 'description': description},
    )
    return setting
