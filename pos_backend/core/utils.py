"""Utility functions for audit logging, account bootstrap and report parameters"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from .models import AuditLog

User = get_user_model()

logger = logging.getLogger('pos_backend.core')


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
        action: Action type (create, update, delete, soft_delete, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., product name, bill number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(
            f"Audit log creation skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    audit_user = user
    if audit_user is None and request is not None:
        audit_user = getattr(request, 'user', None)
    if audit_user is not None and not audit_user.is_authenticated:
        audit_user = None

    try:
        return AuditLog.objects.create(
            user=audit_user,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        # Audit logging must never fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def ensure_default_admin():
    """
    Create the configured default admin account if it does not exist yet.

    Returns:
        tuple: (user, created)
    """
    email = User.objects.normalize_email(settings.DEFAULT_ADMIN_EMAIL)
    existing = User.objects.filter(email__iexact=email).first()
    if existing:
        return existing, False

    user = User.objects.create_user(
        email=email,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        name=settings.DEFAULT_ADMIN_NAME,
        role=User.ROLE_ADMIN,
        status=User.STATUS_ACTIVE,
        is_staff=True,
    )
    logger.info(f"Default admin account created: {user.email}")
    return user, True


def parse_date_range(query_params, default_days=None):
    """
    Read `date_from` / `date_to` (YYYY-MM-DD) from query params.

    When `default_days` is given, a missing range defaults to the last
    `default_days` days ending today.

    Raises:
        rest_framework.exceptions.ValidationError: on malformed dates or date_from after date_to
    """
    errors = {}
    parsed = {}
    for name in ('date_from', 'date_to'):
        raw = query_params.get(name)
        parsed[name] = None
        if raw:
            try:
                parsed[name] = parse_date(raw)
            except ValueError:
                parsed[name] = None
            if parsed[name] is None:
                errors[name] = ['Date has wrong format. Use YYYY-MM-DD.']
    if errors:
        raise ValidationError(errors)

    date_from, date_to = parsed['date_from'], parsed['date_to']
    if default_days is not None:
        today = timezone.localdate()
        date_to = date_to or today
        date_from = date_from or date_to - timedelta(days=default_days)
    if date_from and date_to and date_from > date_to:
        raise ValidationError({'date_from': ['date_from must not be after date_to.']})
    return date_from, date_to
