"""
Activity logging.

Logging an activity is a side effect of some other operation, so it must never
break that operation: failures are logged and swallowed.
"""
import logging

from django.db import transaction

from .models import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(tenant, action, description="", user=None, entity_type="", entity_id=""):
    """
    Record one activity row for the tenant.

    Runs inside its own savepoint so a failed insert does not poison an
    enclosing transaction.

    Returns:
        The created ActivityLog, or None when the write failed.
    """
    if user is not None and not getattr(user, 'is_authenticated', False):
        user = None

    try:
        with transaction.atomic():
            return ActivityLog.all_objects.create(
                tenant=tenant,
                user=user,
                action=action,
                description=description,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else "",
            )
    except Exception as e:
        logger.warning(f"Failed to log activity {action} for tenant {getattr(tenant, 'slug', tenant)}: {e}")
        return None
