"""
Shared plumbing for tenant-bound COGS services.
"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from activity.services import log_activity
from cogs.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class TenantService:
    """
    Base for services that act on behalf of one business.

    The tenant is always passed in explicitly and every lookup filters by it,
    using the unfiltered `all_objects` manager so no thread-local context is
    involved. A row of another tenant is reported exactly like a missing one.
    """

    def __init__(self, tenant, user=None):
        self.tenant = tenant
        self.user = user

    def _get(self, model, pk, entity_type, queryset=None):
        """
        Fetch one tenant row or raise NotFoundError.

        Args:
            model: Model class with an `all_objects` manager and a tenant FK.
            pk: Primary key as given by the caller (may be a string).
            entity_type: Name used in the error message, e.g. 'ingredient'.
            queryset: Optional pre-built queryset (select_related etc.).
        """
        if queryset is None:
            queryset = model.all_objects.all()
        try:
            return queryset.get(tenant=self.tenant, pk=pk)
        except (model.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise NotFoundError(entity_type, pk)

    def _log(self, action, description, entity_type="", entity_id=""):
        return log_activity(
            self.tenant,
            action,
            description,
            user=self.user,
            entity_type=entity_type,
            entity_id=entity_id,
        )

    @staticmethod
    def history_limit(limit=None):
        if limit is None:
            return getattr(settings, 'COGS_PRICE_HISTORY_LIMIT', 10)
        return max(int(limit), 1)
