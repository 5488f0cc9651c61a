import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class ActivityLog(models.Model):
    """
    Append-only trail of what users did inside a business.

    Rows are written by activity.services.log_activity and never updated.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='activity_logs'
    )
    user = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activity_logs',
        help_text=_("User who performed the action")
    )
    action = models.CharField(
        max_length=50,
        help_text=_("Action performed (e.g., 'CREATE_INGREDIENT', 'UPDATE_PRICE')")
    )
    description = models.TextField(blank=True)
    entity_type = models.CharField(max_length=50, blank=True)
    entity_id = models.CharField(max_length=64, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['tenant', 'action'], name='activity_tenant_action_idx'),
            models.Index(fields=['tenant', 'created_at'], name='activity_tenant_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}: {self.description}"
