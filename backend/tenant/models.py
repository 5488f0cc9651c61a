import uuid
from django.db import models


class Tenant(models.Model):
    """
    Root entity for multi-tenancy.
    Each business (restaurant, bakery, catering kitchen) is a tenant.

    Every ingredient, recipe, channel and setting row belongs to exactly one tenant.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        help_text="Display name for the business (e.g., Warung Bu Sri)"
    )
    slug = models.SlugField(
        unique=True,
        help_text="URL-safe identifier, also accepted in the X-Tenant header"
    )

    # Business details
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)

    # Status
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive tenants cannot access the system"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='tenant_is_active_idx'),
        ]

    def __str__(self):
        return self.name
