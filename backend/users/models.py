from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    class Role(models.TextChoices):
        OWNER = "OWNER", _("Owner")
        ADMIN = "ADMIN", _("Admin")
        MANAGER = "MANAGER", _("Manager")
        STAFF = "STAFF", _("Staff")

    # Multi-tenancy: Each user belongs to a tenant (superusers may have none)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='users',
        null=True,
        blank=True,
        help_text=_("The business this user belongs to")
    )
    role = models.CharField(
        _("role"), max_length=50, choices=Role.choices, default=Role.STAFF
    )
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['tenant', 'role'], name='user_tenant_role_idx'),
        ]

    def __str__(self):
        return self.email or self.username

    @property
    def can_manage_costing(self):
        return self.role in [self.Role.OWNER, self.Role.ADMIN, self.Role.MANAGER]
