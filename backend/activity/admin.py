from django.contrib import admin

from tenant.admin import TenantAdminMixin
from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['action', 'description', 'user', 'created_at']
    list_filter = ['action']
    search_fields = ['description', 'action', 'entity_id']
    readonly_fields = [f.name for f in ActivityLog._meta.fields]

    def has_add_permission(self, request):
        return False
