from django.contrib import admin
from .models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'slug', 'contact_email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    prepopulated_fields = {'slug': ('name',)}

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'name', 'slug')
        }),
        ('Contact', {
            'fields': ('contact_email', 'contact_phone')
        }),
        ('Status', {
            'fields': ('is_active', 'created_at', 'updated_at')
        }),
    )


class TenantAdminMixin:
    """
    Admin mixin for tenant-owned models.

    Admin runs without tenant context, so the default TenantManager would show
    nothing. Uses all_objects and adds the tenant column and filter.
    """

    def get_queryset(self, request):
        return self.model.all_objects.select_related('tenant')

    def get_list_display(self, request):
        return ['tenant', *super().get_list_display(request)]

    def get_list_filter(self, request):
        return ['tenant', *super().get_list_filter(request)]
