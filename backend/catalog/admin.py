from django.contrib import admin

from tenant.admin import TenantAdminMixin
from .models import Unit, Category


@admin.register(Unit)
class UnitAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'symbol', 'type']
    list_filter = ['type']
    search_fields = ['name', 'symbol']
    ordering = ['type', 'name']


@admin.register(Category)
class CategoryAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'type', 'color']
    list_filter = ['type']
    search_fields = ['name']
    ordering = ['type', 'name']
