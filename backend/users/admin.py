from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        "username",
        "email",
        "tenant",
        "role",
        "is_staff",
        "is_active",
    )
    list_filter = ("tenant", "role", "is_staff", "is_active")
    search_fields = ("username", "email", "first_name", "last_name", "tenant__name")
    ordering = ("tenant__name", "username")

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Business", {"fields": ("tenant", "role")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Business", {"fields": ("tenant", "role")}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("tenant")
