from django.contrib import admin

from tenant.admin import TenantAdminMixin
from .models import SkuSettings, DecimalSettings


@admin.register(SkuSettings)
class SkuSettingsAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = [
        'ingredient_prefix', 'recipe_prefix', 'number_padding', 'separator',
        'next_ingredient_number', 'next_recipe_number',
    ]


@admin.register(DecimalSettings)
class DecimalSettingsAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = [
        'decimal_places', 'rounding_method', 'thousand_separator', 'decimal_separator',
        'currency_symbol', 'currency_position', 'show_trailing_zeros',
    ]
