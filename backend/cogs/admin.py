"""
Django admin configuration for COGS models.

Cost fields are derived by the services, so they are read-only here.
Price history rows are append-only.
"""
from django.contrib import admin

from tenant.admin import TenantAdminMixin
from cogs.models import (
    ChannelPrice,
    ChannelPriceHistory,
    Ingredient,
    IngredientPriceHistory,
    Recipe,
    RecipeIngredient,
    RecipePriceHistory,
    RecipeSubRecipe,
    SalesChannel,
)


class ReadOnlyHistoryAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['old_price', 'new_price', 'change_type', 'percentage_change', 'change_date']
    list_filter = ['change_type']
    date_hierarchy = 'change_date'
    ordering = ['-change_date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Ingredient)
class IngredientAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'sku', 'purchase_price', 'package_size', 'cost_per_unit', 'category']
    search_fields = ['name', 'sku']
    readonly_fields = ['cost_per_unit', 'created_at', 'updated_at']
    ordering = ['name']

    def get_queryset(self, request):
        return Ingredient.all_objects.select_related('tenant', 'category', 'purchase_unit', 'usage_unit')


class RecipeIngredientInline(admin.TabularInline):
    model = RecipeIngredient
    fk_name = 'recipe'
    extra = 0
    readonly_fields = ['cost']


class RecipeSubRecipeInline(admin.TabularInline):
    model = RecipeSubRecipe
    fk_name = 'recipe'
    extra = 0
    readonly_fields = ['cost']


@admin.register(Recipe)
class RecipeAdmin(TenantAdminMixin, admin.ModelAdmin):
    """
    Lines edited here are not re-costed; use the API or the
    recompute action for that.
    """
    list_display = [
        'name', 'sku', 'cogs_per_serving', 'selling_price', 'profit_margin',
        'can_be_used_as_ingredient', 'is_favorite',
    ]
    list_filter = ['can_be_used_as_ingredient', 'is_favorite']
    search_fields = ['name', 'sku']
    readonly_fields = [
        'total_cogs', 'cogs_per_serving', 'cost_per_unit', 'profit_margin',
        'created_at', 'updated_at',
    ]
    inlines = [RecipeIngredientInline, RecipeSubRecipeInline]
    ordering = ['name']

    fieldsets = (
        (None, {
            'fields': ('tenant', 'name', 'sku', 'category', 'description', 'instructions')
        }),
        ('Yield & Fixed Costs', {
            'fields': ('yield_quantity', 'yield_unit', 'labor_cost', 'operational_cost', 'packaging_cost')
        }),
        ('Derived Costs', {
            'fields': ('total_cogs', 'cogs_per_serving', 'cost_per_unit', 'profit_margin')
        }),
        ('Pricing', {
            'fields': ('selling_price', 'can_be_used_as_ingredient', 'is_favorite')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(SalesChannel)
class SalesChannelAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'commission', 'icon']
    search_fields = ['name']
    ordering = ['name']


@admin.register(ChannelPrice)
class ChannelPriceAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ['recipe', 'channel', 'price', 'commission', 'tax_rate', 'final_price']
    list_filter = ['channel']
    search_fields = ['recipe__name', 'channel__name']
    readonly_fields = ['final_price', 'created_at', 'updated_at']

    def get_queryset(self, request):
        return ChannelPrice.all_objects.select_related('tenant', 'recipe', 'channel')


@admin.register(IngredientPriceHistory)
class IngredientPriceHistoryAdmin(ReadOnlyHistoryAdmin):
    search_fields = ['ingredient__name']

    def get_list_display(self, request):
        return ['tenant', 'ingredient', *self.list_display]


@admin.register(RecipePriceHistory)
class RecipePriceHistoryAdmin(ReadOnlyHistoryAdmin):
    search_fields = ['recipe__name', 'reason']

    def get_list_display(self, request):
        return ['tenant', 'recipe', *self.list_display, 'reason']


@admin.register(ChannelPriceHistory)
class ChannelPriceHistoryAdmin(ReadOnlyHistoryAdmin):
    search_fields = ['channel_price__recipe__name', 'reason']

    def get_list_display(self, request):
        return ['tenant', 'channel_price', *self.list_display, 'reason']
