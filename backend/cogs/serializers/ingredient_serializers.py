"""
Ingredient serializers.
"""
from rest_framework import serializers

from catalog.models import Category, Unit
from core_backend.base import BaseModelSerializer, TenantFilteredSerializerMixin, TimestampedSerializer
from cogs.models import Ingredient, IngredientPriceHistory


class IngredientSerializer(TimestampedSerializer):
    """Serializer for Ingredient - read operations."""
    purchase_unit_name = serializers.CharField(source='purchase_unit.name', read_only=True)
    purchase_unit_symbol = serializers.CharField(source='purchase_unit.symbol', read_only=True)
    usage_unit_name = serializers.CharField(source='usage_unit.name', read_only=True)
    usage_unit_symbol = serializers.CharField(source='usage_unit.symbol', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    category_color = serializers.CharField(source='category.color', read_only=True, default=None)

    class Meta:
        model = Ingredient
        fields = [
            'id', 'name', 'description', 'sku',
            'purchase_price', 'package_size', 'conversion_factor', 'cost_per_unit',
            'purchase_unit', 'purchase_unit_name', 'purchase_unit_symbol',
            'usage_unit', 'usage_unit_name', 'usage_unit_symbol',
            'category', 'category_name', 'category_color',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields
        select_related_fields = ['purchase_unit', 'usage_unit', 'category']


class IngredientWriteSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
    """
    Input for create and update.

    Units and category are narrowed to the request tenant; a foreign id is
    rejected like an unknown one. Cost fields are derived by IngredientService.
    """
    purchase_unit = serializers.PrimaryKeyRelatedField(queryset=Unit.all_objects.all())
    usage_unit = serializers.PrimaryKeyRelatedField(queryset=Unit.all_objects.all())
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.all_objects.all(), allow_null=True, required=False
    )
    sku = serializers.CharField(max_length=50, allow_blank=True, allow_null=True, required=False)

    class Meta:
        model = Ingredient
        fields = [
            'name', 'description', 'sku',
            'purchase_price', 'package_size', 'conversion_factor',
            'purchase_unit', 'usage_unit', 'category',
        ]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_purchase_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Purchase price cannot be negative.")
        return value

    def validate_package_size(self, value):
        if value <= 0:
            raise serializers.ValidationError("Package size must be greater than 0.")
        return value

    def validate_conversion_factor(self, value):
        if value <= 0:
            raise serializers.ValidationError("Conversion factor must be greater than 0.")
        return value


class IngredientPriceUpdateSerializer(serializers.Serializer):
    """Body of POST /ingredients/{id}/price/."""
    new_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    new_package_size = serializers.DecimalField(
        max_digits=14, decimal_places=4, required=False, allow_null=True
    )

    def validate_new_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def validate_new_package_size(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("Package size must be greater than 0.")
        return value


class PriceChangeSerializer(serializers.Serializer):
    """A calculators.PriceChange."""
    old_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    new_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    price_change = serializers.DecimalField(max_digits=18, decimal_places=4)
    percentage_change = serializers.DecimalField(max_digits=18, decimal_places=4)
    change_type = serializers.CharField()


class IngredientPriceHistorySerializer(serializers.ModelSerializer):
    change_type_display = serializers.CharField(source='get_change_type_display', read_only=True)

    class Meta:
        model = IngredientPriceHistory
        fields = [
            'id', 'ingredient',
            'old_price', 'new_price', 'price_change', 'percentage_change',
            'change_type', 'change_type_display', 'change_date',
        ]
        read_only_fields = fields


class BulkIdsSerializer(serializers.Serializer):
    """Body of bulk endpoints that act on a list of ids."""
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
