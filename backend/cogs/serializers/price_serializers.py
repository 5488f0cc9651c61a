"""
Selling-price serializers - single updates, bulk adjustment and the price manager.
"""
from rest_framework import serializers

from cogs.choices import BulkPriceMode
from cogs.models import Recipe, RecipePriceHistory


class RecipePriceUpdateSerializer(serializers.Serializer):
    """Body of POST /recipes/{id}/price/."""
    new_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate_new_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than 0.")
        return value


class RecipePriceHistorySerializer(serializers.ModelSerializer):
    change_type_display = serializers.CharField(source='get_change_type_display', read_only=True)

    class Meta:
        model = RecipePriceHistory
        fields = [
            'id', 'recipe',
            'old_price', 'new_price', 'price_change', 'percentage_change',
            'change_type', 'change_type_display', 'reason', 'change_date',
        ]
        read_only_fields = fields


class BulkPriceSerializer(serializers.Serializer):
    """
    Body of POST /recipes/bulk-price/.

    The mode is checked by RecipePriceService so that an unknown mode gets
    the same error as from any other caller.
    """
    recipe_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    mode = serializers.CharField(help_text=", ".join(BulkPriceMode.values))
    value = serializers.DecimalField(max_digits=18, decimal_places=4)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class PriceManagerCategorySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    color = serializers.CharField()


class PriceManagerRecipeSerializer(serializers.ModelSerializer):
    """A row of the price manager screen."""
    category = PriceManagerCategorySerializer(read_only=True, allow_null=True)

    class Meta:
        model = Recipe
        fields = [
            'id', 'name', 'sku', 'description',
            'cogs_per_serving', 'selling_price', 'profit_margin',
            'category',
        ]
        read_only_fields = fields
