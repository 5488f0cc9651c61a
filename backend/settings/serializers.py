from rest_framework import serializers

from .models import SkuSettings, DecimalSettings, RoundingMethod, CurrencyPosition


class SkuSettingsSerializer(serializers.ModelSerializer):
    ingredient_prefix = serializers.CharField(max_length=10)
    recipe_prefix = serializers.CharField(max_length=10)
    number_padding = serializers.IntegerField(
        min_value=1, max_value=6, required=False,
        error_messages={
            'min_value': 'Invalid number_padding: must be between 1 and 6',
            'max_value': 'Invalid number_padding: must be between 1 and 6',
        }
    )
    separator = serializers.CharField(max_length=3, allow_blank=True, required=False, default='-')
    next_ingredient_number = serializers.IntegerField(
        min_value=1, required=False, error_messages={'min_value': 'Must be greater than 0'}
    )
    next_recipe_number = serializers.IntegerField(
        min_value=1, required=False, error_messages={'min_value': 'Must be greater than 0'}
    )
    next_ingredient_sku = serializers.SerializerMethodField()
    next_recipe_sku = serializers.SerializerMethodField()

    class Meta:
        model = SkuSettings
        fields = [
            'ingredient_prefix',
            'recipe_prefix',
            'number_padding',
            'separator',
            'next_ingredient_number',
            'next_recipe_number',
            'next_ingredient_sku',
            'next_recipe_sku',
            'updated_at',
        ]
        read_only_fields = ['updated_at']

    def _preview(self, obj, prefix, number):
        from .services import SkuService
        return SkuService.format_sku(prefix, obj.separator, number, obj.number_padding)

    def get_next_ingredient_sku(self, obj):
        return self._preview(obj, obj.ingredient_prefix, obj.next_ingredient_number)

    def get_next_recipe_sku(self, obj):
        return self._preview(obj, obj.recipe_prefix, obj.next_recipe_number)


class DecimalSettingsSerializer(serializers.ModelSerializer):
    decimal_places = serializers.IntegerField(
        min_value=0, max_value=10,
        error_messages={
            'min_value': 'Invalid decimal_places: must be between 0 and 10',
            'max_value': 'Invalid decimal_places: must be between 0 and 10',
        }
    )
    rounding_method = serializers.ChoiceField(
        choices=RoundingMethod.choices,
        error_messages={'invalid_choice': 'Invalid rounding_method: must be round, floor, or ceil'}
    )
    currency_position = serializers.ChoiceField(
        choices=CurrencyPosition.choices, required=False, default=CurrencyPosition.BEFORE
    )

    class Meta:
        model = DecimalSettings
        fields = [
            'decimal_places',
            'rounding_method',
            'thousand_separator',
            'decimal_separator',
            'currency_symbol',
            'currency_position',
            'show_trailing_zeros',
            'updated_at',
        ]
        read_only_fields = ['updated_at']

    def validate(self, attrs):
        thousand = attrs.get('thousand_separator', getattr(self.instance, 'thousand_separator', ','))
        decimal = attrs.get('decimal_separator', getattr(self.instance, 'decimal_separator', '.'))
        if thousand and thousand == decimal:
            raise serializers.ValidationError(
                "Thousand and decimal separators must differ."
            )
        return attrs


class FormatPreviewSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=24, decimal_places=10)
    show_currency = serializers.BooleanField(default=True)
    show_separators = serializers.BooleanField(default=True)
