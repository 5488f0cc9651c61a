"""
Sales channel and channel price serializers.
"""
from rest_framework import serializers

from core_backend.base import TimestampedSerializer
from cogs.choices import ChannelPricingMethod, RoundingOption
from cogs.models import ChannelPrice, ChannelPriceHistory, SalesChannel


class SalesChannelSerializer(TimestampedSerializer):
    class Meta:
        model = SalesChannel
        fields = ['id', 'name', 'commission', 'icon', 'created_at', 'updated_at']
        read_only_fields = ['id']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value


class ChannelPriceSerializer(TimestampedSerializer):
    """Serializer for a stored ChannelPrice - read operations."""
    channel_name = serializers.CharField(source='channel.name', read_only=True)
    net_price = serializers.DecimalField(max_digits=18, decimal_places=4, read_only=True)

    class Meta:
        model = ChannelPrice
        fields = [
            'id', 'recipe',
            'channel', 'channel_name',
            'price', 'commission', 'tax_rate', 'final_price', 'net_price',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ChannelPriceEntrySerializer(serializers.Serializer):
    """
    One channel of GET /recipes/{id}/channel-prices/.

    Channels without a stored price show the defaults.
    """
    channel_id = serializers.IntegerField()
    channel_name = serializers.CharField()
    channel_commission = serializers.DecimalField(max_digits=7, decimal_places=4)
    channel_price_id = serializers.IntegerField(allow_null=True)
    price = serializers.DecimalField(max_digits=18, decimal_places=4)
    commission = serializers.DecimalField(max_digits=7, decimal_places=4)
    tax_rate = serializers.DecimalField(max_digits=7, decimal_places=4)
    final_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    net_margin = serializers.DecimalField(max_digits=18, decimal_places=4, allow_null=True)


class ChannelPriceInputSerializer(serializers.Serializer):
    channel_id = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=18, decimal_places=4)
    commission = serializers.DecimalField(max_digits=7, decimal_places=4, required=False, allow_null=True)
    tax_rate = serializers.DecimalField(max_digits=7, decimal_places=4, required=False, allow_null=True)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value


class ChannelPricesSaveSerializer(serializers.Serializer):
    """Body of POST /recipes/{id}/channel-prices/."""
    channel_prices = ChannelPriceInputSerializer(many=True)


class ChannelPriceHistorySerializer(serializers.ModelSerializer):
    channel_id = serializers.IntegerField(source='channel_price.channel_id', read_only=True)
    channel_name = serializers.CharField(source='channel_price.channel.name', read_only=True)
    change_type_display = serializers.CharField(source='get_change_type_display', read_only=True)

    class Meta:
        model = ChannelPriceHistory
        fields = [
            'id', 'channel_price', 'channel_id', 'channel_name',
            'old_price', 'new_price', 'price_change', 'percentage_change',
            'change_type', 'change_type_display', 'reason', 'change_date',
        ]
        read_only_fields = fields


class BulkChannelPriceSerializer(serializers.Serializer):
    """
    Body of POST /recipes/bulk-channel-price/ and its preview.

    With `prices` the pre-computed entries of a reviewed preview are applied
    as they are; otherwise every channel is repriced by `method`.
    """
    recipe_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    method = serializers.ChoiceField(choices=ChannelPricingMethod.choices, default=ChannelPricingMethod.MARKUP)
    markup_percentage = serializers.DecimalField(
        max_digits=10, decimal_places=4, required=False, allow_null=True
    )
    target_profit_amount = serializers.DecimalField(
        max_digits=18, decimal_places=4, required=False, allow_null=True
    )
    rounding_option = serializers.ChoiceField(choices=RoundingOption.choices, default=RoundingOption.NONE)
    custom_rounding = serializers.DecimalField(
        max_digits=18, decimal_places=4, required=False, allow_null=True
    )
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    prices = serializers.ListField(child=serializers.DictField(), required=False)

    def validate(self, attrs):
        if attrs.get('prices'):
            return attrs
        method = attrs.get('method')
        if method == ChannelPricingMethod.MARKUP and attrs.get('markup_percentage') is None:
            raise serializers.ValidationError({'markup_percentage': "Required for markup pricing."})
        if method == ChannelPricingMethod.PROFIT and attrs.get('target_profit_amount') is None:
            raise serializers.ValidationError({'target_profit_amount': "Required for profit pricing."})
        if attrs.get('rounding_option') == RoundingOption.CUSTOM:
            custom = attrs.get('custom_rounding')
            if custom is None or custom <= 0:
                raise serializers.ValidationError({'custom_rounding': "Must be greater than 0."})
        return attrs


class BulkChannelPricePreviewItemSerializer(serializers.Serializer):
    recipe_id = serializers.IntegerField()
    recipe_name = serializers.CharField()
    channel_id = serializers.IntegerField()
    channel_name = serializers.CharField()
    current_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    new_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    price_change = serializers.DecimalField(max_digits=18, decimal_places=4)
    percentage_change = serializers.DecimalField(max_digits=18, decimal_places=4)
    change_type = serializers.CharField()
    net_margin = serializers.DecimalField(max_digits=18, decimal_places=4, allow_null=True)
