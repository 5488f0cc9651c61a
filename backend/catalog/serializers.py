from rest_framework import serializers

from core_backend.base import TimestampedSerializer
from .models import Unit, Category


class TenantUniqueMixin:
    """
    Rejects a row that would duplicate another row of the same business.

    The tenant is not a serializer field, so the model's unique constraint
    cannot be validated by DRF on its own.
    """
    unique_fields = ()

    def validate(self, attrs):
        attrs = super().validate(attrs)
        request = self.context.get('request')
        tenant = getattr(request, 'tenant', None)
        if tenant is None:
            return attrs

        lookup = {
            name: attrs.get(name, getattr(self.instance, name, None))
            for name in self.unique_fields
        }
        duplicates = self.Meta.model.all_objects.filter(tenant=tenant, **lookup)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError(
                f"A {self.Meta.model._meta.verbose_name.lower()} with this name already exists."
            )
        return attrs


class UnitSerializer(TenantUniqueMixin, TimestampedSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    unique_fields = ('name', 'symbol', 'type')

    class Meta:
        model = Unit
        fields = ['id', 'name', 'symbol', 'type', 'type_display', 'created_at', 'updated_at']
        read_only_fields = ['id']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_symbol(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Symbol is required.")
        return value


class CategorySerializer(TenantUniqueMixin, TimestampedSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    unique_fields = ('name', 'type')

    class Meta:
        model = Category
        fields = ['id', 'name', 'type', 'type_display', 'color', 'created_at', 'updated_at']
        read_only_fields = ['id']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_color(self, value):
        if not value.startswith('#') or len(value) not in (4, 7):
            raise serializers.ValidationError("Color must be a hex value such as #6B7280.")
        return value
