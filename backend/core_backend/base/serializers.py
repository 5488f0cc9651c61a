import logging

from rest_framework import serializers

logger = logging.getLogger(__name__)


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer that provides common functionality.

    Meta may declare `select_related_fields` / `prefetch_related_fields`;
    TenantScopedViewSet applies them to its queryset.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []


class TenantFilteredSerializerMixin:
    """
    Automatically filters all FK querysets by the request tenant.

    Usage:
        class IngredientWriteSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
            category = serializers.PrimaryKeyRelatedField(
                queryset=Category.all_objects.all(),  # Mixin narrows to request.tenant
                allow_null=True,
            )

    A primary key belonging to another tenant is then rejected by the field
    itself with the normal "Invalid pk" error.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')

        if not request:
            if getattr(self, 'instance', None) is None:
                logger.warning(
                    f"{self.__class__.__name__}: No request in context for write operation. "
                    f"Tenant validation will be skipped."
                )
            return

        tenant = getattr(request, 'tenant', None)
        if tenant is None:
            raise serializers.ValidationError(
                "Tenant context is required for this operation."
            )
        self._filter_all_querysets_by_tenant(tenant)

    def _filter_all_querysets_by_tenant(self, tenant):
        """Iterate through all fields and filter querysets by tenant"""
        for field in self.fields.values():
            if hasattr(field, 'child_relation') and getattr(field.child_relation, 'queryset', None) is not None:
                model = field.child_relation.queryset.model
                if hasattr(model, 'all_objects') and hasattr(model, 'tenant'):
                    field.child_relation.queryset = model.all_objects.filter(tenant=tenant)

            elif getattr(field, 'queryset', None) is not None:
                model = field.queryset.model
                if hasattr(model, 'all_objects') and hasattr(model, 'tenant'):
                    field.queryset = model.all_objects.filter(tenant=tenant)


class TimestampedSerializer(BaseModelSerializer):
    """
    Base serializer for models with created_at/updated_at fields.
    """

    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)
