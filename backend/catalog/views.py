"""
Unit and category views.
"""
from django.db.models import ProtectedError
from django_filters import rest_framework as filters
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from activity.services import log_activity
from cogs.permissions import CanManageCOGS, CanViewCOGS
from core_backend.base import TenantScopedViewSet
from .models import Unit, Category
from .serializers import UnitSerializer, CategorySerializer


class UnitFilter(filters.FilterSet):
    type = filters.CharFilter(field_name='type')

    class Meta:
        model = Unit
        fields = ['type']


class CategoryFilter(filters.FilterSet):
    type = filters.CharFilter(field_name='type')

    class Meta:
        model = Category
        fields = ['type']


class CatalogViewSet(TenantScopedViewSet):
    """
    Shared CRUD behaviour for units and categories.

    Deleting a row that ingredients or recipes still reference is refused.
    """
    permission_classes = [IsAuthenticated, CanViewCOGS]
    pagination_class = None
    ordering = ['name']
    search_fields = ['name']
    entity_label = None

    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), CanManageCOGS()]
        return [IsAuthenticated(), CanViewCOGS()]

    def perform_create(self, serializer):
        instance = serializer.save(tenant=self.get_tenant())
        log_activity(
            self.get_tenant(), f"CREATE_{self.entity_label.upper()}",
            f"Added {self.entity_label} \"{instance}\"",
            user=self.request.user, entity_type=self.entity_label, entity_id=instance.pk,
        )

    def perform_update(self, serializer):
        instance = serializer.save()
        log_activity(
            self.get_tenant(), f"UPDATE_{self.entity_label.upper()}",
            f"Updated {self.entity_label} \"{instance}\"",
            user=self.request.user, entity_type=self.entity_label, entity_id=instance.pk,
        )

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        label = str(instance)
        pk = instance.pk
        try:
            instance.delete()
        except ProtectedError:
            return Response(
                {'error': f'Cannot delete {self.entity_label} that is in use'},
                status=status.HTTP_400_BAD_REQUEST
            )
        log_activity(
            self.get_tenant(), f"DELETE_{self.entity_label.upper()}",
            f"Deleted {self.entity_label} \"{label}\"",
            user=request.user, entity_type=self.entity_label, entity_id=pk,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class UnitViewSet(CatalogViewSet):
    """
    list: Units of the current business, ?type=purchase|usage.
    create/update/destroy: manager+.
    """
    queryset = Unit.all_objects.all()
    serializer_class = UnitSerializer
    filterset_class = UnitFilter
    search_fields = ['name', 'symbol']
    entity_label = 'unit'


class CategoryViewSet(CatalogViewSet):
    """
    list: Categories of the current business, ?type=ingredient|recipe.
    create/update/destroy: manager+.
    """
    queryset = Category.all_objects.all()
    serializer_class = CategorySerializer
    filterset_class = CategoryFilter
    entity_label = 'category'
