from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from .mixins import TenantContextMixin, SerializerOptimizedMixin
from ..pagination import StandardPagination


class TenantScopedViewSet(TenantContextMixin, SerializerOptimizedMixin, viewsets.ModelViewSet):
    """
    Base ViewSet for tenant-owned models.

    Features:
    - Queryset always filtered by the request tenant (via all_objects, never thread-local)
    - Query optimization from serializer Meta
    - Standard pagination, filtering, search and ordering
    - New rows are saved with the request tenant

    Usage:
        class UnitViewSet(TenantScopedViewSet):
            queryset = Unit.all_objects.all()
            serializer_class = UnitSerializer
    """

    pagination_class = StandardPagination

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]

    ordering = ['-id']

    def get_queryset(self):
        """
        Re-evaluate the queryset at request time, scoped to the request tenant.

        The class-level queryset only names the model.
        """
        model = self.queryset.model
        queryset = model.all_objects.filter(tenant=self.get_tenant())
        return self.optimize_queryset(queryset)

    def perform_create(self, serializer):
        serializer.save(tenant=self.get_tenant())


class TenantScopedReadOnlyViewSet(TenantContextMixin, SerializerOptimizedMixin, viewsets.ReadOnlyModelViewSet):
    """Read-only counterpart of TenantScopedViewSet."""

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    ordering = ['-id']

    def get_queryset(self):
        model = self.queryset.model
        queryset = model.all_objects.filter(tenant=self.get_tenant())
        return self.optimize_queryset(queryset)
