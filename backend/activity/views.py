"""
Activity log views (read-only).
"""
from django_filters import rest_framework as filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import TenantScopedReadOnlyViewSet
from .models import ActivityLog
from .serializers import ActivityLogSerializer


class ActivityLogFilter(filters.FilterSet):
    action = filters.CharFilter(field_name='action')
    entity_type = filters.CharFilter(field_name='entity_type')
    created_after = filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = ActivityLog
        fields = ['action', 'entity_type']


class ActivityLogViewSet(TenantScopedReadOnlyViewSet):
    """
    list: Activity for the current business, newest first. ?search= matches the description.
    actions: Distinct action names, for filter dropdowns.
    """
    queryset = ActivityLog.all_objects.all()
    serializer_class = ActivityLogSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = ActivityLogFilter
    search_fields = ['description']
    ordering = ['-created_at']

    @action(detail=False, methods=['get'])
    def actions(self, request):
        names = (
            ActivityLog.all_objects.filter(tenant=self.get_tenant())
            .order_by('action')
            .values_list('action', flat=True)
            .distinct()
        )
        return Response(list(names))
