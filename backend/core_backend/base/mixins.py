from rest_framework.exceptions import PermissionDenied

from tenant.managers import set_current_tenant


class TenantContextMixin:
    """
    View mixin that binds the request tenant once DRF has authenticated the user.

    TenantMiddleware only sees session users. Users authenticated by DRF itself
    (HTTP Basic) become known in perform_authentication, so the tenant is
    re-bound here from request.user before permissions run.
    """

    def perform_authentication(self, request):
        super().perform_authentication(request)
        user = request.user
        if user and user.is_authenticated and getattr(user, 'tenant_id', None):
            request.tenant = user.tenant
            request._request.tenant = user.tenant
            set_current_tenant(user.tenant)

    def get_tenant(self):
        tenant = getattr(self.request, 'tenant', None)
        if tenant is None:
            raise PermissionDenied("No business is associated with this request.")
        return tenant


class SerializerOptimizedMixin:
    """
    Applies `select_related_fields` / `prefetch_related_fields` declared on the
    serializer's Meta to the view queryset.
    """

    def optimize_queryset(self, queryset):
        serializer_class = self.get_serializer_class()
        meta = getattr(serializer_class, 'Meta', None)
        if meta is None:
            return queryset

        select_related = getattr(meta, 'select_related_fields', None)
        if select_related:
            queryset = queryset.select_related(*select_related)

        prefetch_related = getattr(meta, 'prefetch_related_fields', None)
        if prefetch_related:
            queryset = queryset.prefetch_related(*prefetch_related)

        return queryset
