import logging

from django.conf import settings
from django.http import JsonResponse

from .models import Tenant
from .managers import set_current_tenant

logger = logging.getLogger(__name__)


class TenantNotFoundError(Exception):
    """Raised when tenant cannot be resolved from request."""
    pass


class TenantMiddleware:
    """
    Resolves tenant from request and attaches to request.tenant.

    Resolution precedence (highest to lowest):
    1. Authenticated user's tenant - session login
    2. X-Tenant header - API clients that name the business explicitly
    3. Development fallback - DEFAULT_TENANT_SLUG on local hosts
    4. No tenant - request.tenant is None and the API permission layer rejects it

    Requests authenticated with HTTP Basic are only known to DRF, so the API
    views re-bind the tenant from request.user after authentication.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Skip tenant resolution for Django admin URLs
        # Admin operates without tenant context (staff can manage multiple tenants)
        if request.path.startswith('/admin/'):
            request.tenant = None
            set_current_tenant(None)
            return self.get_response(request)

        try:
            tenant = self.get_tenant_from_request(request)
            request.tenant = tenant

            # CRITICAL: Set thread-local context for TenantManager
            set_current_tenant(tenant)

            if tenant and not tenant.is_active:
                return JsonResponse({
                    'error': 'Tenant account is inactive',
                    'code': 'TENANT_INACTIVE'
                }, status=403)

            return self.get_response(request)

        except TenantNotFoundError as e:
            return JsonResponse({
                'error': str(e),
                'code': 'TENANT_NOT_FOUND'
            }, status=400)

        finally:
            # CRITICAL: Always clean up thread-local context
            # Even if view raises exception, prevent tenant leakage to next request
            set_current_tenant(None)

    def get_tenant_from_request(self, request):
        # 1. Authenticated user (session)
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated and getattr(user, 'tenant_id', None):
            return user.tenant

        # 2. X-Tenant header
        tenant_header = request.META.get('HTTP_X_TENANT')
        if tenant_header:
            try:
                return Tenant.objects.get(slug=tenant_header)
            except Tenant.DoesNotExist:
                logger.warning(f"X-Tenant header names unknown tenant '{tenant_header}'")
                raise TenantNotFoundError(
                    f"Tenant '{tenant_header}' not found. Check X-Tenant header value."
                )

        # 3. Development fallback
        host = request.get_host().split(':')[0]
        tenant_slug = self.get_fallback_tenant_slug(host)
        if tenant_slug:
            return Tenant.objects.filter(slug=tenant_slug).first()

        return None

    def get_fallback_tenant_slug(self, host):
        """
        Get fallback tenant slug for development hosts only.

        Returns:
            str: Tenant slug to use, or None to fail closed
        """
        if settings.DEBUG and host in ['localhost', '127.0.0.1', 'testserver']:
            return getattr(settings, 'DEFAULT_TENANT_SLUG', None)
        return None
