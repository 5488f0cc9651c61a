"""
SKU and decimal settings views.

Both settings objects are per-business singletons: GET creates the defaults on
first access, PUT/PATCH update them.
"""
import logging
from decimal import Decimal

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from activity.services import log_activity
from cogs.permissions import CanManageCOGS, CanViewCOGS
from core_backend.base import TenantContextMixin
from .formatting import format_price
from .serializers import (
    SkuSettingsSerializer,
    DecimalSettingsSerializer,
    FormatPreviewSerializer,
)
from .services import SettingsService

logger = logging.getLogger(__name__)


class SingletonSettingsView(TenantContextMixin, APIView):
    serializer_class = None
    activity_action = None

    def get_permissions(self):
        if self.request.method in ('PUT', 'PATCH'):
            return [IsAuthenticated(), CanManageCOGS()]
        return [IsAuthenticated(), CanViewCOGS()]

    def get_object(self):
        raise NotImplementedError

    def save(self, validated_data):
        raise NotImplementedError

    def get(self, request):
        return Response(self.serializer_class(self.get_object()).data)

    def put(self, request):
        return self._update(request, partial=False)

    def patch(self, request):
        return self._update(request, partial=True)

    def _update(self, request, partial):
        instance = self.get_object()
        serializer = self.serializer_class(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        instance = self.save(serializer.validated_data)
        log_activity(
            self.get_tenant(), self.activity_action, "Settings updated",
            user=request.user, entity_type="settings",
        )
        return Response(self.serializer_class(instance).data)


class SkuSettingsView(SingletonSettingsView):
    serializer_class = SkuSettingsSerializer
    activity_action = "UPDATE_SKU_SETTINGS"

    def get_object(self):
        return SettingsService.get_sku_settings(self.get_tenant())

    def save(self, validated_data):
        return SettingsService.update_sku_settings(self.get_tenant(), validated_data)


class DecimalSettingsView(SingletonSettingsView):
    serializer_class = DecimalSettingsSerializer
    activity_action = "UPDATE_DECIMAL_SETTINGS"

    def get_object(self):
        return SettingsService.get_decimal_settings(self.get_tenant())

    def save(self, validated_data):
        return SettingsService.update_decimal_settings(self.get_tenant(), validated_data)


class DecimalFormatPreviewView(TenantContextMixin, APIView):
    """
    GET: Sample amounts formatted with the business's current settings.
    POST: Format one amount ({amount, show_currency?, show_separators?}).
    """
    permission_classes = [IsAuthenticated, CanViewCOGS]

    SAMPLES = (Decimal("0"), Decimal("1234.5"), Decimal("1234567.891"), Decimal("-9876.54321"))

    def get(self, request):
        settings = SettingsService.get_decimal_settings(self.get_tenant())
        return Response({
            'samples': [
                {'amount': str(amount), 'formatted': format_price(amount, settings)}
                for amount in self.SAMPLES
            ]
        })

    def post(self, request):
        serializer = FormatPreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        settings = SettingsService.get_decimal_settings(self.get_tenant())
        data = serializer.validated_data
        return Response({
            'amount': str(data['amount']),
            'formatted': format_price(
                data['amount'],
                settings,
                show_currency=data['show_currency'],
                show_separators=data['show_separators'],
            ),
        })
