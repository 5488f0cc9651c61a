"""
Price manager and sales channel views.
"""
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import TenantContextMixin, TenantScopedViewSet
from cogs.exceptions import ValidationError
from cogs.models import SalesChannel
from cogs.permissions import CanManageCOGS, CanViewCOGS
from cogs.serializers import PriceManagerRecipeSerializer, SalesChannelSerializer
from cogs.services import PRICE_CSV_HEADERS, ChannelPriceService, RecipePriceService
from cogs.services.csv_io import parse_csv, render_csv, rows_as_dicts
from cogs.services.price_service import PRICE_CSV_TEMPLATE_ROWS
from .mixins import COGSExceptionMixin, csv_response, uploaded_csv


class PriceManagerViewSet(COGSExceptionMixin, TenantContextMixin, viewsets.ViewSet):
    """
    Selling prices of all recipes in one table.

    list: Recipes with COGS, price and margin (?search=).
    import: Apply the 'Harga Jual Baru' column of an edited export (manager+).
    export: The table as CSV, new price and reason left blank (?search=).
    template: A sample CSV.
    """

    def get_permissions(self):
        if self.action == 'import_csv':
            return [IsAuthenticated(), CanManageCOGS()]
        return [IsAuthenticated(), CanViewCOGS()]

    def get_service(self):
        return RecipePriceService(self.get_tenant(), user=self.request.user)

    def list(self, request):
        recipes = self.get_service().price_manager_rows(request.query_params.get('search'))
        return Response(PriceManagerRecipeSerializer(recipes, many=True).data)

    @action(detail=False, methods=['post'], url_path='import')
    def import_csv(self, request):
        rows = parse_csv(uploaded_csv(request))
        try:
            rows = rows_as_dicts(rows, PRICE_CSV_HEADERS)
        except ValidationError:
            raise ValidationError("Invalid CSV format. Please use the provided template.", field='file') from None
        result = self.get_service().import_price_rows(rows)
        return Response({'success': True, **result})

    @action(detail=False, methods=['get'])
    def export(self, request):
        service = self.get_service()
        content = render_csv(PRICE_CSV_HEADERS, service.export_price_rows(request.query_params.get('search')))
        filename = f"recipe-prices-{timezone.localdate().isoformat()}.csv"
        return csv_response(content, filename)

    @action(detail=False, methods=['get'])
    def template(self, request):
        return csv_response(render_csv(PRICE_CSV_HEADERS, PRICE_CSV_TEMPLATE_ROWS), 'recipe-price-template.csv')


class SalesChannelViewSet(COGSExceptionMixin, TenantScopedViewSet):
    """
    list: Sales channels of the business, by name.
    create/update/destroy: manager+. Deleting a channel deletes its prices.
    """
    queryset = SalesChannel.all_objects.all()
    serializer_class = SalesChannelSerializer
    pagination_class = None
    search_fields = ['name']
    ordering = ['name']

    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            return [IsAuthenticated(), CanManageCOGS()]
        return [IsAuthenticated(), CanViewCOGS()]

    def get_service(self):
        return ChannelPriceService(self.get_tenant(), user=self.request.user)

    def perform_create(self, serializer):
        serializer.instance = self.get_service().create_channel(serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = self.get_service().update_channel(
            serializer.instance.pk, serializer.validated_data
        )

    def destroy(self, request, *args, **kwargs):
        self.get_service().delete_channel(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)
