"""
Ingredient views.
"""
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters import rest_framework as filters

from core_backend.base import TenantScopedViewSet
from cogs.models import Ingredient
from cogs.permissions import CanManageCOGS, CanViewCOGS
from cogs.serializers import (
    BulkIdsSerializer,
    IngredientPriceHistorySerializer,
    IngredientPriceUpdateSerializer,
    IngredientSerializer,
    IngredientWriteSerializer,
    PriceChangeSerializer,
)
from cogs.services import INGREDIENT_CSV_HEADERS, IngredientService
from cogs.services.csv_io import parse_csv, render_csv, rows_as_dicts
from .mixins import COGSExceptionMixin, csv_response, uploaded_csv

INGREDIENT_CSV_TEMPLATE_ROWS = [
    ['Tepung Terigu', 'Tepung protein sedang', 'Bahan Kering', '15000', '1',
     'Kilogram', 'kg', 'Gram', 'g', '1000'],
    ['Susu Cair', 'Susu UHT full cream', 'Bahan Basah', '18000', '1',
     'Liter', 'L', 'Mililiter', 'ml', '1000'],
]


class IngredientFilter(filters.FilterSet):
    """Filter for Ingredient."""
    category = filters.NumberFilter(field_name='category_id')
    purchase_unit = filters.NumberFilter(field_name='purchase_unit_id')
    usage_unit = filters.NumberFilter(field_name='usage_unit_id')

    class Meta:
        model = Ingredient
        fields = ['category', 'purchase_unit', 'usage_unit']


class IngredientViewSet(COGSExceptionMixin, TenantScopedViewSet):
    """
    ViewSet for managing Ingredients.

    list: Ingredients of the business (?search=, ?category=, ?ordering=).
    retrieve: One ingredient.
    create/update/destroy: manager+. cost_per_unit is always derived.
    price: GET the ingredient with its recent price history, POST a new price.
    price-history: Recent price changes (?limit=).
    import/export/template: CSV round trip.
    bulk-delete: Delete several unused ingredients.
    """
    queryset = Ingredient.all_objects.all()
    serializer_class = IngredientSerializer
    filterset_class = IngredientFilter
    search_fields = ['name', 'sku', 'description', 'category__name']
    ordering_fields = ['name', 'purchase_price', 'cost_per_unit', 'created_at', 'updated_at']
    ordering = ['name']

    READ_ACTIONS = ['list', 'retrieve', 'price_history', 'export', 'template']

    def get_permissions(self):
        if self.action in self.READ_ACTIONS or (self.action == 'price' and self.request.method == 'GET'):
            return [IsAuthenticated(), CanViewCOGS()]
        return [IsAuthenticated(), CanManageCOGS()]

    def get_service(self):
        return IngredientService(self.get_tenant(), user=self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = IngredientWriteSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        ingredient = self.get_service().create_ingredient(serializer.validated_data)
        return Response(IngredientSerializer(ingredient).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        service = self.get_service()
        instance = service.get_ingredient(kwargs['pk'])
        serializer = IngredientWriteSerializer(
            instance, data=request.data, partial=partial, context=self.get_serializer_context()
        )
        serializer.is_valid(raise_exception=True)
        ingredient = service.update_ingredient(instance.pk, serializer.validated_data)
        return Response(IngredientSerializer(ingredient).data)

    def destroy(self, request, *args, **kwargs):
        self.get_service().delete_ingredient(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get', 'post'])
    def price(self, request, pk=None):
        """
        GET: the ingredient and its latest price changes.
        POST: {"new_price": "16000", "new_package_size": "1"}
        """
        service = self.get_service()
        if request.method == 'GET':
            ingredient, history = service.get_price_history(pk)
            return Response({
                'ingredient': IngredientSerializer(ingredient).data,
                'price_history': IngredientPriceHistorySerializer(history, many=True).data,
            })

        serializer = IngredientPriceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ingredient, change = service.update_price(
            pk,
            serializer.validated_data['new_price'],
            serializer.validated_data.get('new_package_size'),
        )
        return Response({
            'success': True,
            'ingredient': IngredientSerializer(ingredient).data,
            'price_change': PriceChangeSerializer(change).data,
        })

    @action(detail=True, methods=['get'], url_path='price-history')
    def price_history(self, request, pk=None):
        _, history = self.get_service().get_price_history(pk, request.query_params.get('limit'))
        return Response(IngredientPriceHistorySerializer(history, many=True).data)

    @action(detail=False, methods=['post'], url_path='import')
    def import_csv(self, request):
        """
        Upload a CSV (multipart `file`) with the export headers.

        Ingredients are matched by name; units and categories are created
        when missing.
        """
        rows = rows_as_dicts(parse_csv(uploaded_csv(request)), INGREDIENT_CSV_HEADERS, lowercase=True)
        result = self.get_service().import_rows(rows)
        return Response({'success': True, **result})

    @action(detail=False, methods=['get'])
    def export(self, request):
        content = render_csv(INGREDIENT_CSV_HEADERS, self.get_service().export_rows())
        return csv_response(content, 'ingredients-export.csv')

    @action(detail=False, methods=['get'])
    def template(self, request):
        content = render_csv(INGREDIENT_CSV_HEADERS, INGREDIENT_CSV_TEMPLATE_ROWS)
        return csv_response(content, 'ingredients-template.csv')

    @action(detail=False, methods=['post'], url_path='bulk-delete')
    def bulk_delete(self, request):
        serializer = BulkIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_service().bulk_delete(serializer.validated_data['ids'])
        return Response({'success': True, **result})
