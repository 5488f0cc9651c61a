"""
Recipe views - CRUD, costing, selling and channel prices, bulk actions.
"""
import logging

from django_filters import rest_framework as filters
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core_backend.base import TenantScopedViewSet
from cogs.models import Recipe
from cogs.permissions import CanManageCOGS, CanViewCOGS
from cogs.serializers import (
    BulkBasicRecipeSerializer,
    BulkCategorySerializer,
    BulkChannelPricePreviewItemSerializer,
    BulkChannelPriceSerializer,
    BulkFavoriteSerializer,
    BulkPriceSerializer,
    BulkRecipeIdsSerializer,
    ChannelPriceEntrySerializer,
    ChannelPriceHistorySerializer,
    ChannelPriceSerializer,
    ChannelPricesSaveSerializer,
    PriceChangeSerializer,
    RecipeCostBreakdownSerializer,
    RecipeDetailSerializer,
    RecipeListSerializer,
    RecipePriceHistorySerializer,
    RecipePriceUpdateSerializer,
    RecipeWriteSerializer,
)
from cogs.services import ChannelPriceService, RecipeCostingService, RecipePriceService
from .mixins import COGSExceptionMixin

logger = logging.getLogger(__name__)


class RecipeFilter(filters.FilterSet):
    """Filter for Recipe."""
    category = filters.NumberFilter(field_name='category_id')
    is_favorite = filters.BooleanFilter(field_name='is_favorite')
    can_be_used_as_ingredient = filters.BooleanFilter(field_name='can_be_used_as_ingredient')

    class Meta:
        model = Recipe
        fields = ['category', 'is_favorite', 'can_be_used_as_ingredient']


class RecipeViewSet(COGSExceptionMixin, TenantScopedViewSet):
    """
    ViewSet for managing Recipes.

    list: Recipes of the business (?search=, ?category=, ?is_favorite=,
          ?can_be_used_as_ingredient=, ?ordering=).
    retrieve: One recipe with its lines.
    create/update/destroy: manager+. Costs are always derived from the lines.
    """
    queryset = Recipe.all_objects.all()
    serializer_class = RecipeDetailSerializer
    filterset_class = RecipeFilter
    search_fields = ['name', 'sku', 'description', 'category__name']
    ordering_fields = [
        'name', 'created_at', 'updated_at',
        'cogs_per_serving', 'selling_price', 'profit_margin',
    ]
    ordering = ['name']

    READ_ACTIONS = [
        'list', 'retrieve', 'price_history', 'channel_price_history',
        'cost_breakdown', 'bulk_channel_price_preview',
    ]

    def get_serializer_class(self):
        if self.action == 'list':
            return RecipeListSerializer
        return RecipeDetailSerializer

    def get_permissions(self):
        if self.action in self.READ_ACTIONS:
            return [IsAuthenticated(), CanViewCOGS()]
        if self.action == 'channel_prices' and self.request.method == 'GET':
            return [IsAuthenticated(), CanViewCOGS()]
        return [IsAuthenticated(), CanManageCOGS()]

    def get_costing_service(self):
        return RecipeCostingService(self.get_tenant(), user=self.request.user)

    def get_price_service(self):
        return RecipePriceService(self.get_tenant(), user=self.request.user)

    def get_channel_service(self):
        return ChannelPriceService(self.get_tenant(), user=self.request.user)

    def _detail(self, recipe):
        recipe = self.get_costing_service().get_recipe(recipe.pk)
        return RecipeDetailSerializer(recipe).data

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, request, *args, **kwargs):
        serializer = RecipeWriteSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        recipe = self.get_costing_service().create_recipe(serializer.validated_data)
        return Response(self._detail(recipe), status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = RecipeWriteSerializer(
            data=request.data, partial=partial, context=self.get_serializer_context()
        )
        serializer.is_valid(raise_exception=True)
        recipe = self.get_costing_service().update_recipe(kwargs['pk'], serializer.validated_data)
        return Response(self._detail(recipe))

    def destroy(self, request, *args, **kwargs):
        self.get_costing_service().delete_recipe(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Costing
    # ------------------------------------------------------------------

    @action(detail=True, methods=['get'], url_path='cost-breakdown')
    def cost_breakdown(self, request, pk=None):
        breakdown = self.get_costing_service().get_cost_breakdown(pk)
        return Response(RecipeCostBreakdownSerializer(breakdown).data)

    @action(detail=True, methods=['post'])
    def recompute(self, request, pk=None):
        """
        Re-price the stored lines of a recipe.

        With {"include_dependents": true} every recipe that uses it, directly
        or through other sub-recipes, is recomputed as well.
        """
        service = self.get_costing_service()
        recipe = service.recompute_recipe(pk)
        dependents = []
        if request.data.get('include_dependents'):
            dependents = service.recompute_dependents(recipe.pk)
        return Response({
            'success': True,
            'recipe': self._detail(recipe),
            'recomputed_dependents': [dependent.pk for dependent in dependents],
        })

    # ------------------------------------------------------------------
    # Selling price
    # ------------------------------------------------------------------

    @action(detail=True, methods=['post'])
    def price(self, request, pk=None):
        """POST {"new_price": "25000", "reason": "Harga baru"}"""
        serializer = RecipePriceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_price_service().set_selling_price(
            pk,
            serializer.validated_data['new_price'],
            serializer.validated_data.get('reason'),
        )
        return Response({
            'success': True,
            'recipe': RecipeListSerializer(result.recipe).data,
            'price_change': PriceChangeSerializer(result.change).data,
            'history': RecipePriceHistorySerializer(result.history).data if result.history else None,
        })

    @action(detail=True, methods=['get'], url_path='price-history')
    def price_history(self, request, pk=None):
        _, history = self.get_price_service().get_price_history(pk, request.query_params.get('limit'))
        return Response(RecipePriceHistorySerializer(history, many=True).data)

    @action(detail=False, methods=['post'], url_path='bulk-price')
    def bulk_price(self, request):
        serializer = BulkPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = self.get_price_service().bulk_adjust_price(
            data['recipe_ids'], data['mode'], data['value'], data.get('reason'),
        )
        return Response({'success': True, **result})

    # ------------------------------------------------------------------
    # Channel prices
    # ------------------------------------------------------------------

    @action(detail=True, methods=['get', 'post'], url_path='channel-prices')
    def channel_prices(self, request, pk=None):
        """
        GET: one entry per sales channel, defaults where nothing is stored.
        POST: {"channel_prices": [{"channel_id", "price", "commission", "tax_rate", "reason"}]}
        """
        service = self.get_channel_service()
        if request.method == 'GET':
            return Response(ChannelPriceEntrySerializer(service.list_channel_prices(pk), many=True).data)

        serializer = ChannelPricesSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = service.save_channel_prices(pk, serializer.validated_data['channel_prices'])
        return Response({
            'success': all(result['success'] for result in results),
            'results': [
                {
                    'channel_id': result['channel_id'],
                    'success': result['success'],
                    'error': result.get('error'),
                    'channel_price': (
                        ChannelPriceSerializer(result['channel_price']).data
                        if result['success'] else None
                    ),
                }
                for result in results
            ],
        })

    @action(detail=True, methods=['get'], url_path='channel-price-history')
    def channel_price_history(self, request, pk=None):
        """?channel=<id> narrows to one channel."""
        service = self.get_channel_service()
        channel_id = request.query_params.get('channel')
        limit = request.query_params.get('limit')
        if channel_id:
            history = service.get_history(pk, channel_id, limit)
        else:
            history = service.get_all_history(pk, limit)
        return Response(ChannelPriceHistorySerializer(history, many=True).data)

    @action(detail=False, methods=['post'], url_path='bulk-channel-price')
    def bulk_channel_price(self, request):
        """
        Reprice every sales channel of the selected recipes.

        {"recipe_ids": [...], "method": "markup", "markup_percentage": "20",
         "rounding_option": "hundred", "reason": "..."}

        A reviewed preview can be applied as is with
        {"prices": [{"recipe_id", "channel_id", "price"}], "reason": "..."}.
        """
        serializer = BulkChannelPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = self.get_channel_service()

        if data.get('prices'):
            result = service.apply_price_list(data['prices'], data.get('reason'))
        else:
            result = service.bulk_update(
                data['recipe_ids'],
                data['method'],
                markup_percentage=data.get('markup_percentage'),
                target_profit_amount=data.get('target_profit_amount'),
                rounding_option=data['rounding_option'],
                custom_rounding=data.get('custom_rounding'),
                reason=data.get('reason'),
            )
        return Response({
            'success': True,
            'message': f"Updated {result['updated']} channel prices",
            **result,
        })

    @action(detail=False, methods=['post'], url_path='bulk-channel-price/preview')
    def bulk_channel_price_preview(self, request):
        serializer = BulkChannelPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        preview = self.get_channel_service().preview_bulk_update(
            data['recipe_ids'],
            data['method'],
            markup_percentage=data.get('markup_percentage'),
            target_profit_amount=data.get('target_profit_amount'),
            rounding_option=data['rounding_option'],
            custom_rounding=data.get('custom_rounding'),
        )
        return Response({
            'items': BulkChannelPricePreviewItemSerializer(preview['items'], many=True).data,
            'errors': preview['errors'],
        })

    # ------------------------------------------------------------------
    # Bulk actions
    # ------------------------------------------------------------------

    @action(detail=False, methods=['post'], url_path='bulk-favorite')
    def bulk_favorite(self, request):
        serializer = BulkFavoriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = self.get_costing_service().bulk_set_favorite(
            serializer.validated_data['recipe_ids'], serializer.validated_data['is_favorite']
        )
        return Response({'success': True, 'updated_count': count})

    @action(detail=False, methods=['post'], url_path='bulk-category')
    def bulk_category(self, request):
        serializer = BulkCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = self.get_costing_service().bulk_set_category(
            serializer.validated_data['recipe_ids'], serializer.validated_data.get('category')
        )
        return Response({'success': True, 'updated_count': count})

    @action(detail=False, methods=['post'], url_path='bulk-basic-recipe')
    def bulk_basic_recipe(self, request):
        serializer = BulkBasicRecipeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = self.get_costing_service().bulk_set_usable_as_ingredient(
            serializer.validated_data['recipe_ids'],
            serializer.validated_data['can_be_used_as_ingredient'],
        )
        return Response({'success': True, 'updated_count': count})

    @action(detail=False, methods=['post'], url_path='bulk-delete')
    def bulk_delete(self, request):
        serializer = BulkRecipeIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        recipe_ids = serializer.validated_data['recipe_ids']
        if not recipe_ids:
            return Response({'error': 'No recipes selected'}, status=status.HTTP_400_BAD_REQUEST)
        result = self.get_costing_service().bulk_delete(recipe_ids)
        return Response({'success': True, **result})
