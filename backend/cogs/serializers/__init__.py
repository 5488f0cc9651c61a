"""
COGS serializers package - modular serializer layer.
"""

# Ingredient serializers
from .ingredient_serializers import (
    IngredientSerializer,
    IngredientWriteSerializer,
    IngredientPriceUpdateSerializer,
    IngredientPriceHistorySerializer,
    PriceChangeSerializer,
    BulkIdsSerializer,
)

# Recipe serializers
from .recipe_serializers import (
    RecipeListSerializer,
    RecipeDetailSerializer,
    RecipeWriteSerializer,
    RecipeCostBreakdownSerializer,
    BulkRecipeIdsSerializer,
    BulkFavoriteSerializer,
    BulkCategorySerializer,
    BulkBasicRecipeSerializer,
)

# Selling price serializers
from .price_serializers import (
    RecipePriceUpdateSerializer,
    RecipePriceHistorySerializer,
    BulkPriceSerializer,
    PriceManagerRecipeSerializer,
)

# Channel serializers
from .channel_serializers import (
    SalesChannelSerializer,
    ChannelPriceSerializer,
    ChannelPriceEntrySerializer,
    ChannelPricesSaveSerializer,
    ChannelPriceHistorySerializer,
    BulkChannelPriceSerializer,
    BulkChannelPricePreviewItemSerializer,
)

__all__ = [
    # Ingredient
    'IngredientSerializer',
    'IngredientWriteSerializer',
    'IngredientPriceUpdateSerializer',
    'IngredientPriceHistorySerializer',
    'PriceChangeSerializer',
    'BulkIdsSerializer',
    # Recipe
    'RecipeListSerializer',
    'RecipeDetailSerializer',
    'RecipeWriteSerializer',
    'RecipeCostBreakdownSerializer',
    'BulkRecipeIdsSerializer',
    'BulkFavoriteSerializer',
    'BulkCategorySerializer',
    'BulkBasicRecipeSerializer',
    # Selling price
    'RecipePriceUpdateSerializer',
    'RecipePriceHistorySerializer',
    'BulkPriceSerializer',
    'PriceManagerRecipeSerializer',
    # Channel
    'SalesChannelSerializer',
    'ChannelPriceSerializer',
    'ChannelPriceEntrySerializer',
    'ChannelPricesSaveSerializer',
    'ChannelPriceHistorySerializer',
    'BulkChannelPriceSerializer',
    'BulkChannelPricePreviewItemSerializer',
]
