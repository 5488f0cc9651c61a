"""
COGS Services.

- IngredientService: ingredient CRUD, price updates, CSV import/export
- RecipeCostingService: recipe cost rollup, sub-recipe graph, bulk actions
- RecipePriceService: selling prices, bulk adjustments, price-manager CSV
- ChannelPriceService: sales channels and per-channel prices
"""
from cogs.services.channel_price_service import ChannelPriceService
from cogs.services.costing_service import (
    IngredientLineCost,
    RecipeCostBreakdown,
    RecipeCostingService,
    SubRecipeLineCost,
)
from cogs.services.ingredient_service import INGREDIENT_CSV_HEADERS, IngredientService
from cogs.services.price_service import PRICE_CSV_HEADERS, PriceUpdateResult, RecipePriceService

__all__ = [
    'ChannelPriceService',
    'IngredientLineCost',
    'RecipeCostBreakdown',
    'RecipeCostingService',
    'SubRecipeLineCost',
    'INGREDIENT_CSV_HEADERS',
    'IngredientService',
    'PRICE_CSV_HEADERS',
    'PriceUpdateResult',
    'RecipePriceService',
]
