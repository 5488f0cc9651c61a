"""
COGS views package.
"""

# Ingredient views
from .ingredient_views import IngredientViewSet

# Recipe views
from .recipe_views import RecipeViewSet

# Price manager and sales channel views
from .price_views import PriceManagerViewSet, SalesChannelViewSet

__all__ = [
    'IngredientViewSet',
    'RecipeViewSet',
    'PriceManagerViewSet',
    'SalesChannelViewSet',
]
