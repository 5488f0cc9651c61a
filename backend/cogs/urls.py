"""
URL configuration for the COGS app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from cogs.views import (
    IngredientViewSet,
    RecipeViewSet,
    PriceManagerViewSet,
    SalesChannelViewSet,
)

router = DefaultRouter()
router.register(r'ingredients', IngredientViewSet, basename='ingredient')
router.register(r'recipes', RecipeViewSet, basename='recipe')
router.register(r'price-manager', PriceManagerViewSet, basename='price-manager')
router.register(r'sales-channels', SalesChannelViewSet, basename='sales-channel')

urlpatterns = [
    path('', include(router.urls)),
]
