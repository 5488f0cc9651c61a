"""
URL configuration for the catalog app.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from catalog.views import UnitViewSet, CategoryViewSet

router = DefaultRouter()
router.register(r'units', UnitViewSet, basename='unit')
router.register(r'categories', CategoryViewSet, basename='category')

urlpatterns = [
    path('', include(router.urls)),
]
