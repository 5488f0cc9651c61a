from django.urls import path

from .views import SkuSettingsView, DecimalSettingsView, DecimalFormatPreviewView

app_name = "settings"

urlpatterns = [
    path("sku/", SkuSettingsView.as_view(), name="sku-settings"),
    path("decimal/", DecimalSettingsView.as_view(), name="decimal-settings"),
    path("decimal/preview/", DecimalFormatPreviewView.as_view(), name="decimal-preview"),
]
