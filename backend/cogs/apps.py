from django.apps import AppConfig


class CogsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cogs'
    verbose_name = 'Costing & Pricing'
