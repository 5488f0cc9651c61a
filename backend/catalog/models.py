"""
Catalog app - per-business units and categories.

Units are tenant-scoped here: each business keeps its own list of purchase
units (how it buys) and usage units (how recipes consume).
"""
from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager


class UnitType(models.TextChoices):
    """How a unit is used."""
    PURCHASE = "purchase", _("Purchase")
    USAGE = "usage", _("Usage")


class CategoryType(models.TextChoices):
    """What a category groups."""
    INGREDIENT = "ingredient", _("Ingredient")
    RECIPE = "recipe", _("Recipe")


class Unit(models.Model):
    """
    Measurement unit owned by one business.

    Examples: kilogram (kg) as a purchase unit, gram (g) as a usage unit.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='units'
    )
    name = models.CharField(
        max_length=50,
        help_text=_("Full name of the unit, e.g., 'gram', 'kilogram', 'pack'")
    )
    symbol = models.CharField(
        max_length=20,
        help_text=_("Short symbol for the unit, e.g., 'g', 'kg', 'pcs'")
    )
    type = models.CharField(
        max_length=20,
        choices=UnitType.choices,
        help_text=_("Whether this unit is used for purchasing or for recipe usage")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Unit")
        verbose_name_plural = _("Units")
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'name', 'symbol', 'type'],
                name='unique_unit_per_tenant'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'type'], name='catalog_unit_tenant_type_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.symbol})"


class Category(models.Model):
    """
    Grouping for ingredients or recipes, with a display color.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='categories'
    )
    name = models.CharField(max_length=100)
    type = models.CharField(
        max_length=20,
        choices=CategoryType.choices,
        help_text=_("Whether this category groups ingredients or recipes")
    )
    color = models.CharField(
        max_length=7,
        default="#6B7280",
        help_text=_("Display color in hex format (e.g., #FF5733)")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'name', 'type'],
                name='unique_category_per_tenant'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'type'], name='catalog_cat_tenant_type_idx'),
        ]

    def __str__(self):
        return self.name
