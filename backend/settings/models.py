from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from tenant.managers import TenantManager


class SkuEntityType(models.TextChoices):
    INGREDIENT = "ingredient", "Ingredient"
    RECIPE = "recipe", "Recipe"


class RoundingMethod(models.TextChoices):
    ROUND = "round", "Round"
    FLOOR = "floor", "Floor"
    CEIL = "ceil", "Ceil"


class CurrencyPosition(models.TextChoices):
    BEFORE = "before", "Before amount"
    AFTER = "after", "After amount"


class SkuSettings(models.Model):
    """
    Per-business SKU numbering.

    SKUs look like `{prefix}{separator}{number zero-padded to number_padding}`,
    e.g. ING-001. The next_* counters are only advanced through
    settings.services.SkuService.generate_sku, under a row lock.
    """

    tenant = models.OneToOneField(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='sku_settings'
    )
    ingredient_prefix = models.CharField(max_length=10, default="ING")
    recipe_prefix = models.CharField(max_length=10, default="RCP")
    number_padding = models.PositiveSmallIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(6)],
        help_text="Digits in the numeric part (1-6)"
    )
    separator = models.CharField(max_length=3, default="-", blank=True)
    next_ingredient_number = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    next_recipe_number = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = "SKU Settings"
        verbose_name_plural = "SKU Settings"

    def __str__(self):
        return f"SKU settings for {self.tenant}"

    def prefix_for(self, entity_type):
        if entity_type == SkuEntityType.INGREDIENT:
            return self.ingredient_prefix
        return self.recipe_prefix

    @staticmethod
    def counter_field_for(entity_type):
        if entity_type == SkuEntityType.INGREDIENT:
            return "next_ingredient_number"
        return "next_recipe_number"


class DecimalSettings(models.Model):
    """
    Per-business number and currency display format.

    Display only: formatted strings are never parsed back into amounts.
    """

    tenant = models.OneToOneField(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='decimal_settings'
    )
    decimal_places = models.PositiveSmallIntegerField(
        default=2,
        validators=[MinValueValidator(0), MaxValueValidator(10)]
    )
    rounding_method = models.CharField(
        max_length=10,
        choices=RoundingMethod.choices,
        default=RoundingMethod.ROUND
    )
    thousand_separator = models.CharField(max_length=3, default=",", blank=True)
    decimal_separator = models.CharField(max_length=3, default=".")
    currency_symbol = models.CharField(max_length=10, default="Rp", blank=True)
    currency_position = models.CharField(
        max_length=10,
        choices=CurrencyPosition.choices,
        default=CurrencyPosition.BEFORE
    )
    show_trailing_zeros = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = "Decimal Settings"
        verbose_name_plural = "Decimal Settings"

    def __str__(self):
        return f"Decimal settings for {self.tenant}"
