from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager
from cogs.calculators import (
    compute_cost_per_unit,
    compute_final_price,
    compute_net_price,
    quantize_money,
)
from cogs.choices import ChangeType
from cogs.exceptions import PersistenceError


def money_field(**kwargs):
    kwargs.setdefault('max_digits', 18)
    kwargs.setdefault('decimal_places', 4)
    kwargs.setdefault('default', 0)
    return models.DecimalField(**kwargs)


def unit_cost_field(**kwargs):
    kwargs.setdefault('max_digits', 20)
    kwargs.setdefault('decimal_places', 6)
    kwargs.setdefault('default', 0)
    return models.DecimalField(**kwargs)


class PriceChangeRecord(models.Model):
    """
    Append-only record of one price transition.

    Shared by ingredient, recipe and channel price history. price_change and
    percentage_change are stored as magnitudes; change_type keeps the
    direction. Rows are never updated once written.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='+'
    )
    old_price = money_field()
    new_price = money_field()
    price_change = money_field(help_text=_("Absolute difference between old and new price"))
    percentage_change = money_field(help_text=_("Absolute change relative to the old price, in percent"))
    change_type = models.CharField(
        max_length=20,
        choices=ChangeType.choices,
        default=ChangeType.NO_CHANGE
    )
    change_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True
        ordering = ['-change_date', '-id']

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PersistenceError(f"{self.__class__.__name__} rows are immutable")
        super().save(*args, **kwargs)

    @classmethod
    def from_change(cls, change, **fields):
        """Create a history row from a calculators.PriceChange."""
        return cls.all_objects.create(**change.as_dict(), **fields)


class Ingredient(models.Model):
    """
    Something a business buys and uses in recipes.

    Bought in packages of `package_size` purchase units at `purchase_price`;
    one purchase unit is `conversion_factor` usage units. cost_per_unit is
    the price of one usage unit and is recomputed on every save.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='ingredients'
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    sku = models.CharField(max_length=50, null=True, blank=True)
    purchase_price = money_field(help_text=_("Price of one purchase package"))
    package_size = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=1,
        help_text=_("Purchase units per package")
    )
    conversion_factor = models.DecimalField(
        max_digits=14,
        decimal_places=6,
        default=1,
        help_text=_("Usage units per purchase unit, e.g. 1000 g per kg")
    )
    cost_per_unit = unit_cost_field(
        editable=False,
        help_text=_("Cost of one usage unit")
    )
    purchase_unit = models.ForeignKey(
        'catalog.Unit',
        on_delete=models.PROTECT,
        related_name='purchase_ingredients'
    )
    usage_unit = models.ForeignKey(
        'catalog.Unit',
        on_delete=models.PROTECT,
        related_name='usage_ingredients'
    )
    category = models.ForeignKey(
        'catalog.Category',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='ingredients'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Ingredient")
        verbose_name_plural = _("Ingredients")
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'sku'],
                condition=Q(sku__isnull=False),
                name='unique_ingredient_sku_per_tenant'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'name'], name='cogs_ing_tenant_name_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.cost_per_unit = compute_cost_per_unit(
            self.purchase_price,
            self.package_size,
            self.conversion_factor,
        )
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'cost_per_unit' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['cost_per_unit']
        super().save(*args, **kwargs)


class IngredientPriceHistory(PriceChangeRecord):
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.CASCADE,
        related_name='price_history'
    )

    class Meta(PriceChangeRecord.Meta):
        verbose_name = _("Ingredient Price History")
        verbose_name_plural = _("Ingredient Price History")
        indexes = [
            models.Index(fields=['ingredient', '-change_date'], name='cogs_ing_hist_date_idx'),
        ]

    def __str__(self):
        return f"{self.ingredient}: {self.old_price} -> {self.new_price}"


class Recipe(models.Model):
    """
    A dish or preparation built from ingredient lines and sub-recipe lines.

    Cost fields are derived by RecipeCostingService when the recipe is saved
    through it. Line costs are snapshots taken at that time: changing an
    ingredient price or a sub-recipe does not touch this recipe until it is
    recomputed.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='recipes'
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    instructions = models.TextField(blank=True, default="")
    sku = models.CharField(max_length=50, null=True, blank=True)
    yield_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=1,
        validators=[MinValueValidator(0)],
        help_text=_("Servings produced by one batch")
    )
    yield_unit = models.ForeignKey(
        'catalog.Unit',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='yield_recipes'
    )
    labor_cost = money_field()
    operational_cost = money_field()
    packaging_cost = money_field()
    total_cogs = unit_cost_field(editable=False)
    cogs_per_serving = unit_cost_field(editable=False)
    can_be_used_as_ingredient = models.BooleanField(
        default=False,
        help_text=_("Allow this recipe to be used as a sub-recipe")
    )
    cost_per_unit = unit_cost_field(
        editable=False,
        help_text=_("cogs_per_serving when usable as an ingredient, else 0")
    )
    selling_price = money_field()
    profit_margin = money_field(editable=False, help_text=_("Percent of the selling price"))
    is_favorite = models.BooleanField(default=False)
    category = models.ForeignKey(
        'catalog.Category',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='recipes'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Recipe")
        verbose_name_plural = _("Recipes")
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'sku'],
                condition=Q(sku__isnull=False),
                name='unique_recipe_sku_per_tenant'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'name'], name='cogs_rcp_tenant_name_idx'),
            models.Index(fields=['tenant', 'is_favorite'], name='cogs_rcp_tenant_fav_idx'),
        ]

    def __str__(self):
        return self.name


class RecipeIngredient(models.Model):
    """Ingredient line of a recipe, with its cost at the time the recipe was saved."""
    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='ingredient_lines'
    )
    ingredient = models.ForeignKey(
        Ingredient,
        on_delete=models.PROTECT,
        related_name='recipe_lines'
    )
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit = models.ForeignKey(
        'catalog.Unit',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='recipe_ingredient_lines'
    )
    cost = unit_cost_field()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity} x {self.ingredient}"


class RecipeSubRecipe(models.Model):
    """Sub-recipe line of a recipe, valued at the sub-recipe's cogs_per_serving."""
    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='sub_recipe_lines'
    )
    sub_recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='parent_lines'
    )
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    cost = unit_cost_field()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity} x {self.sub_recipe}"


class RecipePriceHistory(PriceChangeRecord):
    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='price_history'
    )
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta(PriceChangeRecord.Meta):
        verbose_name = _("Recipe Price History")
        verbose_name_plural = _("Recipe Price History")
        indexes = [
            models.Index(fields=['recipe', '-change_date'], name='cogs_rcp_hist_date_idx'),
        ]

    def __str__(self):
        return f"{self.recipe}: {self.old_price} -> {self.new_price}"


class SalesChannel(models.Model):
    """A sales outlet (dine-in, delivery app) with its default commission."""
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='sales_channels'
    )
    name = models.CharField(max_length=100)
    commission = models.DecimalField(
        max_digits=7,
        decimal_places=4,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text=_("Percent of the price kept by the channel")
    )
    icon = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Sales Channel")
        verbose_name_plural = _("Sales Channels")
        ordering = ['name']
        indexes = [
            models.Index(fields=['tenant', 'name'], name='cogs_channel_tenant_name_idx'),
        ]

    def __str__(self):
        return self.name


class ChannelPrice(models.Model):
    """
    Price of one recipe on one sales channel.

    commission is a snapshot and may differ from the channel default.
    final_price (price plus tax) is recomputed on every save.
    """
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='channel_prices'
    )
    recipe = models.ForeignKey(
        Recipe,
        on_delete=models.CASCADE,
        related_name='channel_prices'
    )
    channel = models.ForeignKey(
        SalesChannel,
        on_delete=models.CASCADE,
        related_name='channel_prices'
    )
    price = money_field()
    commission = models.DecimalField(max_digits=7, decimal_places=4, default=0)
    tax_rate = models.DecimalField(max_digits=7, decimal_places=4, default=0)
    final_price = money_field(editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Channel Price")
        verbose_name_plural = _("Channel Prices")
        constraints = [
            models.UniqueConstraint(
                fields=['recipe', 'channel'],
                name='unique_channel_price_per_recipe'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'recipe'], name='cogs_chprice_tenant_rcp_idx'),
        ]

    def __str__(self):
        return f"{self.recipe} @ {self.channel}: {self.price}"

    @property
    def net_price(self):
        return compute_net_price(self.price, self.commission)

    def save(self, *args, **kwargs):
        self.price = quantize_money(self.price)
        self.final_price = compute_final_price(self.price, self.tax_rate)
        super().save(*args, **kwargs)


class ChannelPriceHistory(PriceChangeRecord):
    channel_price = models.ForeignKey(
        ChannelPrice,
        on_delete=models.CASCADE,
        related_name='history'
    )
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta(PriceChangeRecord.Meta):
        verbose_name = _("Channel Price History")
        verbose_name_plural = _("Channel Price History")
        indexes = [
            models.Index(fields=['channel_price', '-change_date'], name='cogs_ch_hist_date_idx'),
        ]

    def __str__(self):
        return f"{self.channel_price}: {self.old_price} -> {self.new_price}"
