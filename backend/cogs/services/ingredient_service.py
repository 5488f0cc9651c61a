"""
Ingredient service.

Creates and edits ingredients, keeps cost_per_unit derived from the purchase
data and records a price-history row whenever the purchase price changes.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.db import DatabaseError, transaction

from catalog.models import Category, CategoryType, Unit, UnitType
from catalog.services import find_or_create_category, find_or_create_unit
from settings.models import SkuEntityType
from settings.services import SkuService
from cogs.calculators import (
    PriceChange,
    compute_price_change,
    require_non_negative,
    require_positive,
    to_decimal,
)
from cogs.exceptions import COGSError, ConflictError, NotFoundError, ValidationError
from cogs.models import Ingredient, IngredientPriceHistory, RecipeIngredient
from cogs.services.base import TenantService

logger = logging.getLogger(__name__)

INGREDIENT_CSV_HEADERS = [
    'name',
    'description',
    'categoryName',
    'purchasePrice',
    'packageSize',
    'purchaseUnitName',
    'purchaseUnitSymbol',
    'usageUnitName',
    'usageUnitSymbol',
    'conversionFactor',
]


class IngredientService(TenantService):
    """
    Ingredient operations for one business.

    Usage:
        service = IngredientService(tenant, user=request.user)
        ingredient, change = service.update_price(ingredient_id, Decimal("16000"))
    """

    EDITABLE_FIELDS = (
        'name',
        'description',
        'purchase_price',
        'package_size',
        'conversion_factor',
        'purchase_unit',
        'usage_unit',
        'category',
    )

    def get_ingredient(self, ingredient_id) -> Ingredient:
        queryset = Ingredient.all_objects.select_related('purchase_unit', 'usage_unit', 'category')
        return self._get(Ingredient, ingredient_id, 'ingredient', queryset=queryset)

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    def _resolve_unit(self, value, field) -> Unit:
        if value is None or value == "":
            raise ValidationError(f"{field} is required", field=field)
        if isinstance(value, Unit):
            if value.tenant_id != self.tenant.id:
                raise NotFoundError('unit', value.pk)
            return value
        return self._get(Unit, value, 'unit')

    def _resolve_category(self, value) -> Optional[Category]:
        if value is None or value == "":
            return None
        if isinstance(value, Category):
            if value.tenant_id != self.tenant.id:
                raise NotFoundError('category', value.pk)
            return value
        return self._get(Category, value, 'category')

    def _clean_sku(self, sku, exclude_pk=None) -> Optional[str]:
        sku = (sku or "").strip()
        if not sku:
            return None
        clash = Ingredient.all_objects.filter(tenant=self.tenant, sku=sku)
        if exclude_pk is not None:
            clash = clash.exclude(pk=exclude_pk)
        if clash.exists():
            raise ConflictError(f"SKU '{sku}' is already used by another ingredient")
        return sku

    def _apply(self, ingredient: Ingredient, data: Dict[str, Any]):
        """Copy validated fields onto the instance. Units and category are resolved here."""
        for field in self.EDITABLE_FIELDS:
            if field not in data:
                continue
            value = data[field]
            if field in ('purchase_unit', 'usage_unit'):
                value = self._resolve_unit(value, field)
            elif field == 'category':
                value = self._resolve_category(value)
            elif field == 'name':
                value = (value or "").strip()
            elif field == 'description':
                value = value or ""
            setattr(ingredient, field, value)

        if not ingredient.name:
            raise ValidationError("name is required", field='name')

        ingredient.purchase_price = require_non_negative(ingredient.purchase_price, 'purchase_price')
        ingredient.package_size = require_positive(ingredient.package_size, 'package_size')
        ingredient.conversion_factor = require_positive(ingredient.conversion_factor, 'conversion_factor')

    def _record_price_change(self, ingredient, change: PriceChange) -> Optional[IngredientPriceHistory]:
        """Write a history row; a failure is logged and never undoes the price update."""
        try:
            with transaction.atomic():
                return IngredientPriceHistory.from_change(
                    change,
                    tenant=self.tenant,
                    ingredient=ingredient,
                )
        except (DatabaseError, COGSError) as e:
            logger.error(f"Failed to record price history for ingredient {ingredient.pk}: {e}")
            return None

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_ingredient(self, data: Dict[str, Any]) -> Ingredient:
        """
        Create an ingredient.

        A SKU is generated when none is given; if generation fails the
        ingredient is still created, without one.
        """
        if not data.get('purchase_unit') or not data.get('usage_unit'):
            raise ValidationError("purchase_unit and usage_unit are required")
        ingredient = Ingredient(tenant=self.tenant)
        self._apply(ingredient, data)

        ingredient.sku = self._clean_sku(data.get('sku'))

        with transaction.atomic():
            if ingredient.sku is None:
                ingredient.sku = SkuService.try_generate_sku(SkuEntityType.INGREDIENT, self.tenant)
            ingredient.save()

        logger.info(f"Created ingredient {ingredient.pk} '{ingredient.name}' for tenant {self.tenant.slug}")
        self._log(
            "CREATE_INGREDIENT", f"Added ingredient \"{ingredient.name}\"",
            entity_type="ingredient", entity_id=ingredient.pk,
        )
        return ingredient

    def update_ingredient(self, ingredient_id, data: Dict[str, Any]) -> Ingredient:
        """
        Edit an ingredient. cost_per_unit is recomputed on save and a price
        history row is written when the purchase price changed.
        """
        ingredient = self.get_ingredient(ingredient_id)
        old_price = ingredient.purchase_price

        self._apply(ingredient, data)
        if 'sku' in data:
            sku = self._clean_sku(data.get('sku'), exclude_pk=ingredient.pk)
            ingredient.sku = sku if sku is not None else ingredient.sku
        change = compute_price_change(old_price, ingredient.purchase_price)
        with transaction.atomic():
            if not ingredient.sku:
                ingredient.sku = SkuService.try_generate_sku(SkuEntityType.INGREDIENT, self.tenant)
            ingredient.save()
            if change.changed:
                self._record_price_change(ingredient, change)

        self._log(
            "UPDATE_INGREDIENT", f"Updated ingredient \"{ingredient.name}\"",
            entity_type="ingredient", entity_id=ingredient.pk,
        )
        return ingredient

    def update_price(self, ingredient_id, new_price, new_package_size=None) -> Tuple[Ingredient, PriceChange]:
        """
        Change the purchase price (and optionally the package size).

        Returns:
            (ingredient, PriceChange). A history row is written only when the
            price actually changed.
        """
        price = require_non_negative(new_price, 'new_price')
        package_size = None
        if new_package_size is not None:
            package_size = require_positive(new_package_size, 'new_package_size')

        ingredient = self.get_ingredient(ingredient_id)
        change = compute_price_change(ingredient.purchase_price, price)

        ingredient.purchase_price = price
        if package_size is not None:
            ingredient.package_size = package_size

        with transaction.atomic():
            ingredient.save()
            if change.changed:
                self._record_price_change(ingredient, change)

        logger.info(
            f"Ingredient {ingredient.pk} price {change.old_price} -> {change.new_price} "
            f"({change.change_type})"
        )
        self._log(
            "PRICE_UPDATE",
            f"Updated price of \"{ingredient.name}\" from {change.old_price} to {change.new_price}",
            entity_type="ingredient", entity_id=ingredient.pk,
        )
        return ingredient, change

    def delete_ingredient(self, ingredient_id):
        """
        Delete an ingredient no recipe uses.

        Raises:
            ConflictError: the ingredient is referenced by a recipe line.
        """
        ingredient = self.get_ingredient(ingredient_id)
        usage = RecipeIngredient.objects.filter(ingredient=ingredient).values('recipe').distinct().count()
        if usage:
            raise ConflictError(
                f"Cannot delete ingredient '{ingredient.name}': it is used in {usage} recipe(s)"
            )

        name, pk = ingredient.name, ingredient.pk
        ingredient.delete()
        self._log(
            "DELETE_INGREDIENT", f"Deleted ingredient \"{name}\"",
            entity_type="ingredient", entity_id=pk,
        )

    def bulk_delete(self, ingredient_ids: Iterable) -> Dict[str, Any]:
        """
        Delete every unreferenced ingredient among `ingredient_ids`.

        Returns:
            {'deleted': n, 'skipped': n, 'errors': [{'id', 'error'}]}
        """
        deleted = 0
        errors = []
        for ingredient_id in ingredient_ids:
            try:
                with transaction.atomic():
                    self.delete_ingredient(ingredient_id)
                deleted += 1
            except (NotFoundError, ConflictError) as e:
                errors.append({'id': ingredient_id, 'error': e.message})

        return {'deleted': deleted, 'skipped': len(errors), 'errors': errors}

    def get_price_history(self, ingredient_id, limit=None):
        ingredient = self.get_ingredient(ingredient_id)
        history = IngredientPriceHistory.all_objects.filter(
            tenant=self.tenant, ingredient=ingredient
        ).order_by('-change_date', '-id')
        return ingredient, list(history[:self.history_limit(limit)])

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def import_rows(self, rows: Iterable[Dict[str, str]]) -> Dict[str, Any]:
        """
        Upsert ingredients from parsed CSV rows.

        Rows are dicts keyed by lower-cased header. Ingredients are matched by
        name; categories and units are looked up by name (or unit symbol) and
        created when missing. A bad row is reported and skipped, the rest are
        still imported.

        Returns:
            {'created', 'updated', 'failed', 'errors': [{'row', 'error'}]}
            Row numbers count the header as row 1.
        """
        created = 0
        updated = 0
        errors: List[Dict[str, Any]] = []

        for index, row in enumerate(rows):
            row_number = index + 2
            try:
                with transaction.atomic():
                    was_created = self._import_row(row)
                if was_created:
                    created += 1
                else:
                    updated += 1
            except (COGSError, DatabaseError) as e:
                message = e.message if isinstance(e, COGSError) else str(e)
                errors.append({'row': row_number, 'error': message})

        logger.info(
            f"Ingredient import for tenant {self.tenant.slug}: "
            f"{created} created, {updated} updated, {len(errors)} failed"
        )
        self._log(
            "IMPORT_INGREDIENTS",
            f"Imported ingredients: {created} created, {updated} updated, {len(errors)} failed",
            entity_type="ingredient",
        )
        return {'created': created, 'updated': updated, 'failed': len(errors), 'errors': errors}

    def _import_row(self, row: Dict[str, str]) -> bool:
        def text(key):
            return (row.get(key) or "").strip()

        name = text('name')
        if not name:
            raise ValidationError("name is required", field='name')

        purchase_price = to_decimal(text('purchaseprice') or None, 'purchasePrice')
        package_size = to_decimal(text('packagesize') or None, 'packageSize')
        conversion_factor = to_decimal(text('conversionfactor') or None, 'conversionFactor')
        if purchase_price <= 0:
            raise ValidationError("invalid purchasePrice", field='purchasePrice')
        if package_size <= 0:
            raise ValidationError("invalid packageSize", field='packageSize')
        if conversion_factor <= 0:
            raise ValidationError("invalid conversionFactor", field='conversionFactor')

        purchase_unit_name = text('purchaseunitname')
        usage_unit_name = text('usageunitname')
        if not purchase_unit_name or not usage_unit_name:
            raise ValidationError("unit names are required")

        category = find_or_create_category(self.tenant, text('categoryname'), CategoryType.INGREDIENT)
        purchase_unit = find_or_create_unit(
            self.tenant, purchase_unit_name, text('purchaseunitsymbol'), UnitType.PURCHASE
        )
        usage_unit = find_or_create_unit(
            self.tenant, usage_unit_name, text('usageunitsymbol'), UnitType.USAGE
        )

        ingredient = Ingredient.all_objects.filter(tenant=self.tenant, name=name).order_by('id').first()
        was_created = ingredient is None
        if was_created:
            ingredient = Ingredient(tenant=self.tenant, name=name)
        change = compute_price_change(ingredient.purchase_price if not was_created else 0, purchase_price)

        ingredient.description = text('description')
        ingredient.category = category
        ingredient.purchase_price = purchase_price
        ingredient.package_size = package_size
        ingredient.conversion_factor = conversion_factor
        ingredient.purchase_unit = purchase_unit
        ingredient.usage_unit = usage_unit
        if was_created:
            ingredient.sku = SkuService.try_generate_sku(SkuEntityType.INGREDIENT, self.tenant)
        ingredient.save()

        if not was_created and change.changed:
            self._record_price_change(ingredient, change)
        return was_created

    def export_rows(self) -> List[List[Any]]:
        """Ingredient rows in INGREDIENT_CSV_HEADERS order, newest first."""
        ingredients = Ingredient.all_objects.filter(tenant=self.tenant).select_related(
            'category', 'purchase_unit', 'usage_unit'
        ).order_by('-created_at', '-id')

        return [
            [
                ingredient.name,
                ingredient.description,
                ingredient.category.name if ingredient.category else "",
                ingredient.purchase_price,
                ingredient.package_size,
                ingredient.purchase_unit.name,
                ingredient.purchase_unit.symbol,
                ingredient.usage_unit.name,
                ingredient.usage_unit.symbol,
                ingredient.conversion_factor,
            ]
            for ingredient in ingredients
        ]

