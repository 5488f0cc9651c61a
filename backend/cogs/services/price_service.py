"""
Recipe base-price service.

Sets a recipe's selling price, keeps profit_margin in step with it and
records every change in RecipePriceHistory.

History policy:
- set_selling_price is an explicit request for one recipe and always records,
  even when the price is unchanged.
- bulk_adjust_price and CSV imports skip recipes whose price would not change:
  no history row and not counted as updated.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from django.db import DatabaseError, transaction
from django.db.models import Q

from cogs.calculators import (
    PriceChange,
    adjust_price,
    compute_price_change,
    compute_profit_margin,
    require_positive,
    to_decimal,
)
from cogs.choices import BulkPriceMode
from cogs.exceptions import COGSError, NotFoundError, ValidationError
from cogs.models import Recipe, RecipePriceHistory
from cogs.services.base import TenantService
from cogs.services.costing_service import RecipeCostingService

logger = logging.getLogger(__name__)

PRICE_CSV_HEADERS = [
    'ID',
    'Nama Resep',
    'SKU',
    'Deskripsi',
    'Kategori',
    'HPP per Unit',
    'Harga Jual Saat Ini',
    'Margin Profit Saat Ini (%)',
    'Harga Jual Baru',
    'Alasan Perubahan',
]

PRICE_CSV_TEMPLATE_ROWS = [
    ['1', 'Contoh Resep 1', 'RCP-001', 'Deskripsi resep contoh', 'Kue',
     '15000', '25000', '40.0', '30000', 'Penyesuaian harga pasar'],
    ['2', 'Contoh Resep 2', 'RCP-002', 'Deskripsi resep contoh 2', 'Minuman',
     '8000', '15000', '46.7', '18000', 'Kenaikan biaya bahan'],
]


@dataclass
class PriceUpdateResult:
    recipe: Recipe
    history: Optional[RecipePriceHistory]
    change: PriceChange


class RecipePriceService(TenantService):
    """Selling-price operations for one business."""

    def get_recipe(self, recipe_id) -> Recipe:
        return self._get(Recipe, recipe_id, 'recipe')

    def _record(self, recipe, change: PriceChange, reason) -> Optional[RecipePriceHistory]:
        try:
            with transaction.atomic():
                return RecipePriceHistory.from_change(
                    change,
                    tenant=self.tenant,
                    recipe=recipe,
                    reason=(reason or "")[:255],
                )
        except (DatabaseError, COGSError) as e:
            logger.error(f"Failed to record price history for recipe {recipe.pk}: {e}")
            return None

    def _apply_price(self, recipe: Recipe, new_price: Decimal, reason) -> PriceUpdateResult:
        change = compute_price_change(recipe.selling_price, new_price)
        recipe.selling_price = new_price
        recipe.profit_margin = compute_profit_margin(new_price, recipe.cogs_per_serving)
        recipe.save(update_fields=['selling_price', 'profit_margin', 'updated_at'])
        history = self._record(recipe, change, reason)
        return PriceUpdateResult(recipe=recipe, history=history, change=change)

    def set_selling_price(self, recipe_id, new_price, reason=None) -> PriceUpdateResult:
        """
        Set one recipe's selling price.

        profit_margin = (price - cogs_per_serving) / price * 100, or 0 without cost.
        A history row is always written; its failure is logged only.
        """
        price = require_positive(new_price, 'new_price')
        recipe = self.get_recipe(recipe_id)

        with transaction.atomic():
            result = self._apply_price(recipe, price, reason or "Manual price update")

        logger.info(
            f"Recipe {recipe.pk} selling price {result.change.old_price} -> {result.change.new_price}"
        )
        self._log(
            "PRICE_UPDATE",
            f"Updated selling price of \"{recipe.name}\" from {result.change.old_price} "
            f"to {result.change.new_price}",
            entity_type="recipe", entity_id=recipe.pk,
        )
        return result

    def bulk_adjust_price(self, recipe_ids, mode, value, reason=None) -> Dict[str, Any]:
        """
        Adjust many selling prices at once.

        Modes: set, increase_percent, decrease_percent, increase_amount,
        decrease_amount. The result is rounded to an integer (halves up) and
        floored at 0. Unknown ids are reported; all writes share one
        transaction.

        Returns:
            {'processed', 'updated', 'skipped', 'failed', 'errors'}
        """
        recipe_ids = list(recipe_ids or [])
        if not recipe_ids:
            raise ValidationError("No recipes selected", field='recipe_ids')
        if mode not in BulkPriceMode.values:
            raise ValidationError(f"Invalid mode: {mode}", field='mode')
        value = to_decimal(value, 'value')

        recipes = RecipeCostingService(self.tenant, self.user).recipes_by_id(recipe_ids)
        if not recipes:
            raise NotFoundError('recipe', recipe_ids, message="Recipes not found")

        errors = [
            {'id': recipe_id, 'error': f"Recipe not found: {recipe_id}"}
            for recipe_id in recipe_ids if recipe_id not in recipes
        ]

        updated = 0
        skipped = 0
        with transaction.atomic():
            for recipe in recipes.values():
                new_price = adjust_price(recipe.selling_price, mode, value)
                if new_price == recipe.selling_price:
                    skipped += 1
                    continue
                old_price = recipe.selling_price
                self._apply_price(recipe, new_price, reason or "Bulk price update")
                self._log(
                    "PRICE_UPDATE",
                    f"Bulk updated recipe price from {old_price} to {new_price}",
                    entity_type="recipe", entity_id=recipe.pk,
                )
                updated += 1

        logger.info(
            f"Bulk price ({mode} {value}) for tenant {self.tenant.slug}: "
            f"{updated} updated, {skipped} unchanged, {len(errors)} missing"
        )
        return {
            'processed': len(recipes),
            'updated': updated,
            'skipped': skipped,
            'failed': len(errors),
            'errors': errors,
        }

    def import_price_rows(self, rows: List[Dict[str, str]]) -> Dict[str, Any]:
        """
        Apply the 'Harga Jual Baru' column of a price-manager CSV.

        Rows with an unchanged price count as processed but are not updated.
        Bad rows are reported with their row number (header is row 1).

        Returns:
            {'total', 'processed', 'updated', 'failed', 'errors': [{'row', 'error'}]}
        """
        processed = 0
        updated = 0
        errors = []

        with transaction.atomic():
            for index, row in enumerate(rows):
                row_number = index + 2
                recipe_id = (row.get('ID') or "").strip()
                raw_price = (row.get('Harga Jual Baru') or "").strip()
                reason = (row.get('Alasan Perubahan') or "").strip()

                if not recipe_id or not raw_price:
                    errors.append({'row': row_number, 'error': "Missing ID or new price"})
                    continue

                try:
                    new_price = to_decimal(raw_price, 'Harga Jual Baru')
                except ValidationError:
                    new_price = None
                if new_price is None or new_price < 0:
                    errors.append({'row': row_number, 'error': f"Invalid new price: {raw_price}"})
                    continue

                try:
                    recipe = self.get_recipe(recipe_id)
                except NotFoundError:
                    errors.append({'row': row_number, 'error': f"Recipe not found: {recipe_id}"})
                    continue

                processed += 1
                if new_price == recipe.selling_price:
                    continue

                self._apply_price(recipe, new_price, reason or "CSV import update")
                updated += 1

        self._log(
            "IMPORT_PRICES",
            f"Imported selling prices: {updated} updated, {len(errors)} failed",
            entity_type="recipe",
        )
        return {
            'total': len(rows),
            'processed': processed,
            'updated': updated,
            'failed': len(errors),
            'errors': errors,
        }

    def price_manager_rows(self, search=None):
        """Recipes for the price manager screen, by name."""
        recipes = Recipe.all_objects.filter(tenant=self.tenant).select_related('category')
        if search:
            recipes = recipes.filter(
                Q(name__icontains=search)
                | Q(sku__icontains=search)
                | Q(description__icontains=search)
                | Q(category__name__icontains=search)
            )
        return recipes.order_by('name', 'id')

    def export_price_rows(self, search=None) -> Iterable[List[Any]]:
        """CSV rows in PRICE_CSV_HEADERS order; the new price and reason are left blank."""
        for recipe in self.price_manager_rows(search):
            yield [
                recipe.pk,
                recipe.name,
                recipe.sku or "",
                recipe.description or "",
                recipe.category.name if recipe.category else "",
                recipe.cogs_per_serving,
                recipe.selling_price,
                recipe.profit_margin,
                "",
                "",
            ]

    def get_price_history(self, recipe_id, limit=None):
        recipe = self.get_recipe(recipe_id)
        history = RecipePriceHistory.all_objects.filter(
            tenant=self.tenant, recipe=recipe
        ).order_by('-change_date', '-id')
        return recipe, list(history[:self.history_limit(limit)])
