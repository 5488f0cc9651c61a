"""
Channel price service.

Prices a recipe per sales channel. Each ChannelPrice keeps its own snapshot of
the commission and tax rate; final_price is price plus tax and is maintained
by ChannelPrice.save().

History policy:
- upsert_channel_price on a new row records an initial change from 0.
- upsert_channel_price on an existing row records only when the price changed.
- bulk_update and apply_price_list skip rows whose price would not change.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction

from cogs.calculators import (
    ZERO,
    apply_rounding,
    compute_final_price,
    compute_markup_price,
    compute_net_margin,
    compute_price_change,
    compute_target_profit_price,
    quantize_money,
    require_non_negative,
    require_percentage,
    to_decimal,
)
from cogs.choices import ChannelPricingMethod, RoundingOption
from cogs.exceptions import COGSError, NotFoundError, ValidationError
from cogs.models import ChannelPrice, ChannelPriceHistory, Recipe, SalesChannel
from cogs.services.base import TenantService
from cogs.services.costing_service import RecipeCostingService

logger = logging.getLogger(__name__)


class ChannelPriceService(TenantService):
    """Per-channel pricing of recipes for one business."""

    # ------------------------------------------------------------------
    # Sales channels
    # ------------------------------------------------------------------

    def list_channels(self):
        return SalesChannel.all_objects.filter(tenant=self.tenant).order_by('name', 'id')

    def get_channel(self, channel_id) -> SalesChannel:
        return self._get(SalesChannel, channel_id, 'sales_channel')

    def _apply_channel(self, channel: SalesChannel, data):
        if 'name' in data:
            name = (data.get('name') or "").strip()
            if not name:
                raise ValidationError("Channel name is required", field='name')
            channel.name = name
        if 'commission' in data:
            channel.commission = require_percentage(data.get('commission') or 0, 'commission')
        if 'icon' in data:
            channel.icon = data.get('icon') or ""

    def create_channel(self, data) -> SalesChannel:
        channel = SalesChannel(tenant=self.tenant)
        if 'name' not in data:
            raise ValidationError("Channel name is required", field='name')
        self._apply_channel(channel, data)
        channel.save()
        self._log(
            "CREATE_SALES_CHANNEL",
            f"Created sales channel \"{channel.name}\"",
            entity_type="sales_channel", entity_id=channel.pk,
        )
        return channel

    def update_channel(self, channel_id, data) -> SalesChannel:
        channel = self.get_channel(channel_id)
        self._apply_channel(channel, data)
        channel.save()
        self._log(
            "UPDATE_SALES_CHANNEL",
            f"Updated sales channel \"{channel.name}\"",
            entity_type="sales_channel", entity_id=channel.pk,
        )
        return channel

    def delete_channel(self, channel_id):
        """Delete a channel together with its channel prices and their history."""
        channel = self.get_channel(channel_id)
        name = channel.name
        pk = channel.pk
        with transaction.atomic():
            ChannelPrice.all_objects.filter(tenant=self.tenant, channel=channel).delete()
            channel.delete()
        self._log(
            "DELETE_SALES_CHANNEL",
            f"Deleted sales channel \"{name}\"",
            entity_type="sales_channel", entity_id=pk,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _get_recipe(self, recipe_id) -> Recipe:
        return self._get(Recipe, recipe_id, 'recipe')

    def list_channel_prices(self, recipe_id) -> List[Dict[str, Any]]:
        """
        One entry per channel of the tenant, in name order.

        Channels without a stored price fall back to the recipe's selling
        price, the channel's default commission and no tax.
        """
        recipe = self._get_recipe(recipe_id)
        existing = {
            cp.channel_id: cp
            for cp in ChannelPrice.all_objects.filter(tenant=self.tenant, recipe=recipe)
        }

        entries = []
        for channel in self.list_channels():
            channel_price = existing.get(channel.pk)
            if channel_price is not None:
                price = channel_price.price
                commission = channel_price.commission
                tax_rate = channel_price.tax_rate
                final_price = channel_price.final_price
            else:
                price = recipe.selling_price or ZERO
                commission = channel.commission
                tax_rate = ZERO
                final_price = compute_final_price(price, tax_rate)

            entries.append({
                'channel_id': channel.pk,
                'channel_name': channel.name,
                'channel_commission': channel.commission,
                'channel_price_id': channel_price.pk if channel_price else None,
                'price': price,
                'commission': commission,
                'tax_rate': tax_rate,
                'final_price': final_price,
                'net_margin': compute_net_margin(price, commission, recipe.cogs_per_serving),
            })
        return entries

    def get_history(self, recipe_id, channel_id, limit=None):
        recipe = self._get_recipe(recipe_id)
        channel = self.get_channel(channel_id)
        history = ChannelPriceHistory.all_objects.filter(
            tenant=self.tenant,
            channel_price__recipe=recipe,
            channel_price__channel=channel,
        ).order_by('-change_date', '-id')
        return list(history[:self.history_limit(limit)])

    def get_all_history(self, recipe_id, limit=None):
        """History of every channel price of a recipe, newest first."""
        recipe = self._get_recipe(recipe_id)
        history = ChannelPriceHistory.all_objects.filter(
            tenant=self.tenant, channel_price__recipe=recipe
        ).select_related('channel_price__channel').order_by('-change_date', '-id')
        if limit is not None:
            history = history[:self.history_limit(limit)]
        return list(history)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _record(self, channel_price, change, reason) -> Optional[ChannelPriceHistory]:
        try:
            with transaction.atomic():
                return ChannelPriceHistory.from_change(
                    change,
                    tenant=self.tenant,
                    channel_price=channel_price,
                    reason=(reason or "")[:255],
                )
        except (DatabaseError, COGSError) as e:
            logger.error(f"Failed to record channel price history for {channel_price.pk}: {e}")
            return None

    def _write(self, recipe, channel, price, commission=None, tax_rate=None,
               reason=None, skip_unchanged=False):
        """
        Create or update one ChannelPrice.

        Returns (channel_price, change, created); change is None when an
        unchanged row was skipped.
        """
        channel_price = ChannelPrice.all_objects.filter(
            tenant=self.tenant, recipe=recipe, channel=channel
        ).first()

        if channel_price is None:
            channel_price = ChannelPrice(
                tenant=self.tenant,
                recipe=recipe,
                channel=channel,
                price=price,
                commission=channel.commission if commission is None else commission,
                tax_rate=ZERO if tax_rate is None else tax_rate,
            )
            channel_price.save()
            change = compute_price_change(ZERO, channel_price.price)
            self._record(channel_price, change, reason)
            return channel_price, change, True

        change = compute_price_change(channel_price.price, price)
        if skip_unchanged and not change.changed:
            return channel_price, None, False

        channel_price.price = price
        if commission is not None:
            channel_price.commission = commission
        if tax_rate is not None:
            channel_price.tax_rate = tax_rate
        channel_price.save()

        if change.changed:
            self._record(channel_price, change, reason)
        return channel_price, change, False

    def _clean_entry(self, price, commission, tax_rate):
        price = quantize_money(require_non_negative(price, 'price'))
        if commission is not None and commission != "":
            commission = require_percentage(commission, 'commission')
        else:
            commission = None
        if tax_rate is not None and tax_rate != "":
            tax_rate = require_percentage(tax_rate, 'tax_rate')
        else:
            tax_rate = None
        return price, commission, tax_rate

    def upsert_channel_price(self, recipe_id, channel_id, price, commission=None,
                             tax_rate=None, reason=None) -> ChannelPrice:
        """
        Set the price of a recipe on one channel.

        final_price = price * (1 + tax_rate / 100). Omitted commission and tax
        keep the stored snapshot, or take the channel default and 0 on a new row.
        """
        price, commission, tax_rate = self._clean_entry(price, commission, tax_rate)
        recipe = self._get_recipe(recipe_id)
        channel = self.get_channel(channel_id)

        with transaction.atomic():
            channel_price, change, created = self._write(
                recipe, channel, price, commission, tax_rate,
                reason=reason or "Manual channel price update",
            )

        self._log(
            "CHANNEL_PRICE_UPDATE",
            f"Set price of \"{recipe.name}\" on {channel.name} to {channel_price.price}",
            entity_type="recipe", entity_id=recipe.pk,
        )
        return channel_price

    def save_channel_prices(self, recipe_id, entries) -> List[Dict[str, Any]]:
        """
        Batch upsert for one recipe.

        Each entry is {'channel_id', 'price', 'commission', 'tax_rate', 'reason'}.
        Unknown channels are reported as failed results; invalid numbers abort
        the whole batch before anything is written.
        """
        recipe = self._get_recipe(recipe_id)
        cleaned = []
        for entry in entries or []:
            price, commission, tax_rate = self._clean_entry(
                entry.get('price'), entry.get('commission'), entry.get('tax_rate')
            )
            cleaned.append((entry, price, commission, tax_rate))

        results = []
        with transaction.atomic():
            for entry, price, commission, tax_rate in cleaned:
                channel_id = entry.get('channel_id')
                try:
                    channel = self.get_channel(channel_id)
                except NotFoundError:
                    results.append({
                        'channel_id': channel_id,
                        'success': False,
                        'error': "Sales channel not found",
                    })
                    continue

                channel_price, change, created = self._write(
                    recipe, channel, price, commission, tax_rate,
                    reason=entry.get('reason') or "Manual channel price update",
                )
                results.append({
                    'channel_id': channel.pk,
                    'success': True,
                    'channel_price': channel_price,
                    'created': created,
                })

        saved = sum(1 for result in results if result['success'])
        self._log(
            "CHANNEL_PRICE_UPDATE",
            f"Saved {saved} channel prices for \"{recipe.name}\"",
            entity_type="recipe", entity_id=recipe.pk,
        )
        return results

    # ------------------------------------------------------------------
    # Bulk pricing
    # ------------------------------------------------------------------

    def _compute_bulk_price(self, recipe, channel, method, markup_percentage,
                            target_profit_amount, rounding_option, custom_rounding) -> Optional[Decimal]:
        """New channel price for one recipe, or None when the recipe has nothing to price from."""
        if method == ChannelPricingMethod.MARKUP:
            if not recipe.selling_price:
                return None
            raw = compute_markup_price(recipe.selling_price, markup_percentage)
        else:
            if not recipe.cogs_per_serving:
                return None
            raw = compute_target_profit_price(
                recipe.cogs_per_serving, target_profit_amount, channel.commission
            )
        price = apply_rounding(raw, rounding_option, custom_rounding)
        return price if price > 0 else None

    def _bulk_plan(self, recipe_ids, method, markup_percentage, target_profit_amount,
                   rounding_option, custom_rounding):
        """Validate bulk parameters and compute the new price of every recipe/channel pair."""
        recipe_ids = list(recipe_ids or [])
        if not recipe_ids:
            raise ValidationError("No recipes selected", field='recipe_ids')
        if method not in ChannelPricingMethod.values:
            raise ValidationError(f"Invalid pricing method: {method}", field='method')
        if method == ChannelPricingMethod.MARKUP:
            to_decimal(markup_percentage, 'markup_percentage')
        else:
            to_decimal(target_profit_amount, 'target_profit_amount')
        rounding_option = rounding_option or RoundingOption.NONE
        if rounding_option == RoundingOption.CUSTOM:
            custom_rounding = to_decimal(custom_rounding, 'custom_rounding')
            if custom_rounding <= 0:
                raise ValidationError("Custom rounding must be greater than 0", field='custom_rounding')

        channels = list(self.list_channels())
        if not channels:
            raise ValidationError("No sales channels found", field='channels')

        recipes = RecipeCostingService(self.tenant, self.user).recipes_by_id(recipe_ids)
        errors = [
            {'id': recipe_id, 'error': f"Recipe not found: {recipe_id}"}
            for recipe_id in recipe_ids if recipe_id not in recipes
        ]

        existing = {
            (cp.recipe_id, cp.channel_id): cp
            for cp in ChannelPrice.all_objects.filter(
                tenant=self.tenant, recipe__in=list(recipes.values())
            )
        }

        plan = []
        for recipe in recipes.values():
            for channel in channels:
                new_price = self._compute_bulk_price(
                    recipe, channel, method, markup_percentage,
                    target_profit_amount, rounding_option, custom_rounding,
                )
                if new_price is None:
                    continue
                plan.append((recipe, channel, existing.get((recipe.pk, channel.pk)), new_price))
        return plan, errors

    def preview_bulk_update(self, recipe_ids, method, markup_percentage=None,
                            target_profit_amount=None, rounding_option=RoundingOption.NONE,
                            custom_rounding=None) -> Dict[str, Any]:
        """Compute what bulk_update would write, without writing."""
        plan, errors = self._bulk_plan(
            recipe_ids, method, markup_percentage, target_profit_amount,
            rounding_option, custom_rounding,
        )
        items = []
        for recipe, channel, current, new_price in plan:
            current_price = current.price if current is not None else ZERO
            commission = current.commission if current is not None else channel.commission
            change = compute_price_change(current_price, new_price)
            items.append({
                'recipe_id': recipe.pk,
                'recipe_name': recipe.name,
                'channel_id': channel.pk,
                'channel_name': channel.name,
                'current_price': current_price,
                'new_price': new_price,
                'price_change': change.price_change,
                'percentage_change': change.percentage_change,
                'change_type': change.change_type,
                'net_margin': compute_net_margin(new_price, commission, recipe.cogs_per_serving),
            })
        return {'items': items, 'errors': errors}

    def bulk_update(self, recipe_ids, method, markup_percentage=None, target_profit_amount=None,
                    rounding_option=RoundingOption.NONE, custom_rounding=None,
                    reason=None) -> Dict[str, Any]:
        """
        Reprice every channel of the given recipes.

        New rows take the channel commission and the default channel tax rate;
        existing rows keep their snapshot. Unchanged prices are skipped, and
        recipes with nothing to price from are left untouched.

        Returns:
            {'updated', 'skipped', 'failed', 'errors'}
        """
        if not (reason or "").strip():
            raise ValidationError("Reason is required", field='reason')

        plan, errors = self._bulk_plan(
            recipe_ids, method, markup_percentage, target_profit_amount,
            rounding_option, custom_rounding,
        )
        tax_rate = Decimal(str(getattr(settings, 'COGS_DEFAULT_CHANNEL_TAX_RATE', 11)))

        updated = 0
        skipped = 0
        with transaction.atomic():
            for recipe, channel, current, new_price in plan:
                _, change, _ = self._write(
                    recipe, channel, new_price,
                    tax_rate=None if current is not None else tax_rate,
                    reason=reason, skip_unchanged=True,
                )
                if change is None:
                    skipped += 1
                else:
                    updated += 1

        logger.info(
            f"Bulk channel pricing ({method}) for tenant {self.tenant.slug}: "
            f"{updated} updated, {skipped} unchanged, {len(errors)} missing"
        )
        self._log(
            "BULK_CHANNEL_PRICE",
            f"Bulk updated {updated} channel prices ({method})",
            entity_type="recipe",
        )
        return {
            'updated': updated,
            'skipped': skipped,
            'failed': len(errors),
            'errors': errors,
        }

    def apply_price_list(self, entries, reason) -> Dict[str, Any]:
        """
        Apply pre-computed {'recipe_id', 'channel_id', 'price'} entries verbatim.

        Used after a preview was reviewed; no rounding is applied.
        """
        if not (reason or "").strip():
            raise ValidationError("Reason is required", field='reason')

        cleaned = []
        for entry in entries or []:
            price = quantize_money(require_non_negative(entry.get('price'), 'price'))
            cleaned.append((entry.get('recipe_id'), entry.get('channel_id'), price))

        tax_rate = Decimal(str(getattr(settings, 'COGS_DEFAULT_CHANNEL_TAX_RATE', 11)))
        updated = 0
        skipped = 0
        errors = []
        with transaction.atomic():
            for recipe_id, channel_id, price in cleaned:
                try:
                    recipe = self._get_recipe(recipe_id)
                    channel = self.get_channel(channel_id)
                except NotFoundError as e:
                    errors.append({
                        'recipe_id': recipe_id,
                        'channel_id': channel_id,
                        'error': e.message,
                    })
                    continue

                exists = ChannelPrice.all_objects.filter(
                    tenant=self.tenant, recipe=recipe, channel=channel
                ).exists()
                _, change, _ = self._write(
                    recipe, channel, price,
                    tax_rate=None if exists else tax_rate,
                    reason=reason, skip_unchanged=True,
                )
                if change is None:
                    skipped += 1
                else:
                    updated += 1

        self._log(
            "BULK_CHANNEL_PRICE",
            f"Applied {updated} channel prices from a price list",
            entity_type="recipe",
        )
        return {
            'updated': updated,
            'skipped': skipped,
            'failed': len(errors),
            'errors': errors,
        }
