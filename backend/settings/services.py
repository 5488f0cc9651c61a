"""
Settings Service Layer

Business logic for the per-business SKU and decimal settings, and the SKU sequencer.
"""
import logging
from typing import Any, Dict

from django.db import transaction
from django.db.models import F

from .models import SkuSettings, DecimalSettings, SkuEntityType

logger = logging.getLogger(__name__)


class SettingsService:
    """
    Get-or-create and update for the singleton settings rows of a tenant.

    Rows are created with defaults on first access.
    """

    SKU_FIELDS = (
        'ingredient_prefix',
        'recipe_prefix',
        'number_padding',
        'separator',
        'next_ingredient_number',
        'next_recipe_number',
    )
    DECIMAL_FIELDS = (
        'decimal_places',
        'rounding_method',
        'thousand_separator',
        'decimal_separator',
        'currency_symbol',
        'currency_position',
        'show_trailing_zeros',
    )

    @staticmethod
    def get_sku_settings(tenant) -> SkuSettings:
        obj, created = SkuSettings.all_objects.get_or_create(tenant=tenant)
        if created:
            logger.info(f"Created default SKU settings for tenant {tenant.slug}")
        return obj

    @staticmethod
    def get_decimal_settings(tenant) -> DecimalSettings:
        obj, created = DecimalSettings.all_objects.get_or_create(tenant=tenant)
        if created:
            logger.info(f"Created default decimal settings for tenant {tenant.slug}")
        return obj

    @staticmethod
    @transaction.atomic
    def update_sku_settings(tenant, update_data: Dict[str, Any]) -> SkuSettings:
        """
        Apply already-validated fields to the tenant's SKU settings.

        Locks the row so a concurrent generate_sku cannot interleave with a
        counter reset.
        """
        SettingsService.get_sku_settings(tenant)
        obj = SkuSettings.all_objects.select_for_update().get(tenant=tenant)
        for field in SettingsService.SKU_FIELDS:
            if field in update_data:
                setattr(obj, field, update_data[field])
        obj.save()
        return obj

    @staticmethod
    def update_decimal_settings(tenant, update_data: Dict[str, Any]) -> DecimalSettings:
        obj = SettingsService.get_decimal_settings(tenant)
        for field in SettingsService.DECIMAL_FIELDS:
            if field in update_data:
                setattr(obj, field, update_data[field])
        obj.save()
        return obj


class SkuService:
    """
    Sequential SKU numbering per tenant and entity type.
    """

    @staticmethod
    def format_sku(prefix, separator, number, padding):
        return f"{prefix}{separator}{str(number).zfill(padding)}"

    @staticmethod
    def generate_sku(entity_type, tenant) -> str:
        """
        Allocate the next SKU for `entity_type` ('ingredient' or 'recipe').

        The settings row is locked with SELECT ... FOR UPDATE, the counter is read
        and then advanced with an F() expression, all in one transaction, so
        concurrent callers for the same tenant always receive distinct numbers.
        """
        if entity_type not in SkuEntityType.values:
            raise ValueError(f"Unknown SKU entity type '{entity_type}'")

        with transaction.atomic():
            SkuSettings.all_objects.get_or_create(tenant=tenant)
            settings = SkuSettings.all_objects.select_for_update().get(tenant=tenant)

            counter_field = SkuSettings.counter_field_for(entity_type)
            number = getattr(settings, counter_field)

            SkuSettings.all_objects.filter(pk=settings.pk).update(
                **{counter_field: F(counter_field) + 1}
            )

        return SkuService.format_sku(
            settings.prefix_for(entity_type),
            settings.separator,
            number,
            settings.number_padding,
        )

    @staticmethod
    def ensure_sku(entity, entity_type):
        """
        Backfill a SKU on an ingredient or recipe that has none.

        Returns the entity's SKU.
        """
        if entity.sku:
            return entity.sku

        sku = SkuService.generate_sku(entity_type, entity.tenant)
        type(entity).all_objects.filter(pk=entity.pk).update(sku=sku)
        entity.sku = sku
        return sku

    @staticmethod
    def try_generate_sku(entity_type, tenant):
        """
        generate_sku for entity creation paths: a failure is logged and yields
        None so the entity is still created, without a SKU.
        """
        try:
            with transaction.atomic():
                return SkuService.generate_sku(entity_type, tenant)
        except Exception as e:
            logger.error(f"Failed to generate {entity_type} SKU for tenant {tenant.slug}: {e}")
            return None
