"""
Tests for SkuService and SettingsService.
"""
from threading import Barrier, Thread

import pytest
from django.db import connection

from settings.models import SkuSettings, DecimalSettings
from settings.services import SettingsService, SkuService


@pytest.mark.django_db
class TestSkuService:

    def test_format_sku(self):
        assert SkuService.format_sku("ING", "-", 7, 3) == "ING-007"
        assert SkuService.format_sku("RCP", "", 12345, 3) == "RCP12345"

    def test_generate_creates_settings_and_starts_at_one(self, tenant_a):
        assert not SkuSettings.all_objects.filter(tenant=tenant_a).exists()

        sku = SkuService.generate_sku("ingredient", tenant_a)

        assert sku == "ING-001"
        settings = SkuSettings.all_objects.get(tenant=tenant_a)
        assert settings.next_ingredient_number == 2
        assert settings.next_recipe_number == 1

    def test_sequential_numbers_are_distinct(self, tenant_a):
        skus = [SkuService.generate_sku("recipe", tenant_a) for _ in range(3)]

        assert skus == ["RCP-001", "RCP-002", "RCP-003"]

    def test_counters_are_per_tenant(self, tenant_a, tenant_b):
        SkuService.generate_sku("ingredient", tenant_a)
        SkuService.generate_sku("ingredient", tenant_a)

        assert SkuService.generate_sku("ingredient", tenant_b) == "ING-001"

    def test_uses_custom_settings(self, tenant_a):
        SettingsService.update_sku_settings(tenant_a, {
            "ingredient_prefix": "BHN",
            "separator": "/",
            "number_padding": 5,
            "next_ingredient_number": 42,
        })

        assert SkuService.generate_sku("ingredient", tenant_a) == "BHN/00042"

    def test_unknown_entity_type(self, tenant_a):
        with pytest.raises(ValueError):
            SkuService.generate_sku("supplier", tenant_a)

    def test_try_generate_returns_none_on_failure(self, tenant_a, monkeypatch):
        def boom(entity_type, tenant):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(SkuService, "generate_sku", staticmethod(boom))

        assert SkuService.try_generate_sku("ingredient", tenant_a) is None


@pytest.mark.django_db
class TestSettingsService:

    def test_defaults_created_on_first_access(self, tenant_a):
        sku = SettingsService.get_sku_settings(tenant_a)
        decimal = SettingsService.get_decimal_settings(tenant_a)

        assert sku.ingredient_prefix == "ING"
        assert sku.recipe_prefix == "RCP"
        assert sku.number_padding == 3
        assert decimal.decimal_places == 2
        assert decimal.currency_symbol == "Rp"
        assert DecimalSettings.all_objects.filter(tenant=tenant_a).count() == 1

    def test_repeated_access_returns_same_row(self, tenant_a):
        first = SettingsService.get_decimal_settings(tenant_a)
        second = SettingsService.get_decimal_settings(tenant_a)

        assert first.pk == second.pk

    def test_update_ignores_unknown_fields(self, tenant_a):
        obj = SettingsService.update_decimal_settings(tenant_a, {
            "decimal_places": 0,
            "tenant": None,
        })

        assert obj.decimal_places == 0
        assert obj.tenant_id == tenant_a.id


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    not connection.features.has_select_for_update,
    reason="database backend has no row locking",
)
class TestConcurrentSkuGeneration:

    def test_concurrent_callers_get_consecutive_numbers(self, tenant_a):
        SettingsService.get_sku_settings(tenant_a)
        thread_count = 10
        barrier = Barrier(thread_count)
        skus = []
        errors = []

        def allocate(thread_id):
            try:
                barrier.wait()
                skus.append(SkuService.generate_sku("ingredient", tenant_a))
            except Exception as e:
                errors.append(f"thread_{thread_id}: {e}")
            finally:
                connection.close()

        threads = [Thread(target=allocate, args=(i,)) for i in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sorted(int(sku.split("-")[1]) for sku in skus) == list(range(1, thread_count + 1))
        settings = SkuSettings.all_objects.get(tenant=tenant_a)
        assert settings.next_ingredient_number == thread_count + 1
