"""
Tests for IngredientService.
"""
import pytest
from decimal import Decimal

from django.db import DatabaseError

from activity.models import ActivityLog
from catalog.models import Category, Unit, UnitType
from cogs.exceptions import ConflictError, NotFoundError, ValidationError
from cogs.models import Ingredient, IngredientPriceHistory
from cogs.services import IngredientService


@pytest.mark.django_db
class TestCreateAndUpdate:

    def test_create_computes_cost_and_generates_sku(self, flour):
        assert flour.cost_per_unit == Decimal("15")
        assert flour.sku == "ING-001"

    def test_create_keeps_given_sku(self, ingredient_service, kg, gram):
        ingredient = ingredient_service.create_ingredient({
            'name': 'Mentega',
            'sku': 'BTR-01',
            'purchase_price': 45000,
            'package_size': 1,
            'conversion_factor': 1000,
            'purchase_unit': kg.id,
            'usage_unit': gram.id,
        })

        assert ingredient.sku == "BTR-01"
        assert ingredient.cost_per_unit == Decimal("45")

    def test_failed_save_does_not_use_up_a_sku(self, ingredient_service, kg, gram, monkeypatch):
        def broken(*args, **kwargs):
            raise DatabaseError("disk full")

        data = {
            'name': 'Mentega',
            'purchase_price': 45000,
            'package_size': 1,
            'conversion_factor': 1000,
            'purchase_unit': kg.id,
            'usage_unit': gram.id,
        }
        monkeypatch.setattr(Ingredient, "save", broken)
        with pytest.raises(DatabaseError):
            ingredient_service.create_ingredient(data)
        monkeypatch.undo()

        assert ingredient_service.create_ingredient(data).sku == "ING-001"

    def test_duplicate_sku_is_a_conflict(self, ingredient_service, flour, kg, gram):
        with pytest.raises(ConflictError):
            ingredient_service.create_ingredient({
                'name': 'Tepung Lain',
                'sku': flour.sku,
                'purchase_price': 1,
                'purchase_unit': kg,
                'usage_unit': gram,
            })

    def test_units_are_required(self, ingredient_service, kg):
        with pytest.raises(ValidationError):
            ingredient_service.create_ingredient({'name': 'Garam', 'purchase_price': 1, 'purchase_unit': kg})

    @pytest.mark.parametrize("field,value", [
        ('purchase_price', -1),
        ('package_size', 0),
        ('conversion_factor', 0),
    ])
    def test_invalid_numbers_write_nothing(self, ingredient_service, kg, gram, field, value):
        data = {
            'name': 'Garam',
            'purchase_price': 5000,
            'package_size': 1,
            'conversion_factor': 1000,
            'purchase_unit': kg,
            'usage_unit': gram,
        }
        data[field] = value

        with pytest.raises(ValidationError):
            ingredient_service.create_ingredient(data)
        assert not Ingredient.all_objects.filter(name='Garam').exists()

    def test_unit_of_another_tenant_is_not_found(self, ingredient_service, tenant_b, gram):
        foreign_kg = Unit.all_objects.get(tenant=tenant_b, symbol='kg', type=UnitType.PURCHASE)

        with pytest.raises(NotFoundError):
            ingredient_service.create_ingredient({
                'name': 'Garam',
                'purchase_price': 1,
                'purchase_unit': foreign_kg.id,
                'usage_unit': gram.id,
            })

    def test_update_recomputes_cost_and_records_history(self, ingredient_service, flour):
        updated = ingredient_service.update_ingredient(flour.id, {'purchase_price': Decimal("18000")})

        assert updated.cost_per_unit == Decimal("18")
        history = IngredientPriceHistory.all_objects.get(ingredient=flour)
        assert history.old_price == Decimal("15000")
        assert history.new_price == Decimal("18000")
        assert history.percentage_change == Decimal("20")

    def test_update_without_price_change_records_nothing(self, ingredient_service, flour):
        ingredient_service.update_ingredient(flour.id, {'description': 'Protein sedang'})

        assert not IngredientPriceHistory.all_objects.filter(ingredient=flour).exists()

    def test_activity_is_logged(self, tenant_a, flour):
        assert ActivityLog.all_objects.filter(
            tenant=tenant_a, action="CREATE_INGREDIENT", entity_id=str(flour.id)
        ).exists()


@pytest.mark.django_db
class TestUpdatePrice:

    def test_price_increase(self, ingredient_service, flour):
        ingredient, change = ingredient_service.update_price(flour.id, Decimal("16500"))

        assert ingredient.purchase_price == Decimal("16500")
        assert ingredient.cost_per_unit == Decimal("16.5")
        assert change.change_type == "increase"
        assert change.price_change == Decimal("1500")
        assert change.percentage_change == Decimal("10")
        assert IngredientPriceHistory.all_objects.filter(ingredient=flour).count() == 1

    def test_new_package_size(self, ingredient_service, flour):
        ingredient, _ = ingredient_service.update_price(flour.id, Decimal("30000"), Decimal("2"))

        assert ingredient.package_size == Decimal("2")
        assert ingredient.cost_per_unit == Decimal("15")

    def test_same_price_writes_no_history(self, ingredient_service, flour):
        _, change = ingredient_service.update_price(flour.id, Decimal("15000"))

        assert change.change_type == "no_change"
        assert not IngredientPriceHistory.all_objects.filter(ingredient=flour).exists()

    def test_negative_price_is_rejected(self, ingredient_service, flour):
        with pytest.raises(ValidationError):
            ingredient_service.update_price(flour.id, Decimal("-1"))
        flour.refresh_from_db()
        assert flour.purchase_price == Decimal("15000")

    def test_zero_package_size_is_rejected(self, ingredient_service, flour):
        with pytest.raises(ValidationError):
            ingredient_service.update_price(flour.id, Decimal("16000"), Decimal("0"))

    def test_unknown_ingredient(self, ingredient_service):
        with pytest.raises(NotFoundError) as exc:
            ingredient_service.update_price(999999, Decimal("1"))
        assert exc.value.message == "Ingredient not found: 999999"

    def test_history_failure_does_not_block_update(self, ingredient_service, flour, monkeypatch):
        def broken(*args, **kwargs):
            raise ConflictError("history unavailable")

        monkeypatch.setattr(IngredientPriceHistory, "from_change", classmethod(broken))

        ingredient, change = ingredient_service.update_price(flour.id, Decimal("17000"))

        assert ingredient.purchase_price == Decimal("17000")
        assert change.changed
        assert not IngredientPriceHistory.all_objects.filter(ingredient=flour).exists()

    def test_history_is_newest_first_and_limited(self, ingredient_service, flour):
        for price in ("15100", "15200", "15300"):
            ingredient_service.update_price(flour.id, Decimal(price))

        _, history = ingredient_service.get_price_history(flour.id, limit=2)

        assert [h.new_price for h in history] == [Decimal("15300"), Decimal("15200")]


@pytest.mark.django_db
class TestDelete:

    def test_delete_unused(self, ingredient_service, sugar):
        ingredient_service.delete_ingredient(sugar.id)

        assert not Ingredient.all_objects.filter(pk=sugar.pk).exists()

    def test_delete_used_is_a_conflict(self, ingredient_service, flour, bread):
        with pytest.raises(ConflictError):
            ingredient_service.delete_ingredient(flour.id)

    def test_bulk_delete_reports_what_it_skipped(self, ingredient_service, flour, sugar, bread):
        result = ingredient_service.bulk_delete([flour.id, sugar.id, 999999])

        assert result['deleted'] == 1
        assert result['skipped'] == 2
        assert {error['id'] for error in result['errors']} == {flour.id, 999999}
        assert Ingredient.all_objects.filter(pk=flour.pk).exists()


@pytest.mark.django_db
class TestCsv:

    def _row(self, **overrides):
        row = {
            'name': 'Telur',
            'description': 'Telur ayam',
            'categoryname': 'Protein',
            'purchaseprice': '28000',
            'packagesize': '1',
            'purchaseunitname': 'Tray',
            'purchaseunitsymbol': 'tray',
            'usageunitname': 'piece',
            'usageunitsymbol': 'pcs',
            'conversionfactor': '30',
        }
        row.update(overrides)
        return row

    def test_import_creates_units_category_and_ingredient(self, tenant_a, ingredient_service):
        result = ingredient_service.import_rows([self._row()])

        assert result == {'created': 1, 'updated': 0, 'failed': 0, 'errors': []}
        egg = Ingredient.all_objects.get(tenant=tenant_a, name='Telur')
        assert egg.category.name == 'Protein'
        assert egg.purchase_unit.symbol == 'tray'
        assert egg.usage_unit.type == UnitType.USAGE
        assert egg.cost_per_unit.quantize(Decimal("0.01")) == Decimal("933.33")
        assert egg.sku
        assert Category.all_objects.filter(tenant=tenant_a, name='Protein').count() == 1

    def test_import_updates_by_name_and_records_price_change(self, ingredient_service, flour):
        result = ingredient_service.import_rows([self._row(
            name='Tepung Terigu', purchaseprice='16000', purchaseunitname='kilogram',
            purchaseunitsymbol='kg', usageunitname='gram', usageunitsymbol='g',
            conversionfactor='1000',
        )])

        assert result['updated'] == 1
        flour.refresh_from_db()
        assert flour.purchase_price == Decimal("16000")
        assert IngredientPriceHistory.all_objects.filter(ingredient=flour).count() == 1

    def test_bad_rows_are_reported_with_row_numbers(self, ingredient_service):
        result = ingredient_service.import_rows([
            self._row(),
            self._row(name='Minyak', purchaseprice='abc'),
            self._row(name='Garam', packagesize='0'),
        ])

        assert result['created'] == 1
        assert result['failed'] == 2
        assert [error['row'] for error in result['errors']] == [3, 4]

    def test_export_rows_follow_header_order(self, ingredient_service, flour):
        rows = ingredient_service.export_rows()

        assert rows == [[
            'Tepung Terigu', '', 'Bahan Kering',
            flour.purchase_price, flour.package_size,
            'kilogram', 'kg', 'gram', 'g',
            flour.conversion_factor,
        ]]


@pytest.mark.django_db
@pytest.mark.tenant_isolation
class TestIngredientTenantIsolation:

    def test_other_tenant_cannot_see_ingredient(self, tenant_b, flour):
        service = IngredientService(tenant_b)

        with pytest.raises(NotFoundError):
            service.get_ingredient(flour.id)
        with pytest.raises(NotFoundError):
            service.update_price(flour.id, Decimal("1"))
