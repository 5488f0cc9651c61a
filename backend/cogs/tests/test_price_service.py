"""
Tests for RecipePriceService.
"""
import pytest
from decimal import Decimal

from cogs.exceptions import NotFoundError, ValidationError
from cogs.models import RecipePriceHistory
from cogs.services import RecipePriceService
from cogs.services.price_service import PRICE_CSV_HEADERS


@pytest.fixture
def price_service(tenant_a, owner_a):
    return RecipePriceService(tenant_a, user=owner_a)


@pytest.mark.django_db
class TestSetSellingPrice:

    def test_sets_price_margin_and_history(self, price_service, bread):
        result = price_service.set_selling_price(bread.id, Decimal("1000"))

        bread.refresh_from_db()
        assert bread.selling_price == Decimal("1000")
        assert bread.profit_margin == Decimal("40")
        assert result.history.old_price == Decimal("0")
        assert result.history.new_price == Decimal("1000")
        assert result.history.change_type == "increase"
        assert result.history.reason == "Manual price update"

    def test_unchanged_price_is_still_recorded(self, price_service, bread):
        price_service.set_selling_price(bread.id, Decimal("1000"))
        result = price_service.set_selling_price(bread.id, Decimal("1000"), reason="Cek ulang")

        assert result.change.change_type == "no_change"
        assert RecipePriceHistory.all_objects.filter(recipe=bread).count() == 2

    def test_decrease_is_stored_as_magnitude(self, price_service, bread):
        price_service.set_selling_price(bread.id, Decimal("1000"))
        result = price_service.set_selling_price(bread.id, Decimal("800"))

        assert result.history.change_type == "decrease"
        assert result.history.price_change == Decimal("200")
        assert result.history.percentage_change == Decimal("20")

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-5")])
    def test_price_must_be_positive(self, price_service, bread, price):
        with pytest.raises(ValidationError):
            price_service.set_selling_price(bread.id, price)
        assert not RecipePriceHistory.all_objects.filter(recipe=bread).exists()

    def test_unknown_recipe(self, price_service):
        with pytest.raises(NotFoundError):
            price_service.set_selling_price(999999, Decimal("1000"))

    def test_history_newest_first(self, price_service, bread):
        for price in ("900", "1000", "1100"):
            price_service.set_selling_price(bread.id, Decimal(price))

        _, history = price_service.get_price_history(bread.id, limit=2)

        assert [h.new_price for h in history] == [Decimal("1100"), Decimal("1000")]


@pytest.mark.django_db
class TestBulkAdjustPrice:

    def test_set_mode(self, price_service, bread, dough):
        result = price_service.bulk_adjust_price([bread.id, dough.id], "set", 1500)

        assert result == {'processed': 2, 'updated': 2, 'skipped': 0, 'failed': 0, 'errors': []}
        dough.refresh_from_db()
        assert dough.selling_price == Decimal("1500")
        assert dough.profit_margin.quantize(Decimal("0.01")) == Decimal("33.33")

    def test_percent_increase_rounds_to_integer(self, price_service, bread):
        price_service.set_selling_price(bread.id, Decimal("1005"))

        price_service.bulk_adjust_price([bread.id], "increase_percent", 5)

        bread.refresh_from_db()
        assert bread.selling_price == Decimal("1055")

    def test_unchanged_prices_are_skipped(self, price_service, bread):
        result = price_service.bulk_adjust_price([bread.id], "increase_percent", 10)

        assert result['updated'] == 0
        assert result['skipped'] == 1
        assert not RecipePriceHistory.all_objects.filter(recipe=bread).exists()

    def test_missing_ids_are_reported(self, price_service, bread):
        result = price_service.bulk_adjust_price([bread.id, 999999], "set", 1000)

        assert result['updated'] == 1
        assert result['failed'] == 1
        assert result['errors'] == [{'id': 999999, 'error': "Recipe not found: 999999"}]

    def test_no_selection(self, price_service):
        with pytest.raises(ValidationError) as exc:
            price_service.bulk_adjust_price([], "set", 1000)
        assert exc.value.message == "No recipes selected"

    def test_invalid_mode(self, price_service, bread):
        with pytest.raises(ValidationError) as exc:
            price_service.bulk_adjust_price([bread.id], "double", 2)
        assert exc.value.message == "Invalid mode: double"

    def test_nothing_found(self, price_service):
        with pytest.raises(NotFoundError) as exc:
            price_service.bulk_adjust_price([999998, 999999], "set", 1000)
        assert exc.value.message == "Recipes not found"


@pytest.mark.django_db
class TestPriceCsv:

    def _row(self, recipe_id, new_price, reason=""):
        return {'ID': str(recipe_id), 'Harga Jual Baru': new_price, 'Alasan Perubahan': reason}

    def test_import_updates_and_reports_rows(self, price_service, bread, dough):
        result = price_service.import_price_rows([
            self._row(bread.id, "1200", "Harga pasar"),
            self._row(dough.id, "0"),
            self._row("", "1000"),
            self._row(bread.id, "mahal"),
            self._row(999999, "1000"),
        ])

        assert result['total'] == 5
        assert result['processed'] == 2
        assert result['updated'] == 1
        assert result['failed'] == 3
        assert result['errors'] == [
            {'row': 4, 'error': "Missing ID or new price"},
            {'row': 5, 'error': "Invalid new price: mahal"},
            {'row': 6, 'error': "Recipe not found: 999999"},
        ]

        history = RecipePriceHistory.all_objects.get(recipe=bread)
        assert history.new_price == Decimal("1200")
        assert history.reason == "Harga pasar"

    def test_negative_price_is_rejected(self, price_service, bread):
        result = price_service.import_price_rows([self._row(bread.id, "-1")])

        assert result['errors'] == [{'row': 2, 'error': "Invalid new price: -1"}]

    def test_export_rows(self, price_service, bread, dough):
        rows = list(price_service.export_price_rows())

        assert [row[1] for row in rows] == ['Adonan Dasar', 'Roti Tawar']
        assert all(len(row) == len(PRICE_CSV_HEADERS) for row in rows)
        assert rows[1][2] == bread.sku
        assert rows[1][4] == 'Makanan'
        assert rows[1][5] == Decimal("600")
        assert rows[1][8:] == ["", ""]

    def test_search_matches_category(self, price_service, bread, dough):
        rows = list(price_service.price_manager_rows(search="makan"))

        assert [recipe.id for recipe in rows] == [bread.id]
