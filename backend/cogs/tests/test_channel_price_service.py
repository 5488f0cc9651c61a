"""
Tests for ChannelPriceService.
"""
import pytest
from decimal import Decimal

from cogs.exceptions import NotFoundError, ValidationError
from cogs.models import ChannelPrice, ChannelPriceHistory, Recipe, SalesChannel
from cogs.services import ChannelPriceService, RecipePriceService


@pytest.fixture
def channel_service(tenant_a, owner_a):
    return ChannelPriceService(tenant_a, user=owner_a)


@pytest.fixture
def priced_bread(tenant_a, bread):
    """Roti Tawar selling at 1000 with COGS 600 per serving."""
    return RecipePriceService(tenant_a).set_selling_price(bread.id, Decimal("1000")).recipe


@pytest.mark.django_db
class TestSalesChannels:

    def test_create_and_list_by_name(self, channel_service):
        channel_service.create_channel({'name': 'ShopeeFood', 'commission': 20})
        channel_service.create_channel({'name': ' Dine In '})

        assert [c.name for c in channel_service.list_channels()] == ['Dine In', 'ShopeeFood']

    def test_name_is_required(self, channel_service):
        with pytest.raises(ValidationError):
            channel_service.create_channel({'commission': 10})
        with pytest.raises(ValidationError):
            channel_service.create_channel({'name': '   '})

    @pytest.mark.parametrize("commission", [-1, 101])
    def test_commission_is_a_percentage(self, channel_service, commission):
        with pytest.raises(ValidationError):
            channel_service.create_channel({'name': 'GrabFood', 'commission': commission})

    def test_delete_removes_channel_prices(self, channel_service, bread, delivery):
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1250"))

        channel_service.delete_channel(delivery.id)

        assert not SalesChannel.all_objects.filter(pk=delivery.pk).exists()
        assert not ChannelPrice.all_objects.filter(recipe=bread).exists()
        assert not ChannelPriceHistory.all_objects.filter(tenant=bread.tenant).exists()


@pytest.mark.django_db
class TestUpsertChannelPrice:

    def test_new_row_computes_final_price_and_records_history(self, channel_service, bread, delivery):
        channel_price = channel_service.upsert_channel_price(
            bread.id, delivery.id, Decimal("1000"), tax_rate=Decimal("11")
        )

        assert channel_price.final_price == Decimal("1110")
        assert channel_price.commission == Decimal("20")
        history = ChannelPriceHistory.all_objects.get(channel_price=channel_price)
        assert history.old_price == Decimal("0")
        assert history.new_price == Decimal("1000")
        assert history.reason == "Manual channel price update"

    def test_new_row_without_tax_has_no_tax(self, channel_service, bread, dine_in):
        channel_price = channel_service.upsert_channel_price(bread.id, dine_in.id, Decimal("1000"))

        assert channel_price.tax_rate == Decimal("0")
        assert channel_price.final_price == Decimal("1000")

    def test_change_keeps_snapshot_and_records_history(self, channel_service, bread, delivery):
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1000"), commission=15)

        channel_price = channel_service.upsert_channel_price(
            bread.id, delivery.id, Decimal("1200"), reason="Promo selesai"
        )

        assert channel_price.commission == Decimal("15")
        assert ChannelPrice.all_objects.filter(recipe=bread, channel=delivery).count() == 1
        latest = channel_service.get_history(bread.id, delivery.id, limit=1)[0]
        assert latest.old_price == Decimal("1000")
        assert latest.new_price == Decimal("1200")
        assert latest.percentage_change == Decimal("20")
        assert latest.reason == "Promo selesai"

    def test_unchanged_price_writes_no_history(self, channel_service, bread, delivery):
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1000"))
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1000"), tax_rate=11)

        channel_price = ChannelPrice.all_objects.get(recipe=bread, channel=delivery)
        assert channel_price.final_price == Decimal("1110")
        assert ChannelPriceHistory.all_objects.filter(channel_price=channel_price).count() == 1

    def test_negative_price_is_rejected(self, channel_service, bread, delivery):
        with pytest.raises(ValidationError):
            channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("-1"))

    def test_channel_of_another_tenant_is_not_found(self, tenant_b, bread, delivery):
        with pytest.raises(NotFoundError):
            ChannelPriceService(tenant_b).upsert_channel_price(bread.id, delivery.id, Decimal("1000"))


@pytest.mark.django_db
class TestChannelPriceReads:

    def test_list_falls_back_to_selling_price(self, channel_service, priced_bread, dine_in, delivery):
        channel_service.upsert_channel_price(priced_bread.id, delivery.id, Decimal("1250"), tax_rate=10)

        entries = channel_service.list_channel_prices(priced_bread.id)

        assert [entry['channel_name'] for entry in entries] == ['Dine In', 'GoFood']
        dine_in_entry, delivery_entry = entries
        assert dine_in_entry['channel_price_id'] is None
        assert dine_in_entry['price'] == Decimal("1000")
        assert dine_in_entry['net_margin'] == Decimal("40")
        assert delivery_entry['price'] == Decimal("1250")
        assert delivery_entry['final_price'] == Decimal("1375")
        assert delivery_entry['net_margin'] == Decimal("40")

    def test_all_history_across_channels(self, channel_service, bread, dine_in, delivery):
        channel_service.upsert_channel_price(bread.id, dine_in.id, Decimal("900"))
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1100"))

        history = channel_service.get_all_history(bread.id)

        assert {h.channel_price.channel_id for h in history} == {dine_in.id, delivery.id}


@pytest.mark.django_db
class TestSaveChannelPrices:

    def test_unknown_channel_is_reported(self, channel_service, bread, dine_in):
        results = channel_service.save_channel_prices(bread.id, [
            {'channel_id': dine_in.id, 'price': 1000},
            {'channel_id': 999999, 'price': 1000},
        ])

        assert results[0]['success'] is True
        assert results[0]['created'] is True
        assert results[1] == {'channel_id': 999999, 'success': False, 'error': "Sales channel not found"}

    def test_invalid_entry_aborts_batch(self, channel_service, bread, dine_in, delivery):
        with pytest.raises(ValidationError):
            channel_service.save_channel_prices(bread.id, [
                {'channel_id': dine_in.id, 'price': 1000},
                {'channel_id': delivery.id, 'price': 1000, 'commission': 150},
            ])

        assert not ChannelPrice.all_objects.filter(recipe=bread).exists()


@pytest.mark.django_db
class TestBulkChannelPricing:

    def test_markup_with_rounding_creates_taxed_rows(self, channel_service, priced_bread, dine_in, delivery):
        result = channel_service.bulk_update(
            [priced_bread.id], 'markup', markup_percentage=25,
            rounding_option='hundred', reason="Harga baru",
        )

        assert result == {'updated': 2, 'skipped': 0, 'failed': 0, 'errors': []}
        for channel_price in ChannelPrice.all_objects.filter(recipe=priced_bread):
            assert channel_price.price == Decimal("1300")
            assert channel_price.tax_rate == Decimal("11")
            assert channel_price.final_price == Decimal("1443")

    def test_profit_target_grosses_up_commission(self, channel_service, bread, dine_in, delivery):
        channel_service.bulk_update(
            [bread.id], 'profit', target_profit_amount=200, reason="Target laba"
        )

        prices = {
            cp.channel_id: cp.price for cp in ChannelPrice.all_objects.filter(recipe=bread)
        }
        assert prices == {dine_in.id: Decimal("800"), delivery.id: Decimal("1000")}

    def test_profit_target_uses_channel_commission(self, channel_service, bread, delivery):
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1500"), commission=Decimal("50"))

        channel_service.bulk_update(
            [bread.id], 'profit', target_profit_amount=200, reason="Target laba"
        )

        channel_price = ChannelPrice.all_objects.get(recipe=bread, channel=delivery)
        assert channel_price.price == Decimal("1000")
        assert channel_price.commission == Decimal("50")

    def test_markup_without_selling_price_leaves_prices_alone(self, channel_service, bread, delivery):
        channel_service.upsert_channel_price(bread.id, delivery.id, Decimal("1500"))
        history_before = ChannelPriceHistory.all_objects.count()

        result = channel_service.bulk_update(
            [bread.id], 'markup', markup_percentage=10, reason="Harga baru"
        )

        assert result == {'updated': 0, 'skipped': 0, 'failed': 0, 'errors': []}
        assert ChannelPrice.all_objects.get(recipe=bread, channel=delivery).price == Decimal("1500")
        assert ChannelPriceHistory.all_objects.count() == history_before

    def test_profit_without_cogs_is_not_priced(self, channel_service, bread, dine_in):
        Recipe.all_objects.filter(pk=bread.pk).update(cogs_per_serving=0)

        preview = channel_service.preview_bulk_update(
            [bread.id], 'profit', target_profit_amount=200
        )
        result = channel_service.bulk_update(
            [bread.id], 'profit', target_profit_amount=200, reason="Target laba"
        )

        assert preview['items'] == []
        assert result['updated'] == 0
        assert not ChannelPrice.all_objects.filter(recipe=bread).exists()

    def test_second_run_is_skipped(self, channel_service, priced_bread, dine_in):
        channel_service.bulk_update([priced_bread.id], 'markup', markup_percentage=10, reason="a")
        result = channel_service.bulk_update([priced_bread.id], 'markup', markup_percentage=10, reason="b")

        assert result['updated'] == 0
        assert result['skipped'] == 1
        assert ChannelPriceHistory.all_objects.filter(reason="b").count() == 0

    def test_reason_is_required(self, channel_service, bread, dine_in):
        with pytest.raises(ValidationError) as exc:
            channel_service.bulk_update([bread.id], 'markup', markup_percentage=10, reason=" ")
        assert exc.value.message == "Reason is required"

    def test_needs_a_channel(self, channel_service, bread):
        with pytest.raises(ValidationError) as exc:
            channel_service.bulk_update([bread.id], 'markup', markup_percentage=10, reason="x")
        assert exc.value.message == "No sales channels found"

    def test_custom_rounding_must_be_positive(self, channel_service, bread, dine_in):
        with pytest.raises(ValidationError):
            channel_service.preview_bulk_update(
                [bread.id], 'markup', markup_percentage=10,
                rounding_option='custom', custom_rounding=0,
            )

    def test_preview_writes_nothing(self, channel_service, priced_bread, delivery):
        preview = channel_service.preview_bulk_update(
            [priced_bread.id, 999999], 'markup', markup_percentage=20
        )

        assert preview['errors'] == [{'id': 999999, 'error': "Recipe not found: 999999"}]
        item = preview['items'][0]
        assert item['current_price'] == Decimal("0")
        assert item['new_price'] == Decimal("1200")
        assert item['change_type'] == "increase"
        assert item['net_margin'] == Decimal("37.5")
        assert not ChannelPrice.all_objects.filter(recipe=priced_bread).exists()

    def test_apply_price_list(self, channel_service, bread, dine_in):
        result = channel_service.apply_price_list([
            {'recipe_id': bread.id, 'channel_id': dine_in.id, 'price': 1234},
            {'recipe_id': 999999, 'channel_id': dine_in.id, 'price': 1000},
        ], reason="Dari pratinjau")

        assert result['updated'] == 1
        assert result['errors'] == [
            {'recipe_id': 999999, 'channel_id': dine_in.id, 'error': "Recipe not found: 999999"}
        ]
        channel_price = ChannelPrice.all_objects.get(recipe=bread, channel=dine_in)
        assert channel_price.price == Decimal("1234")
        assert channel_price.tax_rate == Decimal("11")
