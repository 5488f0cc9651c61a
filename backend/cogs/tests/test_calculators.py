"""
Tests for the pure costing and pricing formulas.
"""
import pytest
from decimal import Decimal

from cogs.calculators import (
    adjust_price,
    apply_rounding,
    compute_cost_per_unit,
    compute_final_price,
    compute_markup_price,
    compute_net_margin,
    compute_net_price,
    compute_price_change,
    compute_profit_margin,
    compute_recipe_costs,
    compute_target_profit_price,
    round_half_up,
    to_decimal,
)
from cogs.choices import BulkPriceMode, ChangeType, RoundingOption
from cogs.exceptions import ValidationError


class TestToDecimal:

    def test_accepts_strings_ints_and_floats(self):
        assert to_decimal("15000") == Decimal("15000")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", float("nan"), True])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValidationError):
            to_decimal(value, "price")


class TestCostPerUnit:

    def test_kilogram_to_gram(self):
        assert compute_cost_per_unit(15000, 1, 1000) == Decimal("15")

    def test_package_of_several_units(self):
        assert compute_cost_per_unit(20000, 2, 1000) == Decimal("10")

    def test_free_ingredient_is_allowed(self):
        assert compute_cost_per_unit(0, 1, 1) == Decimal("0")

    @pytest.mark.parametrize("price,size,factor", [
        (-1, 1, 1),
        (100, 0, 1),
        (100, 1, 0),
        (100, -2, 1),
    ])
    def test_invalid_inputs(self, price, size, factor):
        with pytest.raises(ValidationError):
            compute_cost_per_unit(price, size, factor)


class TestPriceChange:

    def test_increase(self):
        change = compute_price_change(15000, 16500)

        assert change.change_type == ChangeType.INCREASE
        assert change.price_change == Decimal("1500")
        assert change.percentage_change == Decimal("10")
        assert change.changed

    def test_decrease_stores_magnitudes(self):
        change = compute_price_change(2000, 1500)

        assert change.change_type == ChangeType.DECREASE
        assert change.price_change == Decimal("500")
        assert change.percentage_change == Decimal("25")

    def test_no_change(self):
        change = compute_price_change(1000, Decimal("1000.0000"))

        assert change.change_type == ChangeType.NO_CHANGE
        assert not change.changed

    def test_from_zero_has_no_percentage(self):
        change = compute_price_change(0, 500)

        assert change.change_type == ChangeType.INCREASE
        assert change.percentage_change == Decimal("0")


class TestProfitMargin:

    def test_margin(self):
        assert compute_profit_margin(1000, 600) == Decimal("40")

    def test_no_cost_means_no_margin(self):
        assert compute_profit_margin(1000, 0) == Decimal("0")

    def test_selling_below_cost_is_negative(self):
        assert compute_profit_margin(500, 600) == Decimal("-20")


class TestRecipeCosts:

    def test_rollup(self):
        costs = compute_recipe_costs(
            ingredient_costs=[Decimal("3000")],
            sub_recipe_costs=[],
            labor_cost=2000,
            operational_cost=500,
            packaging_cost=500,
            yield_quantity=10,
        )

        assert costs.ingredients_cost == Decimal("3000")
        assert costs.fixed_costs == Decimal("3000")
        assert costs.total_cogs == Decimal("6000")
        assert costs.cogs_per_serving == Decimal("600")
        assert costs.cost_per_unit == Decimal("0")

    def test_usable_as_ingredient_exposes_cost_per_unit(self):
        costs = compute_recipe_costs([Decimal("2000")], [Decimal("1000")], yield_quantity=3,
                                     can_be_used_as_ingredient=True)

        assert costs.cogs_per_serving == Decimal("1000")
        assert costs.cost_per_unit == Decimal("1000")

    @pytest.mark.parametrize("yield_quantity", [0, -1])
    def test_yield_must_be_positive(self, yield_quantity):
        with pytest.raises(ValidationError):
            compute_recipe_costs([Decimal("1")], [], yield_quantity=yield_quantity)


class TestRounding:

    def test_half_goes_up(self):
        assert round_half_up(Decimal("2.5")) == Decimal("3")
        assert round_half_up(Decimal("-2.5")) == Decimal("-2")

    @pytest.mark.parametrize("price,option,expected", [
        (Decimal("1234"), RoundingOption.HUNDRED, Decimal("1200")),
        (Decimal("1250"), RoundingOption.HUNDRED, Decimal("1300")),
        (Decimal("1234"), RoundingOption.THOUSAND, Decimal("1000")),
        (Decimal("1234.5"), RoundingOption.NONE, Decimal("1235")),
    ])
    def test_policies(self, price, option, expected):
        assert apply_rounding(price, option) == expected

    def test_custom_increment(self):
        assert apply_rounding(Decimal("1234"), RoundingOption.CUSTOM, 500) == Decimal("1000")
        assert apply_rounding(Decimal("1250"), RoundingOption.CUSTOM, 500) == Decimal("1500")

    def test_custom_increment_must_be_positive(self):
        with pytest.raises(ValidationError):
            apply_rounding(Decimal("1234"), RoundingOption.CUSTOM, 0)

    def test_unknown_option(self):
        with pytest.raises(ValidationError):
            apply_rounding(Decimal("1234"), "nearest-ten")


class TestAdjustPrice:

    @pytest.mark.parametrize("mode,value,expected", [
        (BulkPriceMode.SET, 12000, Decimal("12000")),
        (BulkPriceMode.INCREASE_PERCENT, 10, Decimal("11000")),
        (BulkPriceMode.DECREASE_PERCENT, 10, Decimal("9000")),
        (BulkPriceMode.INCREASE_AMOUNT, 500, Decimal("10500")),
        (BulkPriceMode.DECREASE_AMOUNT, 500, Decimal("9500")),
    ])
    def test_modes(self, mode, value, expected):
        assert adjust_price(Decimal("10000"), mode, value) == expected

    def test_result_is_rounded_to_integer(self):
        assert adjust_price(Decimal("1005"), BulkPriceMode.INCREASE_PERCENT, Decimal("5")) == Decimal("1055")

    def test_floored_at_zero(self):
        assert adjust_price(Decimal("300"), BulkPriceMode.DECREASE_AMOUNT, 500) == Decimal("0")

    def test_invalid_mode(self):
        with pytest.raises(ValidationError):
            adjust_price(Decimal("1000"), "double", 2)


class TestChannelFormulas:

    def test_final_price_includes_tax(self):
        assert compute_final_price(1000, 11) == Decimal("1110")

    def test_net_price_after_commission(self):
        assert compute_net_price(1000, 20) == Decimal("800")

    def test_net_margin(self):
        assert compute_net_margin(1000, 20, 600) == Decimal("25")

    def test_net_margin_undefined_without_net_price(self):
        assert compute_net_margin(1000, 100, 600) is None

    def test_markup(self):
        assert compute_markup_price(1000, 25) == Decimal("1250")

    def test_target_profit(self):
        assert compute_target_profit_price(600, 200, 20) == Decimal("1000")

    def test_target_profit_rejects_full_commission(self):
        with pytest.raises(ValidationError):
            compute_target_profit_price(600, 200, 100)
