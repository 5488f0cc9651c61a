"""
Pure pricing and costing arithmetic.

Everything here works on Decimal and has no database access, so services,
serializers and tests share the same numbers. Inputs may be int, str, float
or Decimal; floats are converted through their shortest repr.

Rounding to whole prices follows JavaScript's Math.round (half toward
positive infinity), which is what the price screens display.
"""
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP
from typing import Iterable, Optional

from cogs.choices import BulkPriceMode, ChangeType, RoundingOption
from cogs.exceptions import ValidationError

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Storage precision
MONEY_QUANT = Decimal("0.0001")
UNIT_COST_QUANT = Decimal("0.000001")

ROUNDING_INCREMENTS = {
    RoundingOption.NONE: Decimal("1"),
    RoundingOption.HUNDRED: Decimal("100"),
    RoundingOption.THOUSAND: Decimal("1000"),
}


def to_decimal(value, field="value") -> Decimal:
    """
    Convert user or database input to a finite Decimal.

    Raises:
        ValidationError: for missing, non-numeric, NaN or infinite input.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value}", field=field)

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"Invalid {field}: {value}", field=field)
        result = Decimal(repr(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"Invalid {field}: {value}", field=field)

    if not result.is_finite():
        raise ValidationError(f"Invalid {field}: {value}", field=field)
    return result


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def quantize_unit_cost(value) -> Decimal:
    return to_decimal(value).quantize(UNIT_COST_QUANT, rounding=ROUND_HALF_UP)


def require_positive(value, field) -> Decimal:
    result = to_decimal(value, field)
    if result <= 0:
        raise ValidationError(f"{field} must be greater than 0", field=field)
    return result


def require_non_negative(value, field) -> Decimal:
    result = to_decimal(value, field)
    if result < 0:
        raise ValidationError(f"{field} cannot be negative", field=field)
    return result


def require_percentage(value, field) -> Decimal:
    """A percentage between 0 and 100 inclusive."""
    result = require_non_negative(value, field)
    if result > HUNDRED:
        raise ValidationError(f"{field} must be between 0 and 100", field=field)
    return result


# =============================================================================
# Ingredient cost
# =============================================================================

def compute_cost_per_unit(purchase_price, package_size, conversion_factor) -> Decimal:
    """
    Cost of one usage unit.

    cost_per_unit = purchase_price / (package_size * conversion_factor)

    Example: 15000 for 1 kg, 1000 g per kg -> 15 per gram.
    """
    price = require_non_negative(purchase_price, "purchase_price")
    size = require_positive(package_size, "package_size")
    factor = require_positive(conversion_factor, "conversion_factor")
    return quantize_unit_cost(price / (size * factor))


# =============================================================================
# Price changes
# =============================================================================

@dataclass(frozen=True)
class PriceChange:
    """
    One price transition.

    price_change and percentage_change are magnitudes; change_type keeps the
    direction.
    """
    old_price: Decimal
    new_price: Decimal
    price_change: Decimal
    percentage_change: Decimal
    change_type: str

    @property
    def changed(self) -> bool:
        return self.change_type != ChangeType.NO_CHANGE

    def as_dict(self):
        return {
            'old_price': self.old_price,
            'new_price': self.new_price,
            'price_change': self.price_change,
            'percentage_change': self.percentage_change,
            'change_type': self.change_type,
        }


def compute_price_change(old_price, new_price) -> PriceChange:
    old = to_decimal(old_price or 0, "old_price")
    new = to_decimal(new_price, "new_price")
    delta = new - old
    percentage = (delta / old * HUNDRED) if old > 0 else ZERO

    if delta > 0:
        change_type = ChangeType.INCREASE
    elif delta < 0:
        change_type = ChangeType.DECREASE
    else:
        change_type = ChangeType.NO_CHANGE

    return PriceChange(
        old_price=quantize_money(old),
        new_price=quantize_money(new),
        price_change=quantize_money(abs(delta)),
        percentage_change=quantize_money(abs(percentage)),
        change_type=change_type,
    )


def compute_profit_margin(selling_price, cogs_per_serving) -> Decimal:
    """Margin as a percentage of the selling price; 0 when there is no cost or price."""
    price = to_decimal(selling_price or 0, "selling_price")
    cogs = to_decimal(cogs_per_serving or 0, "cogs_per_serving")
    if cogs <= 0 or price <= 0:
        return ZERO
    return quantize_money((price - cogs) / price * HUNDRED)


# =============================================================================
# Recipe rollup
# =============================================================================

@dataclass(frozen=True)
class RecipeCosts:
    ingredients_cost: Decimal
    sub_recipes_cost: Decimal
    fixed_costs: Decimal
    total_cogs: Decimal
    cogs_per_serving: Decimal
    cost_per_unit: Decimal


def compute_line_cost(unit_cost, quantity) -> Decimal:
    return quantize_unit_cost(to_decimal(unit_cost, "unit_cost") * to_decimal(quantity, "quantity"))


def compute_recipe_costs(
    ingredient_costs: Iterable[Decimal],
    sub_recipe_costs: Iterable[Decimal],
    labor_cost=0,
    operational_cost=0,
    packaging_cost=0,
    yield_quantity=1,
    can_be_used_as_ingredient=False,
) -> RecipeCosts:
    """
    Roll line costs and fixed costs up into COGS.

    total_cogs       = ingredients + sub-recipes + labor + operational + packaging
    cogs_per_serving = total_cogs / yield_quantity
    cost_per_unit    = cogs_per_serving if usable as an ingredient, else 0
    """
    servings = require_positive(yield_quantity, "yield_quantity")
    labor = require_non_negative(labor_cost or 0, "labor_cost")
    operational = require_non_negative(operational_cost or 0, "operational_cost")
    packaging = require_non_negative(packaging_cost or 0, "packaging_cost")

    ingredients_total = sum((to_decimal(c) for c in ingredient_costs), ZERO)
    sub_recipes_total = sum((to_decimal(c) for c in sub_recipe_costs), ZERO)
    fixed = labor + operational + packaging
    total = ingredients_total + sub_recipes_total + fixed
    per_serving = quantize_unit_cost(total / servings)

    return RecipeCosts(
        ingredients_cost=quantize_unit_cost(ingredients_total),
        sub_recipes_cost=quantize_unit_cost(sub_recipes_total),
        fixed_costs=quantize_money(fixed),
        total_cogs=quantize_unit_cost(total),
        cogs_per_serving=per_serving,
        cost_per_unit=per_serving if can_be_used_as_ingredient else ZERO,
    )


# =============================================================================
# Selling and channel prices
# =============================================================================

def round_half_up(value, increment=ONE) -> Decimal:
    """Round to the nearest multiple of `increment`; halves go up."""
    amount = to_decimal(value)
    step = to_decimal(increment, "increment")
    return (amount / step + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR) * step


def apply_rounding(price, option=RoundingOption.NONE, custom_increment=None) -> Decimal:
    """
    Apply a channel-price rounding policy.

    apply_rounding(1234, 'hundred') -> 1200
    apply_rounding(1250, 'hundred') -> 1300
    apply_rounding(1234, 'thousand') -> 1000
    """
    if option == RoundingOption.CUSTOM:
        increment = require_positive(custom_increment, "custom_rounding")
    elif option in ROUNDING_INCREMENTS:
        increment = ROUNDING_INCREMENTS[option]
    else:
        raise ValidationError(f"Invalid rounding option: {option}", field="rounding_option")
    return round_half_up(price, increment)


def adjust_price(current_price, mode, value) -> Decimal:
    """New selling price for a bulk adjustment, rounded to an integer and floored at 0."""
    current = to_decimal(current_price or 0, "current_price")
    amount = to_decimal(value, "value")

    if mode == BulkPriceMode.SET:
        raw = amount
    elif mode == BulkPriceMode.INCREASE_PERCENT:
        raw = current * (ONE + amount / HUNDRED)
    elif mode == BulkPriceMode.DECREASE_PERCENT:
        raw = current * (ONE - amount / HUNDRED)
    elif mode == BulkPriceMode.INCREASE_AMOUNT:
        raw = current + amount
    elif mode == BulkPriceMode.DECREASE_AMOUNT:
        raw = current - amount
    else:
        raise ValidationError(f"Invalid mode: {mode}", field="mode")

    return max(ZERO, round_half_up(raw))


def compute_markup_price(base_price, markup_percentage) -> Decimal:
    base = to_decimal(base_price or 0, "base_price")
    markup = to_decimal(markup_percentage, "markup_percentage")
    return base * (ONE + markup / HUNDRED)


def compute_target_profit_price(cogs_per_serving, target_profit, commission) -> Decimal:
    """
    Price that leaves `target_profit` above COGS after the channel's commission.

    price = (cogs + target_profit) / (1 - commission / 100)
    """
    cogs = to_decimal(cogs_per_serving or 0, "cogs_per_serving")
    profit = to_decimal(target_profit, "target_profit_amount")
    rate = to_decimal(commission, "commission")
    if rate >= HUNDRED:
        raise ValidationError("Commission must be below 100% for profit pricing", field="commission")
    return (cogs + profit) / (ONE - rate / HUNDRED)


def compute_final_price(price, tax_rate) -> Decimal:
    """Consumer-facing price: price * (1 + tax_rate / 100)."""
    amount = to_decimal(price, "price")
    tax = to_decimal(tax_rate or 0, "tax_rate")
    return quantize_money(amount * (ONE + tax / HUNDRED))


def compute_net_price(price, commission) -> Decimal:
    """What the business keeps after the channel commission."""
    amount = to_decimal(price, "price")
    rate = to_decimal(commission or 0, "commission")
    return quantize_money(amount * (ONE - rate / HUNDRED))


def compute_net_margin(price, commission, cogs_per_serving) -> Optional[Decimal]:
    """Margin on the net price, or None when the net price is not positive."""
    net = compute_net_price(price, commission)
    if net <= 0:
        return None
    cogs = to_decimal(cogs_per_serving or 0, "cogs_per_serving")
    return quantize_money((net - cogs) / net * HUNDRED)
