"""
Number and currency formatting for display.

Pure functions: the output depends only on the amount and the format passed in.
Formatted strings are for display and are never parsed back into amounts.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR

from settings.models import RoundingMethod, CurrencyPosition


@dataclass(frozen=True)
class DecimalFormat:
    """
    Formatting options. Mirrors settings.models.DecimalSettings so either can be
    passed to format_price.
    """
    decimal_places: int = 2
    rounding_method: str = RoundingMethod.ROUND
    thousand_separator: str = ","
    decimal_separator: str = "."
    currency_symbol: str = "Rp"
    currency_position: str = CurrencyPosition.BEFORE
    show_trailing_zeros: bool = True

    @classmethod
    def from_settings(cls, settings):
        return cls(
            decimal_places=settings.decimal_places,
            rounding_method=settings.rounding_method,
            thousand_separator=settings.thousand_separator,
            decimal_separator=settings.decimal_separator,
            currency_symbol=settings.currency_symbol,
            currency_position=settings.currency_position,
            show_trailing_zeros=settings.show_trailing_zeros,
        )


def _as_decimal(amount):
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        return Decimal(repr(amount))
    return Decimal(str(amount))


def round_amount(amount, decimal_places, rounding_method):
    """
    Round at `decimal_places` precision: scale up, round to an integer, scale down.

    `round` rounds halves toward positive infinity, so -2.5 becomes -2.
    """
    scale = Decimal(10) ** decimal_places
    scaled = _as_decimal(amount) * scale

    if rounding_method == RoundingMethod.FLOOR:
        integral = scaled.to_integral_value(rounding=ROUND_FLOOR)
    elif rounding_method == RoundingMethod.CEIL:
        integral = scaled.to_integral_value(rounding=ROUND_CEILING)
    else:
        integral = (scaled + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)

    return (integral / scale).quantize(Decimal(1).scaleb(-decimal_places))


def _group_thousands(digits, separator):
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return separator.join(groups)


def format_price(amount, settings, show_currency=True, show_separators=True):
    """
    Format an amount for display.

    Args:
        amount: int, float, str or Decimal.
        settings: DecimalSettings instance or DecimalFormat.
        show_currency: Prefix/suffix the currency symbol.
        show_separators: Insert thousand separators.

    Examples (default format):
        format_price(1234567.891, fmt) -> 'Rp1,234,567.89'
        format_price(-1500, fmt, show_currency=False) -> '-1,500.00'
    """
    decimal_places = int(settings.decimal_places)
    rounded = round_amount(amount, decimal_places, settings.rounding_method)

    # -0.00 displays as 0.00
    negative = rounded < 0
    fixed = f"{abs(rounded):f}"

    if "." in fixed:
        integer_part, fraction_part = fixed.split(".", 1)
    else:
        integer_part, fraction_part = fixed, ""

    if not settings.show_trailing_zeros:
        fraction_part = fraction_part.rstrip("0")

    if show_separators and settings.thousand_separator:
        integer_part = _group_thousands(integer_part, settings.thousand_separator)

    formatted = integer_part
    if fraction_part:
        formatted = f"{integer_part}{settings.decimal_separator}{fraction_part}"
    if negative:
        formatted = f"-{formatted}"

    if show_currency and settings.currency_symbol:
        if settings.currency_position == CurrencyPosition.BEFORE:
            return f"{settings.currency_symbol}{formatted}"
        return f"{formatted}{settings.currency_symbol}"

    return formatted


def format_number(amount, settings):
    """Format without the currency symbol."""
    return format_price(amount, settings, show_currency=False)


def format_currency(amount, settings):
    """Format with the currency symbol."""
    return format_price(amount, settings, show_currency=True)
