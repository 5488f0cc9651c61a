"""
Find-or-create lookups for units and categories.

CSV imports name units and categories by text; these helpers resolve the text
to rows of the importing business, creating them when missing.
"""
from django.db.models import Q

from catalog.models import Unit, Category, CategoryType


def find_or_create_unit(tenant, name, symbol, unit_type):
    """
    Resolve a unit of the given type by name or symbol.

    A new unit uses the name as its symbol when no symbol was given.
    """
    name = (name or "").strip()
    symbol = (symbol or "").strip()

    match = Q(name=name)
    if symbol:
        match |= Q(symbol=symbol)

    unit = Unit.all_objects.filter(tenant=tenant, type=unit_type).filter(match).order_by('id').first()
    if unit is None:
        unit = Unit.all_objects.create(
            tenant=tenant,
            name=name,
            symbol=symbol or name,
            type=unit_type,
        )
    return unit


def find_or_create_category(tenant, name, category_type=CategoryType.INGREDIENT):
    """Resolve a category by exact name, or None for a blank name."""
    name = (name or "").strip()
    if not name:
        return None

    category, _ = Category.all_objects.get_or_create(
        tenant=tenant,
        name=name,
        type=category_type,
    )
    return category
