"""
Unit seeding service for the catalog.

Units are TENANT-LOCAL: every business gets its own copy of the defaults,
seeded when the tenant is created, and may rename or delete them freely.
"""
import logging

from catalog.models import Unit, UnitType

logger = logging.getLogger(__name__)


DEFAULT_UNITS = [
    # Purchase units (how ingredients are bought)
    {"name": "kilogram", "symbol": "kg", "type": UnitType.PURCHASE},
    {"name": "gram", "symbol": "g", "type": UnitType.PURCHASE},
    {"name": "liter", "symbol": "L", "type": UnitType.PURCHASE},
    {"name": "milliliter", "symbol": "ml", "type": UnitType.PURCHASE},
    {"name": "pack", "symbol": "pack", "type": UnitType.PURCHASE},
    {"name": "box", "symbol": "box", "type": UnitType.PURCHASE},
    {"name": "bottle", "symbol": "btl", "type": UnitType.PURCHASE},
    {"name": "piece", "symbol": "pcs", "type": UnitType.PURCHASE},

    # Usage units (how recipes consume them)
    {"name": "gram", "symbol": "g", "type": UnitType.USAGE},
    {"name": "milliliter", "symbol": "ml", "type": UnitType.USAGE},
    {"name": "piece", "symbol": "pcs", "type": UnitType.USAGE},
    {"name": "tablespoon", "symbol": "tbsp", "type": UnitType.USAGE},
    {"name": "teaspoon", "symbol": "tsp", "type": UnitType.USAGE},
    {"name": "portion", "symbol": "portion", "type": UnitType.USAGE},
]


def seed_units_for_tenant(tenant):
    """
    Seed default units for a specific tenant.

    Safe to call repeatedly; existing units are left untouched.

    Args:
        tenant: The Tenant instance to seed units for.

    Returns:
        list: List of created Unit instances.
    """
    created_units = []

    for unit_data in DEFAULT_UNITS:
        # Use all_objects for get_or_create to avoid tenant filtering issues
        unit, created = Unit.all_objects.get_or_create(
            tenant=tenant,
            name=unit_data["name"],
            symbol=unit_data["symbol"],
            type=unit_data["type"],
        )
        if created:
            created_units.append(unit)

    if created_units:
        logger.info(f"Seeded {len(created_units)} default units for tenant {tenant.slug}")

    return created_units
