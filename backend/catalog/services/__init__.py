"""
Catalog services.

- Unit seeding: default units per tenant, seeded when the tenant is created
- Lookups: find-or-create helpers used by CSV imports
"""
from catalog.services.seeding import seed_units_for_tenant, DEFAULT_UNITS
from catalog.services.lookups import find_or_create_unit, find_or_create_category

__all__ = [
    'seed_units_for_tenant',
    'DEFAULT_UNITS',
    'find_or_create_unit',
    'find_or_create_category',
]
