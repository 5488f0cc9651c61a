"""
Pytest fixtures for COGS tests.

Tenants get their default units through the catalog post_save signal, so
units are looked up rather than created.
"""
import pytest
from decimal import Decimal

from catalog.models import Category, CategoryType, Unit, UnitType
from cogs.models import SalesChannel
from cogs.services import IngredientService, RecipeCostingService


@pytest.fixture
def kg(tenant_a):
    return Unit.all_objects.get(tenant=tenant_a, symbol='kg', type=UnitType.PURCHASE)


@pytest.fixture
def gram(tenant_a):
    return Unit.all_objects.get(tenant=tenant_a, symbol='g', type=UnitType.USAGE)


@pytest.fixture
def ingredient_category(tenant_a):
    return Category.all_objects.create(tenant=tenant_a, name="Bahan Kering", type=CategoryType.INGREDIENT)


@pytest.fixture
def recipe_category(tenant_a):
    return Category.all_objects.create(
        tenant=tenant_a, name="Makanan", type=CategoryType.RECIPE, color="#FF5733"
    )


@pytest.fixture
def ingredient_service(tenant_a, owner_a):
    return IngredientService(tenant_a, user=owner_a)


@pytest.fixture
def costing_service(tenant_a, owner_a):
    return RecipeCostingService(tenant_a, user=owner_a)


@pytest.fixture
def flour(ingredient_service, kg, gram, ingredient_category):
    """15000 per kg, 1000 g per kg -> 15 per gram."""
    return ingredient_service.create_ingredient({
        'name': 'Tepung Terigu',
        'purchase_price': Decimal("15000"),
        'package_size': Decimal("1"),
        'conversion_factor': Decimal("1000"),
        'purchase_unit': kg,
        'usage_unit': gram,
        'category': ingredient_category,
    })


@pytest.fixture
def sugar(ingredient_service, kg, gram):
    """20000 per 2 kg, 1000 g per kg -> 10 per gram."""
    return ingredient_service.create_ingredient({
        'name': 'Gula Pasir',
        'purchase_price': Decimal("20000"),
        'package_size': Decimal("2"),
        'conversion_factor': Decimal("1000"),
        'purchase_unit': kg,
        'usage_unit': gram,
    })


@pytest.fixture
def bread(costing_service, flour, gram, recipe_category):
    """
    200 g flour (3000) + labor 2000 + operational 500 + packaging 500,
    yield 10 -> COGS 6000, 600 per serving.
    """
    return costing_service.create_recipe({
        'name': 'Roti Tawar',
        'yield_quantity': Decimal("10"),
        'labor_cost': Decimal("2000"),
        'operational_cost': Decimal("500"),
        'packaging_cost': Decimal("500"),
        'category': recipe_category,
        'ingredients': [{'ingredient': flour.id, 'quantity': Decimal("200"), 'unit': gram.id}],
    })


@pytest.fixture
def dough(costing_service, flour, sugar):
    """A basic recipe usable as a sub-recipe: 100 g flour + 50 g sugar, yield 2 -> 1000 per serving."""
    return costing_service.create_recipe({
        'name': 'Adonan Dasar',
        'yield_quantity': Decimal("2"),
        'can_be_used_as_ingredient': True,
        'ingredients': [
            {'ingredient': flour.id, 'quantity': Decimal("100")},
            {'ingredient': sugar.id, 'quantity': Decimal("50")},
        ],
    })


@pytest.fixture
def dine_in(tenant_a):
    return SalesChannel.all_objects.create(tenant=tenant_a, name="Dine In", commission=Decimal("0"))


@pytest.fixture
def delivery(tenant_a):
    return SalesChannel.all_objects.create(tenant=tenant_a, name="GoFood", commission=Decimal("20"))
