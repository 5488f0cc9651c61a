"""
Tests for RecipeCostingService.
"""
import pytest
from decimal import Decimal

from django.db import DatabaseError

from cogs.exceptions import ConflictError, CyclicRecipeError, NotFoundError, ValidationError
from cogs.models import ChannelPrice, Recipe, RecipeIngredient, RecipeSubRecipe
from cogs.services import IngredientService, RecipeCostingService, RecipePriceService


@pytest.mark.django_db
class TestRecipeCosting:

    def test_end_to_end_costing(self, tenant_a, bread):
        """
        Flour 15000/kg at 1000 g per kg costs 15 per gram; 200 g cost 3000.
        With 3000 of fixed costs and a yield of 10 that is 600 per serving.
        """
        line = RecipeIngredient.objects.get(recipe=bread)
        assert line.cost == Decimal("3000")
        assert bread.total_cogs == Decimal("6000")
        assert bread.cogs_per_serving == Decimal("600")
        assert bread.cost_per_unit == Decimal("0")
        assert bread.sku == "RCP-001"

        result = RecipePriceService(tenant_a).set_selling_price(bread.id, Decimal("1000"))

        assert result.recipe.profit_margin == Decimal("40")

    def test_sub_recipe_uses_cogs_per_serving(self, costing_service, dough, flour):
        assert dough.cogs_per_serving == Decimal("1000")
        assert dough.cost_per_unit == Decimal("1000")

        cake = costing_service.create_recipe({
            'name': 'Kue Bolu',
            'yield_quantity': 4,
            'ingredients': [{'ingredient': flour.id, 'quantity': 40}],
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 2}],
        })

        assert cake.total_cogs == Decimal("2600")
        assert cake.cogs_per_serving == Decimal("650")
        assert RecipeSubRecipe.objects.get(recipe=cake).cost == Decimal("2000")

    def test_failed_save_does_not_use_up_a_sku(self, costing_service, flour, monkeypatch):
        def broken(*args, **kwargs):
            raise DatabaseError("disk full")

        data = {'name': 'Roti Manis', 'ingredients': [{'ingredient': flour.id, 'quantity': 100}]}
        monkeypatch.setattr(RecipeCostingService, "_write_lines", broken)
        with pytest.raises(DatabaseError):
            costing_service.create_recipe(data)
        monkeypatch.undo()

        assert not Recipe.all_objects.filter(name='Roti Manis').exists()
        assert costing_service.create_recipe(data).sku == "RCP-001"

    def test_recipe_needs_a_line(self, costing_service):
        with pytest.raises(ValidationError):
            costing_service.create_recipe({'name': 'Kosong', 'yield_quantity': 1})

    def test_zero_yield_is_rejected(self, costing_service, flour):
        with pytest.raises(ValidationError):
            costing_service.create_recipe({
                'name': 'Salah',
                'yield_quantity': 0,
                'ingredients': [{'ingredient': flour.id, 'quantity': 1}],
            })

    def test_unknown_ingredient_names_the_id_and_writes_nothing(self, tenant_a, costing_service, flour):
        with pytest.raises(NotFoundError) as exc:
            costing_service.create_recipe({
                'name': 'Roti Aneh',
                'ingredients': [
                    {'ingredient': flour.id, 'quantity': 10},
                    {'ingredient': 424242, 'quantity': 10},
                ],
            })

        assert "424242" in exc.value.message
        assert not Recipe.all_objects.filter(tenant=tenant_a, name='Roti Aneh').exists()

    def test_ingredient_of_another_tenant_is_not_found(self, tenant_b, flour):
        with pytest.raises(NotFoundError):
            RecipeCostingService(tenant_b).create_recipe({
                'name': 'Curian',
                'ingredients': [{'ingredient': flour.id, 'quantity': 1}],
            })

    def test_duplicate_sku_is_a_conflict(self, costing_service, bread, flour):
        with pytest.raises(ConflictError):
            costing_service.create_recipe({
                'name': 'Roti Kembar',
                'sku': bread.sku,
                'ingredients': [{'ingredient': flour.id, 'quantity': 1}],
            })

    def test_update_replaces_lines(self, costing_service, bread, sugar):
        updated = costing_service.update_recipe(bread.id, {
            'ingredients': [{'ingredient': sugar.id, 'quantity': 100}],
        })

        lines = list(RecipeIngredient.objects.filter(recipe=bread))
        assert [line.ingredient_id for line in lines] == [sugar.id]
        assert updated.total_cogs == Decimal("4000")
        assert updated.cogs_per_serving == Decimal("400")

    def test_update_keeps_stored_lines_when_omitted(self, costing_service, bread):
        updated = costing_service.update_recipe(bread.id, {'labor_cost': 0})

        assert RecipeIngredient.objects.filter(recipe=bread).count() == 1
        assert updated.total_cogs == Decimal("4000")

    def test_update_keeps_selling_price(self, tenant_a, costing_service, bread):
        RecipePriceService(tenant_a).set_selling_price(bread.id, Decimal("1000"))

        updated = costing_service.update_recipe(bread.id, {'labor_cost': 0})

        assert updated.selling_price == Decimal("1000")
        assert updated.profit_margin == Decimal("60")


@pytest.mark.django_db
class TestCycles:

    def test_recipe_cannot_contain_itself(self, costing_service, dough):
        with pytest.raises(CyclicRecipeError):
            costing_service.update_recipe(dough.id, {
                'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
            })

    def test_indirect_cycle_is_rejected(self, costing_service, dough, flour):
        filling = costing_service.create_recipe({
            'name': 'Isian',
            'can_be_used_as_ingredient': True,
            'ingredients': [{'ingredient': flour.id, 'quantity': 10}],
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
        })

        with pytest.raises(CyclicRecipeError) as exc:
            costing_service.update_recipe(dough.id, {
                'sub_recipes': [{'sub_recipe': filling.id, 'quantity': 1}],
            })

        assert exc.value.code == "cyclic_recipe"
        assert not RecipeSubRecipe.objects.filter(recipe=dough).exists()

    def test_diamond_is_not_a_cycle(self, costing_service, dough, flour):
        left = costing_service.create_recipe({
            'name': 'Kiri',
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
        })
        right = costing_service.create_recipe({
            'name': 'Kanan',
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
        })

        top = costing_service.create_recipe({
            'name': 'Atas',
            'ingredients': [{'ingredient': flour.id, 'quantity': 1}],
        })
        top = costing_service.update_recipe(top.id, {
            'sub_recipes': [
                {'sub_recipe': left.id, 'quantity': 1},
                {'sub_recipe': right.id, 'quantity': 1},
            ],
        })

        assert RecipeSubRecipe.objects.filter(recipe=top).count() == 2


@pytest.mark.django_db
class TestRecompute:

    def test_parents_are_stale_until_recomputed(self, tenant_a, owner_a, costing_service, dough, flour):
        cake = costing_service.create_recipe({
            'name': 'Kue Bolu',
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
        })
        assert cake.total_cogs == Decimal("1000")

        IngredientService(tenant_a, owner_a).update_price(flour.id, Decimal("30000"))

        cake.refresh_from_db()
        assert cake.total_cogs == Decimal("1000")
        assert costing_service.get_cost_breakdown(cake.id).is_stale is False

        dough = costing_service.recompute_recipe(dough.id)
        assert dough.cogs_per_serving == Decimal("1750")
        assert costing_service.get_cost_breakdown(cake.id).is_stale is True

        recomputed = costing_service.recompute_dependents(dough.id)

        assert [recipe.id for recipe in recomputed] == [cake.id]
        cake.refresh_from_db()
        assert cake.total_cogs == Decimal("1750")

    def test_dependents_are_ordered_children_first(self, costing_service, dough):
        middle = costing_service.create_recipe({
            'name': 'Tengah',
            'can_be_used_as_ingredient': True,
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
        })
        top = costing_service.create_recipe({
            'name': 'Puncak',
            'sub_recipes': [
                {'sub_recipe': middle.id, 'quantity': 1},
                {'sub_recipe': dough.id, 'quantity': 1},
            ],
        })

        recomputed = costing_service.recompute_dependents(dough.id)

        assert [recipe.id for recipe in recomputed] == [middle.id, top.id]

    def test_recompute_is_idempotent(self, costing_service, bread):
        first = costing_service.recompute_recipe(bread.id)
        second = costing_service.recompute_recipe(bread.id)

        assert first.total_cogs == second.total_cogs == Decimal("6000")


@pytest.mark.django_db
class TestBreakdownAndBulk:

    def test_cost_breakdown(self, costing_service, bread, flour):
        breakdown = costing_service.get_cost_breakdown(bread.id)

        assert breakdown.ingredients_cost == Decimal("3000")
        assert breakdown.sub_recipes_cost == Decimal("0")
        assert breakdown.labor_cost == Decimal("2000")
        assert breakdown.total_cogs == Decimal("6000")
        assert breakdown.ingredients[0].ingredient_id == flour.id
        assert breakdown.ingredients[0].unit_symbol == "g"
        assert breakdown.ingredients[0].unit_cost == Decimal("15")

    def test_delete_removes_lines_links_and_channel_prices(self, tenant_a, costing_service, dough, flour, dine_in):
        cake = costing_service.create_recipe({
            'name': 'Kue Bolu',
            'ingredients': [{'ingredient': flour.id, 'quantity': 1}],
            'sub_recipes': [{'sub_recipe': dough.id, 'quantity': 1}],
        })
        ChannelPrice.all_objects.create(tenant=tenant_a, recipe=dough, channel=dine_in, price=1000)

        costing_service.delete_recipe(dough.id)

        assert not Recipe.all_objects.filter(pk=dough.pk).exists()
        assert not RecipeSubRecipe.objects.filter(recipe=cake).exists()
        assert not ChannelPrice.all_objects.filter(recipe_id=dough.pk).exists()
        assert RecipeIngredient.objects.filter(recipe=cake).count() == 1

    def test_bulk_favorite_and_category(self, costing_service, bread, dough, recipe_category):
        assert costing_service.bulk_set_favorite([bread.id, dough.id], True) == 2
        assert costing_service.bulk_set_category([dough.id], recipe_category.id) == 1

        dough.refresh_from_db()
        assert dough.is_favorite is True
        assert dough.category_id == recipe_category.id

    def test_bulk_usable_as_ingredient_sets_cost_per_unit(self, costing_service, bread):
        costing_service.bulk_set_usable_as_ingredient([bread.id], True)
        bread.refresh_from_db()
        assert bread.cost_per_unit == Decimal("600")

        costing_service.bulk_set_usable_as_ingredient([bread.id], False)
        bread.refresh_from_db()
        assert bread.cost_per_unit == Decimal("0")

    def test_bulk_needs_a_selection(self, costing_service):
        with pytest.raises(ValidationError):
            costing_service.bulk_set_favorite([], True)

    def test_bulk_delete_reports_missing(self, costing_service, bread):
        result = costing_service.bulk_delete([bread.id, 999999])

        assert result['deleted'] == 1
        assert result['failed'] == 1
        assert result['errors'][0]['id'] == 999999
