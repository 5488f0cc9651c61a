"""
Recipe costing service.

Rolls ingredient lines, sub-recipe lines and fixed costs up into a recipe's
COGS:

    ingredients_cost = sum(ingredient.cost_per_unit * quantity)
    sub_recipes_cost = sum(sub_recipe.cogs_per_serving * quantity)
    total_cogs       = ingredients_cost + sub_recipes_cost + labor + operational + packaging
    cogs_per_serving = total_cogs / yield_quantity

Line costs are snapshots taken when the owning recipe is saved. Editing a
sub-recipe does not reprice its parents; recompute_dependents() does that
explicitly when wanted.

The sub-recipe graph must stay acyclic: every save checks that no new
sub-recipe line leads back to the recipe being saved.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set

from django.db import transaction
from django.db.models import F, Q

from catalog.models import Category, Unit
from settings.models import SkuEntityType
from settings.services import SkuService
from cogs.calculators import (
    ZERO,
    compute_line_cost,
    compute_profit_margin,
    compute_recipe_costs,
    require_non_negative,
    require_positive,
)
from cogs.exceptions import ConflictError, CyclicRecipeError, NotFoundError, ValidationError
from cogs.models import (
    ChannelPrice,
    Ingredient,
    Recipe,
    RecipeIngredient,
    RecipeSubRecipe,
)
from cogs.services.base import TenantService

logger = logging.getLogger(__name__)


@dataclass
class IngredientLineCost:
    """Cost of one ingredient line."""
    line_id: Optional[int]
    ingredient_id: int
    ingredient_name: str
    quantity: Decimal
    unit_symbol: str
    unit_cost: Decimal  # Current ingredient cost_per_unit
    cost: Decimal  # Snapshot stored on the line
    current_cost: Decimal  # unit_cost * quantity now


@dataclass
class SubRecipeLineCost:
    """Cost of one sub-recipe line."""
    line_id: Optional[int]
    sub_recipe_id: int
    sub_recipe_name: str
    quantity: Decimal
    unit_cost: Decimal  # Current sub-recipe cogs_per_serving
    cost: Decimal
    current_cost: Decimal


@dataclass
class RecipeCostBreakdown:
    """Complete cost breakdown for a recipe."""
    recipe_id: int
    recipe_name: str
    yield_quantity: Decimal
    ingredients_cost: Decimal
    sub_recipes_cost: Decimal
    labor_cost: Decimal
    operational_cost: Decimal
    packaging_cost: Decimal
    total_cogs: Decimal
    cogs_per_serving: Decimal
    cost_per_unit: Decimal
    selling_price: Decimal
    profit_margin: Decimal
    profit_per_serving: Decimal
    ingredients: List[IngredientLineCost] = field(default_factory=list)
    sub_recipes: List[SubRecipeLineCost] = field(default_factory=list)
    is_stale: bool = False


@dataclass
class _ResolvedIngredientLine:
    ingredient: Ingredient
    quantity: Decimal
    unit: Optional[Unit]
    cost: Decimal


@dataclass
class _ResolvedSubRecipeLine:
    sub_recipe: Recipe
    quantity: Decimal
    cost: Decimal


class RecipeCostingService(TenantService):
    """
    Recipe create/edit/delete and cost rollup for one business.

    Usage:
        service = RecipeCostingService(tenant, user=request.user)
        recipe = service.create_recipe({
            'name': 'Nasi Goreng',
            'yield_quantity': 10,
            'labor_cost': 2000,
            'ingredients': [{'ingredient': rice.id, 'quantity': 200}],
        })
    """

    SCALAR_FIELDS = (
        'name',
        'description',
        'instructions',
        'yield_quantity',
        'labor_cost',
        'operational_cost',
        'packaging_cost',
        'can_be_used_as_ingredient',
        'is_favorite',
    )

    def get_recipe(self, recipe_id) -> Recipe:
        queryset = Recipe.all_objects.select_related('category', 'yield_unit')
        return self._get(Recipe, recipe_id, 'recipe', queryset=queryset)

    def recipes_by_id(self, recipe_ids: Iterable) -> Dict[Any, Recipe]:
        """Tenant recipes among `recipe_ids`, keyed by the id as the caller gave it."""
        wanted = {}
        for recipe_id in recipe_ids:
            try:
                wanted[int(recipe_id)] = recipe_id
            except (TypeError, ValueError):
                continue
        found = Recipe.all_objects.filter(tenant=self.tenant, pk__in=list(wanted))
        return {wanted[recipe.pk]: recipe for recipe in found}

    # ------------------------------------------------------------------
    # Sub-recipe graph
    # ------------------------------------------------------------------

    def _sub_recipe_graph(self, exclude_recipe_id=None) -> Dict[int, Set[int]]:
        """Adjacency of recipe id -> ids of its sub-recipes, from stored lines."""
        edges = RecipeSubRecipe.objects.filter(recipe__tenant=self.tenant)
        if exclude_recipe_id is not None:
            edges = edges.exclude(recipe_id=exclude_recipe_id)

        graph = defaultdict(set)
        for parent_id, child_id in edges.values_list('recipe_id', 'sub_recipe_id'):
            graph[parent_id].add(child_id)
        return graph

    @staticmethod
    def _reaches(graph: Dict[int, Set[int]], start: int, target: int) -> bool:
        """Depth-first search with a visited set."""
        stack = [start]
        visited = set()
        while stack:
            node = stack.pop()
            if node == target:
                return True
            if node in visited:
                continue
            visited.add(node)
            stack.extend(graph.get(node, ()))
        return False

    def _check_cycles(self, recipe: Recipe, sub_recipes: Iterable[Recipe]):
        if recipe.pk is None:
            # A recipe that does not exist yet cannot be anyone's sub-recipe
            return
        graph = self._sub_recipe_graph(exclude_recipe_id=recipe.pk)
        for sub_recipe in sub_recipes:
            if self._reaches(graph, sub_recipe.pk, recipe.pk):
                raise CyclicRecipeError(recipe.name, sub_recipe.name)

    def _dependents_in_order(self, recipe_id) -> List[int]:
        """
        Ids of every recipe that uses `recipe_id` directly or transitively,
        ordered so each recipe comes after all of its sub-recipes.
        """
        graph = self._sub_recipe_graph()
        parents = defaultdict(set)
        for parent_id, children in graph.items():
            for child_id in children:
                parents[child_id].add(parent_id)

        affected = set()
        stack = [recipe_id]
        while stack:
            node = stack.pop()
            for parent_id in parents.get(node, ()):
                if parent_id not in affected:
                    affected.add(parent_id)
                    stack.append(parent_id)

        ordered = []
        done = set()

        def visit(node):
            if node in done:
                return
            done.add(node)
            for child_id in graph.get(node, ()):
                if child_id in affected:
                    visit(child_id)
            ordered.append(node)

        for node in sorted(affected):
            visit(node)
        return ordered

    # ------------------------------------------------------------------
    # Line resolution
    # ------------------------------------------------------------------

    @staticmethod
    def _line_ref(line, key):
        value = line.get(key)
        if isinstance(value, (Ingredient, Recipe, Unit)):
            return value.pk
        if value is None:
            raise ValidationError(f"{key} is required on every line", field=key)
        return value

    def _fetch(self, model, ids, entity_type) -> Dict[Any, Any]:
        """Map each requested id to its tenant row; the first unknown id raises NotFoundError."""
        by_pk = {}
        numeric = []
        for raw in ids:
            try:
                numeric.append(int(raw))
            except (TypeError, ValueError):
                raise NotFoundError(entity_type, raw)
        for obj in model.all_objects.filter(tenant=self.tenant, pk__in=numeric):
            by_pk[obj.pk] = obj

        resolved = {}
        for raw, pk in zip(ids, numeric):
            if pk not in by_pk:
                raise NotFoundError(entity_type, raw)
            resolved[raw] = by_pk[pk]
        return resolved

    def _resolve_ingredient_lines(self, lines) -> List[_ResolvedIngredientLine]:
        lines = list(lines or [])
        ingredient_ids = [self._line_ref(line, 'ingredient') for line in lines]
        ingredients = self._fetch(Ingredient, ingredient_ids, 'ingredient')

        unit_ids = [self._line_ref(line, 'unit') for line in lines if line.get('unit')]
        units = self._fetch(Unit, unit_ids, 'unit') if unit_ids else {}

        resolved = []
        for line, ingredient_id in zip(lines, ingredient_ids):
            ingredient = ingredients[ingredient_id]
            quantity = require_positive(line.get('quantity'), 'quantity')
            unit = units[self._line_ref(line, 'unit')] if line.get('unit') else None
            resolved.append(_ResolvedIngredientLine(
                ingredient=ingredient,
                quantity=quantity,
                unit=unit,
                cost=compute_line_cost(ingredient.cost_per_unit, quantity),
            ))
        return resolved

    def _resolve_sub_recipe_lines(self, lines) -> List[_ResolvedSubRecipeLine]:
        lines = list(lines or [])
        sub_recipe_ids = [self._line_ref(line, 'sub_recipe') for line in lines]
        sub_recipes = self._fetch(Recipe, sub_recipe_ids, 'sub_recipe')

        resolved = []
        for line, sub_recipe_id in zip(lines, sub_recipe_ids):
            sub_recipe = sub_recipes[sub_recipe_id]
            quantity = require_positive(line.get('quantity'), 'quantity')
            resolved.append(_ResolvedSubRecipeLine(
                sub_recipe=sub_recipe,
                quantity=quantity,
                cost=compute_line_cost(sub_recipe.cogs_per_serving, quantity),
            ))
        return resolved

    def _stored_lines(self, recipe):
        ingredient_lines = [
            {'ingredient': line.ingredient_id, 'quantity': line.quantity, 'unit': line.unit_id}
            for line in RecipeIngredient.objects.filter(recipe=recipe)
        ]
        sub_recipe_lines = [
            {'sub_recipe': line.sub_recipe_id, 'quantity': line.quantity}
            for line in RecipeSubRecipe.objects.filter(recipe=recipe)
        ]
        return ingredient_lines, sub_recipe_lines

    # ------------------------------------------------------------------
    # Field handling
    # ------------------------------------------------------------------

    def _resolve_fk(self, model, value, entity_type):
        if value is None or value == "":
            return None
        if isinstance(value, model):
            if value.tenant_id != self.tenant.id:
                raise NotFoundError(entity_type, value.pk)
            return value
        return self._get(model, value, entity_type)

    def _apply_fields(self, recipe: Recipe, data: Dict[str, Any]):
        for name in self.SCALAR_FIELDS:
            if name in data:
                value = data[name]
                if name == 'name':
                    value = (value or "").strip()
                elif name in ('description', 'instructions'):
                    value = value or ""
                setattr(recipe, name, value)

        if 'yield_unit' in data:
            recipe.yield_unit = self._resolve_fk(Unit, data['yield_unit'], 'unit')
        if 'category' in data:
            recipe.category = self._resolve_fk(Category, data['category'], 'category')

        if not recipe.name:
            raise ValidationError("name is required", field='name')
        recipe.yield_quantity = require_positive(recipe.yield_quantity, 'yield_quantity')
        for cost_field in ('labor_cost', 'operational_cost', 'packaging_cost'):
            setattr(recipe, cost_field, require_non_negative(getattr(recipe, cost_field) or 0, cost_field))

    def _clean_sku(self, sku, exclude_pk=None) -> Optional[str]:
        sku = (sku or "").strip()
        if not sku:
            return None
        clash = Recipe.all_objects.filter(tenant=self.tenant, sku=sku)
        if exclude_pk is not None:
            clash = clash.exclude(pk=exclude_pk)
        if clash.exists():
            raise ConflictError(f"SKU '{sku}' is already used by another recipe")
        return sku

    @staticmethod
    def _apply_costs(recipe, ingredient_lines, sub_recipe_lines):
        costs = compute_recipe_costs(
            ingredient_costs=[line.cost for line in ingredient_lines],
            sub_recipe_costs=[line.cost for line in sub_recipe_lines],
            labor_cost=recipe.labor_cost,
            operational_cost=recipe.operational_cost,
            packaging_cost=recipe.packaging_cost,
            yield_quantity=recipe.yield_quantity,
            can_be_used_as_ingredient=recipe.can_be_used_as_ingredient,
        )
        recipe.total_cogs = costs.total_cogs
        recipe.cogs_per_serving = costs.cogs_per_serving
        recipe.cost_per_unit = costs.cost_per_unit
        recipe.profit_margin = compute_profit_margin(recipe.selling_price, recipe.cogs_per_serving)
        return costs

    @staticmethod
    def _write_lines(recipe, ingredient_lines, sub_recipe_lines):
        RecipeIngredient.objects.filter(recipe=recipe).delete()
        RecipeSubRecipe.objects.filter(recipe=recipe).delete()
        RecipeIngredient.objects.bulk_create([
            RecipeIngredient(
                recipe=recipe,
                ingredient=line.ingredient,
                quantity=line.quantity,
                unit=line.unit,
                cost=line.cost,
            )
            for line in ingredient_lines
        ])
        RecipeSubRecipe.objects.bulk_create([
            RecipeSubRecipe(
                recipe=recipe,
                sub_recipe=line.sub_recipe,
                quantity=line.quantity,
                cost=line.cost,
            )
            for line in sub_recipe_lines
        ])

    # ------------------------------------------------------------------
    # Create / update / recompute
    # ------------------------------------------------------------------

    def create_recipe(self, data: Dict[str, Any]) -> Recipe:
        """
        Create a recipe with its lines and computed costs.

        Every referenced ingredient and sub-recipe is resolved before anything
        is written; an unknown id raises NotFoundError and nothing is saved.
        """
        recipe = Recipe(tenant=self.tenant)
        self._apply_fields(recipe, data)
        if 'selling_price' in data and data['selling_price'] is not None:
            recipe.selling_price = require_non_negative(data['selling_price'], 'selling_price')

        ingredient_lines = self._resolve_ingredient_lines(data.get('ingredients'))
        sub_recipe_lines = self._resolve_sub_recipe_lines(data.get('sub_recipes'))
        if not ingredient_lines and not sub_recipe_lines:
            raise ValidationError("A recipe needs at least one ingredient or sub-recipe")

        self._apply_costs(recipe, ingredient_lines, sub_recipe_lines)

        recipe.sku = self._clean_sku(data.get('sku'))

        with transaction.atomic():
            if recipe.sku is None:
                recipe.sku = SkuService.try_generate_sku(SkuEntityType.RECIPE, self.tenant)
            recipe.save()
            self._write_lines(recipe, ingredient_lines, sub_recipe_lines)

        logger.info(
            f"Created recipe {recipe.pk} '{recipe.name}' for tenant {self.tenant.slug}: "
            f"total_cogs={recipe.total_cogs} per_serving={recipe.cogs_per_serving}"
        )
        self._log(
            "CREATE_RECIPE", f"Added recipe \"{recipe.name}\"",
            entity_type="recipe", entity_id=recipe.pk,
        )
        return recipe

    def update_recipe(self, recipe_id, data: Dict[str, Any]) -> Recipe:
        """
        Edit a recipe.

        When `ingredients` or `sub_recipes` is given, that list replaces the
        stored one; lines not given are repriced from stored data. All lines
        are rewritten in one transaction.
        """
        recipe = self.get_recipe(recipe_id)
        self._apply_fields(recipe, data)

        stored_ingredients, stored_sub_recipes = self._stored_lines(recipe)
        ingredient_lines = self._resolve_ingredient_lines(
            data['ingredients'] if 'ingredients' in data else stored_ingredients
        )
        sub_recipe_lines = self._resolve_sub_recipe_lines(
            data['sub_recipes'] if 'sub_recipes' in data else stored_sub_recipes
        )
        if not ingredient_lines and not sub_recipe_lines:
            raise ValidationError("A recipe needs at least one ingredient or sub-recipe")

        self._check_cycles(recipe, [line.sub_recipe for line in sub_recipe_lines])
        self._apply_costs(recipe, ingredient_lines, sub_recipe_lines)

        if 'sku' in data:
            sku = self._clean_sku(data.get('sku'), exclude_pk=recipe.pk)
            recipe.sku = sku if sku is not None else recipe.sku

        with transaction.atomic():
            if not recipe.sku:
                recipe.sku = SkuService.try_generate_sku(SkuEntityType.RECIPE, self.tenant)
            recipe.save()
            self._write_lines(recipe, ingredient_lines, sub_recipe_lines)

        self._log(
            "UPDATE_RECIPE", f"Updated recipe \"{recipe.name}\"",
            entity_type="recipe", entity_id=recipe.pk,
        )
        return recipe

    def recompute_recipe(self, recipe_id) -> Recipe:
        """
        Reprice the stored lines from current ingredient and sub-recipe costs.

        Idempotent when nothing upstream changed.
        """
        recipe = recipe_id if isinstance(recipe_id, Recipe) else self.get_recipe(recipe_id)
        stored_ingredients, stored_sub_recipes = self._stored_lines(recipe)
        ingredient_lines = self._resolve_ingredient_lines(stored_ingredients)
        sub_recipe_lines = self._resolve_sub_recipe_lines(stored_sub_recipes)
        self._apply_costs(recipe, ingredient_lines, sub_recipe_lines)

        with transaction.atomic():
            recipe.save()
            self._write_lines(recipe, ingredient_lines, sub_recipe_lines)
        return recipe

    def recompute_dependents(self, recipe_id) -> List[Recipe]:
        """
        Recompute every recipe that uses `recipe_id`, directly or through
        other sub-recipes, sub-recipes before their parents.
        """
        recipe = self.get_recipe(recipe_id)
        ordered_ids = self._dependents_in_order(recipe.pk)

        updated = []
        with transaction.atomic():
            for dependent_id in ordered_ids:
                updated.append(self.recompute_recipe(dependent_id))

        if updated:
            logger.info(f"Recomputed {len(updated)} recipe(s) depending on recipe {recipe.pk}")
            self._log(
                "RECOMPUTE_RECIPES",
                f"Recomputed {len(updated)} recipe(s) using \"{recipe.name}\"",
                entity_type="recipe", entity_id=recipe.pk,
            )
        return updated

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_cost_breakdown(self, recipe_id) -> RecipeCostBreakdown:
        """
        Line-level costs as stored, next to what they would cost today.

        is_stale is set when any stored line cost differs from its current cost.
        """
        recipe = self.get_recipe(recipe_id)

        ingredient_costs = []
        for line in RecipeIngredient.objects.filter(recipe=recipe).select_related('ingredient', 'unit'):
            current = compute_line_cost(line.ingredient.cost_per_unit, line.quantity)
            ingredient_costs.append(IngredientLineCost(
                line_id=line.pk,
                ingredient_id=line.ingredient_id,
                ingredient_name=line.ingredient.name,
                quantity=line.quantity,
                unit_symbol=line.unit.symbol if line.unit else "",
                unit_cost=line.ingredient.cost_per_unit,
                cost=line.cost,
                current_cost=current,
            ))

        sub_recipe_costs = []
        for line in RecipeSubRecipe.objects.filter(recipe=recipe).select_related('sub_recipe'):
            current = compute_line_cost(line.sub_recipe.cogs_per_serving, line.quantity)
            sub_recipe_costs.append(SubRecipeLineCost(
                line_id=line.pk,
                sub_recipe_id=line.sub_recipe_id,
                sub_recipe_name=line.sub_recipe.name,
                quantity=line.quantity,
                unit_cost=line.sub_recipe.cogs_per_serving,
                cost=line.cost,
                current_cost=current,
            ))

        is_stale = any(
            line.cost != line.current_cost
            for line in [*ingredient_costs, *sub_recipe_costs]
        )

        return RecipeCostBreakdown(
            recipe_id=recipe.pk,
            recipe_name=recipe.name,
            yield_quantity=recipe.yield_quantity,
            ingredients_cost=sum((line.cost for line in ingredient_costs), ZERO),
            sub_recipes_cost=sum((line.cost for line in sub_recipe_costs), ZERO),
            labor_cost=recipe.labor_cost,
            operational_cost=recipe.operational_cost,
            packaging_cost=recipe.packaging_cost,
            total_cogs=recipe.total_cogs,
            cogs_per_serving=recipe.cogs_per_serving,
            cost_per_unit=recipe.cost_per_unit,
            selling_price=recipe.selling_price,
            profit_margin=recipe.profit_margin,
            profit_per_serving=recipe.selling_price - recipe.cogs_per_serving,
            ingredients=ingredient_costs,
            sub_recipes=sub_recipe_costs,
            is_stale=is_stale,
        )

    # ------------------------------------------------------------------
    # Delete and bulk actions
    # ------------------------------------------------------------------

    def delete_recipe(self, recipe_id):
        """
        Delete a recipe with its lines, channel prices and every sub-recipe
        line that points at it. Parents using it keep their stored totals.
        """
        recipe = self.get_recipe(recipe_id)
        name, pk = recipe.name, recipe.pk

        with transaction.atomic():
            parent_ids = list(
                RecipeSubRecipe.objects.filter(sub_recipe=recipe).values_list('recipe_id', flat=True)
            )
            RecipeSubRecipe.objects.filter(Q(recipe=recipe) | Q(sub_recipe=recipe)).delete()
            RecipeIngredient.objects.filter(recipe=recipe).delete()
            ChannelPrice.all_objects.filter(tenant=self.tenant, recipe=recipe).delete()
            recipe.delete()

        if parent_ids:
            logger.info(f"Deleted recipe {pk} was a sub-recipe of {sorted(set(parent_ids))}")
        self._log(
            "DELETE_RECIPE", f"Deleted recipe \"{name}\"",
            entity_type="recipe", entity_id=pk,
        )

    def _bulk_queryset(self, recipe_ids):
        if not recipe_ids:
            raise ValidationError("No recipes selected", field='recipe_ids')
        return Recipe.all_objects.filter(
            tenant=self.tenant, pk__in=[recipe.pk for recipe in self.recipes_by_id(recipe_ids).values()]
        )

    def bulk_set_favorite(self, recipe_ids, is_favorite=True) -> int:
        count = self._bulk_queryset(recipe_ids).update(is_favorite=bool(is_favorite))
        self._log(
            "BULK_FAVORITE",
            f"{'Marked' if is_favorite else 'Unmarked'} {count} recipe(s) as favorite",
            entity_type="recipe",
        )
        return count

    def bulk_set_category(self, recipe_ids, category=None) -> int:
        category = self._resolve_fk(Category, category, 'category')
        count = self._bulk_queryset(recipe_ids).update(category=category)
        self._log(
            "BULK_CATEGORY",
            f"Moved {count} recipe(s) to category \"{category.name if category else '-'}\"",
            entity_type="recipe",
        )
        return count

    def bulk_set_usable_as_ingredient(self, recipe_ids, usable=True) -> int:
        """Toggle sub-recipe use; cost_per_unit follows (cogs_per_serving or 0)."""
        usable = bool(usable)
        count = self._bulk_queryset(recipe_ids).update(
            can_be_used_as_ingredient=usable,
            cost_per_unit=F('cogs_per_serving') if usable else ZERO,
        )
        self._log(
            "BULK_BASIC_RECIPE",
            f"Set {count} recipe(s) {'usable' if usable else 'not usable'} as ingredient",
            entity_type="recipe",
        )
        return count

    def bulk_delete(self, recipe_ids) -> Dict[str, Any]:
        """
        Returns:
            {'deleted': n, 'failed': n, 'errors': [{'id', 'error'}]}
        """
        deleted = 0
        errors = []
        for recipe_id in recipe_ids:
            try:
                self.delete_recipe(recipe_id)
                deleted += 1
            except NotFoundError as e:
                errors.append({'id': recipe_id, 'error': e.message})
        return {'deleted': deleted, 'failed': len(errors), 'errors': errors}
