"""
Recipe serializers - CRUD, lines, cost breakdown and bulk actions.
"""
from rest_framework import serializers

from catalog.models import Category, Unit
from core_backend.base import TenantFilteredSerializerMixin, TimestampedSerializer
from cogs.models import Recipe, RecipeIngredient, RecipeSubRecipe


class RecipeIngredientLineSerializer(serializers.ModelSerializer):
    """Serializer for a stored ingredient line - read operations."""
    ingredient_name = serializers.CharField(source='ingredient.name', read_only=True)
    ingredient_sku = serializers.CharField(source='ingredient.sku', read_only=True)
    unit_symbol = serializers.CharField(source='unit.symbol', read_only=True, default=None)
    cost_per_unit = serializers.DecimalField(
        source='ingredient.cost_per_unit', max_digits=20, decimal_places=6, read_only=True
    )

    class Meta:
        model = RecipeIngredient
        fields = [
            'id',
            'ingredient', 'ingredient_name', 'ingredient_sku',
            'quantity',
            'unit', 'unit_symbol',
            'cost_per_unit', 'cost',
        ]
        read_only_fields = fields


class RecipeSubRecipeLineSerializer(serializers.ModelSerializer):
    """Serializer for a stored sub-recipe line - read operations."""
    sub_recipe_name = serializers.CharField(source='sub_recipe.name', read_only=True)
    cogs_per_serving = serializers.DecimalField(
        source='sub_recipe.cogs_per_serving', max_digits=20, decimal_places=6, read_only=True
    )

    class Meta:
        model = RecipeSubRecipe
        fields = ['id', 'sub_recipe', 'sub_recipe_name', 'quantity', 'cogs_per_serving', 'cost']
        read_only_fields = fields


class RecipeListSerializer(TimestampedSerializer):
    """Serializer for recipe list rows."""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    category_color = serializers.CharField(source='category.color', read_only=True, default=None)
    yield_unit_symbol = serializers.CharField(source='yield_unit.symbol', read_only=True, default=None)

    class Meta:
        model = Recipe
        fields = [
            'id', 'name', 'description', 'sku',
            'yield_quantity', 'yield_unit', 'yield_unit_symbol',
            'total_cogs', 'cogs_per_serving', 'cost_per_unit',
            'selling_price', 'profit_margin',
            'can_be_used_as_ingredient', 'is_favorite',
            'category', 'category_name', 'category_color',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields
        select_related_fields = ['category', 'yield_unit']


class RecipeDetailSerializer(RecipeListSerializer):
    """Recipe with its fixed costs and lines."""
    ingredients = RecipeIngredientLineSerializer(source='ingredient_lines', many=True, read_only=True)
    sub_recipes = RecipeSubRecipeLineSerializer(source='sub_recipe_lines', many=True, read_only=True)

    class Meta(RecipeListSerializer.Meta):
        fields = RecipeListSerializer.Meta.fields + [
            'instructions',
            'labor_cost', 'operational_cost', 'packaging_cost',
            'ingredients', 'sub_recipes',
        ]
        read_only_fields = fields
        prefetch_related_fields = [
            'ingredient_lines__ingredient',
            'ingredient_lines__unit',
            'sub_recipe_lines__sub_recipe',
        ]


class IngredientLineInputSerializer(serializers.Serializer):
    """
    One ingredient line of a recipe write.

    Ids are resolved by RecipeCostingService so that an unknown id is
    reported by name.
    """
    ingredient = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit = serializers.IntegerField(required=False, allow_null=True)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0.")
        return value


class SubRecipeLineInputSerializer(serializers.Serializer):
    sub_recipe = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0.")
        return value


class RecipeWriteSerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    """
    Input for recipe create and update.

    Cost fields are derived; only the inputs below are accepted. On update,
    omitted line lists keep the stored lines.
    """
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True)
    sku = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    yield_quantity = serializers.DecimalField(max_digits=12, decimal_places=4, required=False)
    yield_unit = serializers.PrimaryKeyRelatedField(
        queryset=Unit.all_objects.all(), required=False, allow_null=True
    )
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.all_objects.all(), required=False, allow_null=True
    )
    labor_cost = serializers.DecimalField(max_digits=18, decimal_places=4, required=False)
    operational_cost = serializers.DecimalField(max_digits=18, decimal_places=4, required=False)
    packaging_cost = serializers.DecimalField(max_digits=18, decimal_places=4, required=False)
    selling_price = serializers.DecimalField(max_digits=18, decimal_places=4, required=False)
    can_be_used_as_ingredient = serializers.BooleanField(required=False)
    is_favorite = serializers.BooleanField(required=False)
    ingredients = IngredientLineInputSerializer(many=True, required=False)
    sub_recipes = SubRecipeLineInputSerializer(many=True, required=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_yield_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Yield must be greater than 0.")
        return value

    def validate(self, attrs):
        for cost_field in ('labor_cost', 'operational_cost', 'packaging_cost', 'selling_price'):
            if attrs.get(cost_field) is not None and attrs[cost_field] < 0:
                raise serializers.ValidationError({cost_field: "Cannot be negative."})
        return attrs


class IngredientLineCostSerializer(serializers.Serializer):
    line_id = serializers.IntegerField(allow_null=True)
    ingredient_id = serializers.IntegerField()
    ingredient_name = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit_symbol = serializers.CharField(allow_blank=True)
    unit_cost = serializers.DecimalField(max_digits=20, decimal_places=6)
    cost = serializers.DecimalField(max_digits=24, decimal_places=6)
    current_cost = serializers.DecimalField(max_digits=24, decimal_places=6)


class SubRecipeLineCostSerializer(serializers.Serializer):
    line_id = serializers.IntegerField(allow_null=True)
    sub_recipe_id = serializers.IntegerField()
    sub_recipe_name = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4)
    unit_cost = serializers.DecimalField(max_digits=20, decimal_places=6)
    cost = serializers.DecimalField(max_digits=24, decimal_places=6)
    current_cost = serializers.DecimalField(max_digits=24, decimal_places=6)


class RecipeCostBreakdownSerializer(serializers.Serializer):
    """
    Complete cost breakdown for a single recipe.

    Used in GET /api/cogs/recipes/:id/cost-breakdown/
    """
    recipe_id = serializers.IntegerField()
    recipe_name = serializers.CharField()
    yield_quantity = serializers.DecimalField(max_digits=12, decimal_places=4)
    ingredients_cost = serializers.DecimalField(max_digits=24, decimal_places=6)
    sub_recipes_cost = serializers.DecimalField(max_digits=24, decimal_places=6)
    labor_cost = serializers.DecimalField(max_digits=18, decimal_places=4)
    operational_cost = serializers.DecimalField(max_digits=18, decimal_places=4)
    packaging_cost = serializers.DecimalField(max_digits=18, decimal_places=4)
    total_cogs = serializers.DecimalField(max_digits=24, decimal_places=6)
    cogs_per_serving = serializers.DecimalField(max_digits=24, decimal_places=6)
    cost_per_unit = serializers.DecimalField(max_digits=24, decimal_places=6)
    selling_price = serializers.DecimalField(max_digits=18, decimal_places=4)
    profit_margin = serializers.DecimalField(max_digits=18, decimal_places=4)
    profit_per_serving = serializers.DecimalField(max_digits=24, decimal_places=6)
    ingredients = IngredientLineCostSerializer(many=True)
    sub_recipes = SubRecipeLineCostSerializer(many=True)
    is_stale = serializers.BooleanField()


class BulkRecipeIdsSerializer(serializers.Serializer):
    recipe_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)


class BulkFavoriteSerializer(BulkRecipeIdsSerializer):
    is_favorite = serializers.BooleanField(default=True)


class BulkCategorySerializer(BulkRecipeIdsSerializer):
    category = serializers.IntegerField(required=False, allow_null=True)


class BulkBasicRecipeSerializer(BulkRecipeIdsSerializer):
    can_be_used_as_ingredient = serializers.BooleanField(default=True)
