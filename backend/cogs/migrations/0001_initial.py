import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Ingredient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('sku', models.CharField(blank=True, max_length=50, null=True)),
                ('purchase_price', models.DecimalField(decimal_places=4, default=0, help_text='Price of one purchase package', max_digits=18)),
                ('package_size', models.DecimalField(decimal_places=4, default=1, help_text='Purchase units per package', max_digits=14)),
                ('conversion_factor', models.DecimalField(decimal_places=6, default=1, help_text='Usage units per purchase unit, e.g. 1000 g per kg', max_digits=14)),
                ('cost_per_unit', models.DecimalField(decimal_places=6, default=0, editable=False, help_text='Cost of one usage unit', max_digits=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='ingredients', to='catalog.category')),
                ('purchase_unit', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_ingredients', to='catalog.unit')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ingredients', to='tenant.tenant')),
                ('usage_unit', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='usage_ingredients', to='catalog.unit')),
            ],
            options={
                'verbose_name': 'Ingredient',
                'verbose_name_plural': 'Ingredients',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['tenant', 'name'], name='cogs_ing_tenant_name_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('sku__isnull', False)), fields=('tenant', 'sku'), name='unique_ingredient_sku_per_tenant')],
            },
        ),
        migrations.CreateModel(
            name='Recipe',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('instructions', models.TextField(blank=True, default='')),
                ('sku', models.CharField(blank=True, max_length=50, null=True)),
                ('yield_quantity', models.DecimalField(decimal_places=4, default=1, help_text='Servings produced by one batch', max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('labor_cost', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('operational_cost', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('packaging_cost', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('total_cogs', models.DecimalField(decimal_places=6, default=0, editable=False, max_digits=20)),
                ('cogs_per_serving', models.DecimalField(decimal_places=6, default=0, editable=False, max_digits=20)),
                ('can_be_used_as_ingredient', models.BooleanField(default=False, help_text='Allow this recipe to be used as a sub-recipe')),
                ('cost_per_unit', models.DecimalField(decimal_places=6, default=0, editable=False, help_text='cogs_per_serving when usable as an ingredient, else 0', max_digits=20)),
                ('selling_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('profit_margin', models.DecimalField(decimal_places=4, default=0, editable=False, help_text='Percent of the selling price', max_digits=18)),
                ('is_favorite', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='recipes', to='catalog.category')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recipes', to='tenant.tenant')),
                ('yield_unit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='yield_recipes', to='catalog.unit')),
            ],
            options={
                'verbose_name': 'Recipe',
                'verbose_name_plural': 'Recipes',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['tenant', 'name'], name='cogs_rcp_tenant_name_idx'),
                    models.Index(fields=['tenant', 'is_favorite'], name='cogs_rcp_tenant_fav_idx'),
                ],
                'constraints': [models.UniqueConstraint(condition=models.Q(('sku__isnull', False)), fields=('tenant', 'sku'), name='unique_recipe_sku_per_tenant')],
            },
        ),
        migrations.CreateModel(
            name='RecipeIngredient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=4, max_digits=14)),
                ('cost', models.DecimalField(decimal_places=6, default=0, max_digits=20)),
                ('ingredient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='recipe_lines', to='cogs.ingredient')),
                ('recipe', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ingredient_lines', to='cogs.recipe')),
                ('unit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='recipe_ingredient_lines', to='catalog.unit')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='RecipeSubRecipe',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=4, max_digits=14)),
                ('cost', models.DecimalField(decimal_places=6, default=0, max_digits=20)),
                ('recipe', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sub_recipe_lines', to='cogs.recipe')),
                ('sub_recipe', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='parent_lines', to='cogs.recipe')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='SalesChannel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('commission', models.DecimalField(decimal_places=4, default=0, help_text='Percent of the price kept by the channel', max_digits=7, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('icon', models.CharField(blank=True, default='', max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sales_channels', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Sales Channel',
                'verbose_name_plural': 'Sales Channels',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['tenant', 'name'], name='cogs_channel_tenant_name_idx')],
            },
        ),
        migrations.CreateModel(
            name='ChannelPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('commission', models.DecimalField(decimal_places=4, default=0, max_digits=7)),
                ('tax_rate', models.DecimalField(decimal_places=4, default=0, max_digits=7)),
                ('final_price', models.DecimalField(decimal_places=4, default=0, editable=False, max_digits=18)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('channel', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='channel_prices', to='cogs.saleschannel')),
                ('recipe', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='channel_prices', to='cogs.recipe')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='channel_prices', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Channel Price',
                'verbose_name_plural': 'Channel Prices',
                'indexes': [models.Index(fields=['tenant', 'recipe'], name='cogs_chprice_tenant_rcp_idx')],
                'constraints': [models.UniqueConstraint(fields=('recipe', 'channel'), name='unique_channel_price_per_recipe')],
            },
        ),
        migrations.CreateModel(
            name='IngredientPriceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('new_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('price_change', models.DecimalField(decimal_places=4, default=0, help_text='Absolute difference between old and new price', max_digits=18)),
                ('percentage_change', models.DecimalField(decimal_places=4, default=0, help_text='Absolute change relative to the old price, in percent', max_digits=18)),
                ('change_type', models.CharField(choices=[('increase', 'Increase'), ('decrease', 'Decrease'), ('no_change', 'No Change')], default='no_change', max_length=20)),
                ('change_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('ingredient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='price_history', to='cogs.ingredient')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Ingredient Price History',
                'verbose_name_plural': 'Ingredient Price History',
                'ordering': ['-change_date', '-id'],
                'abstract': False,
                'indexes': [models.Index(fields=['ingredient', '-change_date'], name='cogs_ing_hist_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='RecipePriceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('new_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('price_change', models.DecimalField(decimal_places=4, default=0, help_text='Absolute difference between old and new price', max_digits=18)),
                ('percentage_change', models.DecimalField(decimal_places=4, default=0, help_text='Absolute change relative to the old price, in percent', max_digits=18)),
                ('change_type', models.CharField(choices=[('increase', 'Increase'), ('decrease', 'Decrease'), ('no_change', 'No Change')], default='no_change', max_length=20)),
                ('change_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('reason', models.CharField(blank=True, default='', max_length=255)),
                ('recipe', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='price_history', to='cogs.recipe')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Recipe Price History',
                'verbose_name_plural': 'Recipe Price History',
                'ordering': ['-change_date', '-id'],
                'abstract': False,
                'indexes': [models.Index(fields=['recipe', '-change_date'], name='cogs_rcp_hist_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='ChannelPriceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('new_price', models.DecimalField(decimal_places=4, default=0, max_digits=18)),
                ('price_change', models.DecimalField(decimal_places=4, default=0, help_text='Absolute difference between old and new price', max_digits=18)),
                ('percentage_change', models.DecimalField(decimal_places=4, default=0, help_text='Absolute change relative to the old price, in percent', max_digits=18)),
                ('change_type', models.CharField(choices=[('increase', 'Increase'), ('decrease', 'Decrease'), ('no_change', 'No Change')], default='no_change', max_length=20)),
                ('change_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('reason', models.CharField(blank=True, default='', max_length=255)),
                ('channel_price', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='cogs.channelprice')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Channel Price History',
                'verbose_name_plural': 'Channel Price History',
                'ordering': ['-change_date', '-id'],
                'abstract': False,
                'indexes': [models.Index(fields=['channel_price', '-change_date'], name='cogs_ch_hist_date_idx')],
            },
        ),
    ]
