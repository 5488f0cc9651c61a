import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SkuSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ingredient_prefix', models.CharField(default='ING', max_length=10)),
                ('recipe_prefix', models.CharField(default='RCP', max_length=10)),
                ('number_padding', models.PositiveSmallIntegerField(default=3, help_text='Digits in the numeric part (1-6)', validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(6)])),
                ('separator', models.CharField(blank=True, default='-', max_length=3)),
                ('next_ingredient_number', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('next_recipe_number', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='sku_settings', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'SKU Settings',
                'verbose_name_plural': 'SKU Settings',
            },
        ),
        migrations.CreateModel(
            name='DecimalSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('decimal_places', models.PositiveSmallIntegerField(default=2, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(10)])),
                ('rounding_method', models.CharField(choices=[('round', 'Round'), ('floor', 'Floor'), ('ceil', 'Ceil')], default='round', max_length=10)),
                ('thousand_separator', models.CharField(blank=True, default=',', max_length=3)),
                ('decimal_separator', models.CharField(default='.', max_length=3)),
                ('currency_symbol', models.CharField(blank=True, default='Rp', max_length=10)),
                ('currency_position', models.CharField(choices=[('before', 'Before amount'), ('after', 'After amount')], default='before', max_length=10)),
                ('show_trailing_zeros', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='decimal_settings', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Decimal Settings',
                'verbose_name_plural': 'Decimal Settings',
            },
        ),
    ]
