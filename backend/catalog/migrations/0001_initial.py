import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tenant', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Unit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text="Full name of the unit, e.g., 'gram', 'kilogram', 'pack'", max_length=50)),
                ('symbol', models.CharField(help_text="Short symbol for the unit, e.g., 'g', 'kg', 'pcs'", max_length=20)),
                ('type', models.CharField(choices=[('purchase', 'Purchase'), ('usage', 'Usage')], help_text='Whether this unit is used for purchasing or for recipe usage', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='units', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Unit',
                'verbose_name_plural': 'Units',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['tenant', 'type'], name='catalog_unit_tenant_type_idx')],
                'constraints': [models.UniqueConstraint(fields=('tenant', 'name', 'symbol', 'type'), name='unique_unit_per_tenant')],
            },
        ),
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('type', models.CharField(choices=[('ingredient', 'Ingredient'), ('recipe', 'Recipe')], help_text='Whether this category groups ingredients or recipes', max_length=20)),
                ('color', models.CharField(default='#6B7280', help_text='Display color in hex format (e.g., #FF5733)', max_length=7)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='categories', to='tenant.tenant')),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['tenant', 'type'], name='catalog_cat_tenant_type_idx')],
                'constraints': [models.UniqueConstraint(fields=('tenant', 'name', 'type'), name='unique_category_per_tenant')],
            },
        ),
    ]
