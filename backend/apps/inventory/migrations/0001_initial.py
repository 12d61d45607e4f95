import decimal

import django.db.models.deletion
import django.db.models.functions.text
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100)),
                ('description', models.CharField(blank=True, max_length=500)),
                ('icon', models.CharField(blank=True, default='📦', max_length=16)),
                ('color', models.CharField(blank=True, default='#6b7280', max_length=7)),
                ('is_active', models.BooleanField(default=True)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Categories',
                'ordering': ['name'],
            },
        ),
        migrations.AddConstraint(
            model_name='category',
            constraint=models.UniqueConstraint(django.db.models.functions.text.Lower('name'), models.F('company'), name='uniq_category_name_per_company'),
        ),
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('code', models.CharField(max_length=50)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('item_type', models.CharField(choices=[('grey_fabric', 'Grey Fabric'), ('raw_material', 'Raw Material'), ('dye', 'Dye'), ('chemical', 'Chemical'), ('finished_fabric', 'Finished Fabric'), ('finished_goods', 'Finished Goods'), ('packing_material', 'Packing Material'), ('consumable', 'Consumable')], default='raw_material', max_length=20)),
                ('unit', models.CharField(default='meters', max_length=20)),
                ('unit_price', models.DecimalField(decimal_places=2, default=decimal.Decimal('0'), max_digits=20)),
                ('reorder_level', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('current_stock', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('reserved_stock', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('available_stock', models.DecimalField(decimal_places=3, default=decimal.Decimal('0'), max_digits=15)),
                ('is_active', models.BooleanField(default=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='items', to='inventory.category')),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['company', 'category'], name='inventory_i_company_3ad92b_idx'),
                    models.Index(fields=['company', 'is_active'], name='inventory_i_company_de553a_idx'),
                ],
                'unique_together': {('company', 'code')},
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('movement_number', models.CharField(blank=True, max_length=32)),
                ('movement_type', models.CharField(choices=[('in', 'Inward'), ('out', 'Outward'), ('transfer', 'Transfer'), ('adjustment', 'Adjustment')], max_length=20)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=15)),
                ('unit', models.CharField(blank=True, max_length=20)),
                ('previous_stock', models.DecimalField(decimal_places=3, max_digits=15)),
                ('new_stock', models.DecimalField(decimal_places=3, max_digits=15)),
                ('from_location', models.CharField(blank=True, max_length=120)),
                ('to_location', models.CharField(blank=True, max_length=120)),
                ('reference_type', models.CharField(choices=[('purchase_order', 'Purchase Order'), ('customer_order', 'Customer Order'), ('production_order', 'Production Order'), ('transfer_note', 'Transfer Note'), ('adjustment_note', 'Adjustment Note'), ('return_note', 'Return Note')], default='adjustment_note', max_length=20)),
                ('reference_id', models.CharField(blank=True, max_length=64)),
                ('reference_number', models.CharField(blank=True, max_length=64)),
                ('notes', models.TextField(blank=True)),
                ('movement_date', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(help_text='Company this record belongs to', on_delete=django.db.models.deletion.PROTECT, related_name='+', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='inventory.inventoryitem')),
            ],
            options={
                'ordering': ['-movement_date', '-id'],
                'indexes': [
                    models.Index(fields=['company', 'item', 'movement_date'], name='inventory_s_company_9b9a62_idx'),
                    models.Index(fields=['company', 'reference_type', 'reference_id'], name='inventory_s_company_e7ee98_idx'),
                ],
                'unique_together': {('company', 'movement_number')},
            },
        ),
    ]
