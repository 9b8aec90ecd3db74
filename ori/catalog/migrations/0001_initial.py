# Generated manually for the initial catalog schema

from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('code', models.CharField(max_length=10, unique=True)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='catalog.category')),
            ],
            options={
                'db_table': 'categories',
                'verbose_name_plural': 'categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(db_index=True, max_length=50, unique=True)),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('unit_default', models.CharField(choices=[('ton', 'ton'), ('kg', 'kg'), ('L', 'L'), ('unidad', 'unidad')], default='kg', max_length=10)),
                ('currency', models.CharField(choices=[('MXN', 'MXN'), ('USD', 'USD')], default='MXN', max_length=3)),
                ('min_price', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('reorder_point', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=14)),
                ('max_stock', models.DecimalField(blank=True, decimal_places=3, max_digits=14, null=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='products', to='catalog.category')),
            ],
            options={
                'db_table': 'products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ProductLot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=100)),
                ('unit_cost', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=14)),
                ('min_price', models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True)),
                ('reception_date', models.DateField(blank=True, null=True)),
                ('initial_qty', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=14)),
                ('unit', models.CharField(choices=[('ton', 'ton'), ('kg', 'kg'), ('L', 'L'), ('unidad', 'unidad')], default='kg', max_length=10)),
                ('status', models.CharField(choices=[('recepcion_pendiente', 'Recepción Pendiente'), ('disponible', 'Disponible'), ('en_cuarentena', 'En Cuarentena'), ('bloqueado', 'Bloqueado'), ('agotado', 'Agotado')], default='disponible', max_length=30)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lots', to='catalog.product')),
            ],
            options={
                'db_table': 'product_lots',
                'ordering': ['-created_at'],
                'unique_together': {('product', 'code')},
                'indexes': [models.Index(fields=['status'], name='idx_lot_status')],
            },
        ),
    ]
