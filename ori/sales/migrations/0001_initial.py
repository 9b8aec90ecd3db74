# Generated manually for the initial sales schema

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('crm', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Quote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('folio', models.CharField(db_index=True, max_length=50, unique=True)),
                ('status', models.CharField(choices=[('borrador', 'Borrador'), ('en_aprobacion_interna', 'En Aprobación Interna'), ('ajustes_requeridos', 'Ajustes Requeridos'), ('lista_para_enviar', 'Lista para Enviar'), ('enviada_al_cliente', 'Enviada al Cliente'), ('en_negociacion', 'En Negociación'), ('aprobada_por_cliente', 'Aprobada por Cliente'), ('rechazada', 'Rechazada')], default='borrador', max_length=30)),
                ('currency', models.CharField(choices=[('MXN', 'MXN'), ('USD', 'USD')], default='MXN', max_length=3)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=Decimal('16'), max_digits=5)),
                ('valid_until', models.DateField(blank=True, null=True)),
                ('items', models.JSONField(blank=True, default=list)),
                ('commissions', models.JSONField(blank=True, default=list)),
                ('handling', models.JSONField(blank=True, default=list)),
                ('freight_rate', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('insurance_enabled', models.BooleanField(default=False)),
                ('insurance_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('storage_enabled', models.BooleanField(default=False)),
                ('storage_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('totals', models.JSONField(blank=True, default=dict)),
                ('change_log', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotes', to='crm.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_quotes', to=settings.AUTH_USER_MODEL)),
                ('prospect', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotes', to='crm.prospect')),
                ('salesperson', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'quotes',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status'], name='idx_quote_status')],
            },
        ),
        migrations.CreateModel(
            name='Sample',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('unit', models.CharField(choices=[('ton', 'ton'), ('kg', 'kg'), ('L', 'L'), ('unidad', 'unidad')], default='kg', max_length=10)),
                ('status', models.CharField(choices=[('solicitada', 'Solicitada'), ('en_preparacion', 'En Preparación'), ('enviada', 'Enviada'), ('recibida', 'Recibida'), ('con_feedback', 'Con Feedback'), ('cerrada', 'Cerrada'), ('archivada', 'Archivada')], default='solicitada', max_length=20)),
                ('requested_at', models.DateField(default=django.utils.timezone.localdate)),
                ('sent_at', models.DateField(blank=True, null=True)),
                ('feedback', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='samples', to='crm.company')),
                ('owner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='samples', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='samples', to='catalog.product')),
                ('prospect', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='samples', to='crm.prospect')),
            ],
            options={
                'db_table': 'samples',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SalesOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('folio', models.CharField(db_index=True, max_length=50, unique=True)),
                ('status', models.CharField(choices=[('pendiente', 'Pendiente'), ('en_preparacion', 'En Preparación'), ('en_transito', 'En Tránsito'), ('entregada', 'Entregada'), ('facturada', 'Facturada'), ('cancelada', 'Cancelada')], default='pendiente', max_length=20)),
                ('items', models.JSONField(blank=True, default=list)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14)),
                ('currency', models.CharField(choices=[('MXN', 'MXN'), ('USD', 'USD')], default='MXN', max_length=3)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=Decimal('16'), max_digits=5)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sales_orders', to='crm.company')),
                ('quote', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales_orders', to='sales.quote')),
                ('salesperson', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales_orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'sales_orders',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status'], name='idx_sales_order_status')],
            },
        ),
    ]
