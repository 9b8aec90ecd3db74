from django.db import models
from django.utils import timezone
from decimal import Decimal

from ori.core.models import User, UNIT_CHOICES, CURRENCY_CHOICES


class Quote(models.Model):
    """Customer quotation; totals are derived from items, commissions and logistics"""
    STATUS_CHOICES = [
        ('borrador', 'Borrador'),
        ('en_aprobacion_interna', 'En Aprobación Interna'),
        ('ajustes_requeridos', 'Ajustes Requeridos'),
        ('lista_para_enviar', 'Lista para Enviar'),
        ('enviada_al_cliente', 'Enviada al Cliente'),
        ('en_negociacion', 'En Negociación'),
        ('aprobada_por_cliente', 'Aprobada por Cliente'),
        ('rechazada', 'Rechazada'),
    ]

    folio = models.CharField(max_length=50, unique=True, db_index=True)
    company = models.ForeignKey('crm.Company', on_delete=models.SET_NULL, null=True, blank=True, related_name='quotes')
    prospect = models.ForeignKey('crm.Prospect', on_delete=models.SET_NULL, null=True, blank=True, related_name='quotes')
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='borrador')
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='MXN')
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('16'))
    valid_until = models.DateField(null=True, blank=True)
    # [{product, product_name, lot, qty, unit, unit_price, subtotal}]
    items = models.JSONField(default=list, blank=True)
    # [{user, type, value}]
    commissions = models.JSONField(default=list, blank=True)
    # [{description, cost_per_unit}]
    handling = models.JSONField(default=list, blank=True)
    freight_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    insurance_enabled = models.BooleanField(default=False)
    insurance_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    storage_enabled = models.BooleanField(default=False)
    storage_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    totals = models.JSONField(default=dict, blank=True)
    change_log = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    salesperson = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='quotes')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_quotes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.folio

    @property
    def grand_total(self):
        return Decimal(str(self.totals.get('grand_total', 0)))

    class Meta:
        db_table = 'quotes'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_quote_status'),
        ]


class Sample(models.Model):
    STATUS_CHOICES = [
        ('solicitada', 'Solicitada'),
        ('en_preparacion', 'En Preparación'),
        ('enviada', 'Enviada'),
        ('recibida', 'Recibida'),
        ('con_feedback', 'Con Feedback'),
        ('cerrada', 'Cerrada'),
        ('archivada', 'Archivada'),
    ]

    company = models.ForeignKey('crm.Company', on_delete=models.SET_NULL, null=True, blank=True, related_name='samples')
    prospect = models.ForeignKey('crm.Prospect', on_delete=models.SET_NULL, null=True, blank=True, related_name='samples')
    product = models.ForeignKey('catalog.Product', on_delete=models.PROTECT, related_name='samples')
    quantity = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='kg')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='solicitada')
    requested_at = models.DateField(default=timezone.localdate)
    sent_at = models.DateField(null=True, blank=True)
    feedback = models.TextField(blank=True)
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='samples')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Muestra {self.product} ({self.get_status_display()})"

    class Meta:
        db_table = 'samples'
        ordering = ['-created_at']


class SalesOrder(models.Model):
    STATUS_CHOICES = [
        ('pendiente', 'Pendiente'),
        ('en_preparacion', 'En Preparación'),
        ('en_transito', 'En Tránsito'),
        ('entregada', 'Entregada'),
        ('facturada', 'Facturada'),
        ('cancelada', 'Cancelada'),
    ]

    folio = models.CharField(max_length=50, unique=True, db_index=True)
    quote = models.ForeignKey(Quote, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales_orders')
    company = models.ForeignKey('crm.Company', on_delete=models.PROTECT, related_name='sales_orders')
    salesperson = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales_orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pendiente')
    items = models.JSONField(default=list, blank=True)
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='MXN')
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('16'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.folio

    def get_ordered_qty(self):
        return sum((Decimal(str(item.get('qty') or 0)) for item in self.items), Decimal('0'))

    class Meta:
        db_table = 'sales_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_sales_order_status'),
        ]
