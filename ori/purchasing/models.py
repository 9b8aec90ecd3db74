from django.db import models
from decimal import Decimal

from ori.core.models import User, UNIT_CHOICES, CURRENCY_CHOICES, RATING_CHOICES


class Supplier(models.Model):
    name = models.CharField(max_length=255, db_index=True)
    rfc = models.CharField(max_length=20, blank=True)
    rating = models.CharField(max_length=20, choices=RATING_CHOICES, default='bueno')
    industry = models.CharField(max_length=100, blank=True)
    address = models.TextField(blank=True)
    contact_person = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    # bank, account, clabe
    bank_info = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']


class PurchaseOrder(models.Model):
    """Purchase order moving through the purchasing kanban"""
    STATUS_CHOICES = [
        ('borrador', 'Borrador'),
        ('por_aprobar', 'Por Aprobar'),
        ('enviada', 'Enviada'),
        ('confirmada', 'Confirmada'),
        ('en_transito', 'En Tránsito'),
        ('recibida_parcial', 'Recibida Parcial'),
        ('recibida_completa', 'Recibida Completa'),
        ('pago_pendiente', 'Pago Pendiente'),
        ('pago_parcial', 'Pago Parcial'),
        ('facturada', 'Facturada'),
        ('cancelada', 'Cancelada'),
    ]

    folio = models.CharField(max_length=100, unique=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name='purchase_orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='borrador')
    responsible = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_orders')
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='MXN')
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('16'))
    expected_delivery_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_purchase_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.folio

    def recalculate_totals(self, save=True):
        """subtotal = sum(qty * unit_cost); tax = subtotal * tax_rate / 100"""
        subtotal = sum((item.get_line_total() for item in self.items.all()), Decimal('0'))
        self.subtotal = subtotal.quantize(Decimal('0.01'))
        self.tax = (subtotal * self.tax_rate / Decimal('100')).quantize(Decimal('0.01'))
        self.total = self.subtotal + self.tax
        if save:
            self.save(update_fields=['subtotal', 'tax', 'total', 'updated_at'])
        return self.total

    def is_fully_received(self):
        return all(item.received_qty >= item.qty for item in self.items.all())

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_po_status'),
            models.Index(fields=['supplier', 'status'], name='idx_po_supplier_status'),
        ]


class PurchaseOrderItem(models.Model):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.PROTECT, null=True, blank=True, related_name='purchase_items')
    custom_name = models.CharField(max_length=255, blank=True)
    qty = models.DecimalField(max_digits=12, decimal_places=3)
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='kg')
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2)
    received_qty = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))

    def get_line_total(self):
        return self.qty * self.unit_cost

    def get_pending_qty(self):
        return max(self.qty - self.received_qty, Decimal('0'))

    def __str__(self):
        name = self.product.name if self.product else self.custom_name
        return f"{name} x {self.qty} {self.unit}"

    class Meta:
        db_table = 'purchase_order_items'
        ordering = ['id']
