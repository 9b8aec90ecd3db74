from django.db import models
from django.db.models import Sum
from decimal import Decimal

from ori.core.models import UNIT_CHOICES, CURRENCY_CHOICES


class Category(models.Model):
    """Product categories; code is the SKU prefix"""
    name = models.CharField(max_length=200, db_index=True)
    code = models.CharField(max_length=10, unique=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Product master"""
    sku = models.CharField(max_length=50, unique=True, db_index=True)
    name = models.CharField(max_length=200, db_index=True)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    description = models.TextField(blank=True)
    unit_default = models.CharField(max_length=10, choices=UNIT_CHOICES, default='kg')
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='MXN')
    min_price = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal('0'))
    reorder_point = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal('0'))
    max_stock = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def get_total_stock(self):
        from ori.inventory.models import LotStock
        total = LotStock.objects.filter(lot__product=self).aggregate(total=Sum('quantity'))['total']
        return total or Decimal('0')

    class Meta:
        db_table = 'products'
        ordering = ['name']


class ProductLot(models.Model):
    """A received batch of a product; stock is tracked per lot and location"""
    STATUS_CHOICES = [
        ('recepcion_pendiente', 'Recepción Pendiente'),
        ('disponible', 'Disponible'),
        ('en_cuarentena', 'En Cuarentena'),
        ('bloqueado', 'Bloqueado'),
        ('agotado', 'Agotado'),
    ]

    code = models.CharField(max_length=100)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='lots')
    supplier = models.ForeignKey('purchasing.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='lots')
    purchase_order = models.ForeignKey('purchasing.PurchaseOrder', on_delete=models.SET_NULL, null=True, blank=True, related_name='lots')
    unit_cost = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal('0'))
    min_price = models.DecimalField(max_digits=14, decimal_places=4, null=True, blank=True)
    reception_date = models.DateField(null=True, blank=True)
    initial_qty = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal('0'))
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='kg')
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='disponible')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.sku} / {self.code}"

    def get_total_stock(self):
        total = self.stock_entries.aggregate(total=Sum('quantity'))['total']
        return total or Decimal('0')

    class Meta:
        db_table = 'product_lots'
        ordering = ['-created_at']
        unique_together = [['product', 'code']]
        indexes = [
            models.Index(fields=['status'], name='idx_lot_status'),
        ]
