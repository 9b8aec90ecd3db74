from django.db import models
from decimal import Decimal

from ori.core.models import User, UNIT_CHOICES
from ori.catalog.models import Product, ProductLot


class Location(models.Model):
    """Warehouse, store or transit location that holds stock"""
    TYPE_CHOICES = [
        ('warehouse', 'Almacén'),
        ('store', 'Tienda'),
        ('transit', 'En tránsito'),
    ]

    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20, unique=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='warehouse')
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        db_table = 'locations'
        ordering = ['name']


class LotStock(models.Model):
    """Quantity of a lot held at a location"""
    lot = models.ForeignKey(ProductLot, on_delete=models.CASCADE, related_name='stock_entries')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='stock_entries')
    quantity = models.DecimalField(max_digits=14, decimal_places=3, default=Decimal('0'))
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.lot} @ {self.location.code}: {self.quantity}"

    class Meta:
        db_table = 'lot_stock'
        unique_together = [['lot', 'location']]


class InventoryMove(models.Model):
    """Ledger of stock movements; applying a move updates LotStock"""
    MOVE_TYPE_CHOICES = [
        ('in', 'Entrada'),
        ('out', 'Salida'),
        ('transfer', 'Transferencia'),
        ('adjust', 'Ajuste'),
    ]

    type = models.CharField(max_length=10, choices=MOVE_TYPE_CHOICES)
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='moves')
    lot = models.ForeignKey(ProductLot, on_delete=models.PROTECT, related_name='moves')
    # out moves are stored negative
    qty = models.DecimalField(max_digits=14, decimal_places=3)
    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default='kg')
    from_location = models.ForeignKey(Location, on_delete=models.PROTECT, null=True, blank=True, related_name='moves_out')
    to_location = models.ForeignKey(Location, on_delete=models.PROTECT, null=True, blank=True, related_name='moves_in')
    reference = models.CharField(max_length=200, blank=True)
    note = models.TextField(blank=True)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_moves')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_type_display()} {self.qty} {self.unit} - {self.lot}"

    class Meta:
        db_table = 'inventory_moves'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['type'], name='idx_move_type'),
            models.Index(fields=['-created_at'], name='idx_move_created'),
        ]
