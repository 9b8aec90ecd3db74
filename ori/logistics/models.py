from django.db import models
from decimal import Decimal

from ori.core.models import User, RATING_CHOICES


class Carrier(models.Model):
    SERVICE_TYPES = ['Carga Seca', 'Refrigerado', 'Material Peligroso']

    name = models.CharField(max_length=255, unique=True)
    contact_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    rating = models.CharField(max_length=20, choices=RATING_CHOICES, default='bueno')
    service_types = models.JSONField(default=list, blank=True)
    # e.g. https://carrier.example/track?id={tracking}
    tracking_url_template = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def get_tracking_url(self, tracking_number):
        if not self.tracking_url_template or not tracking_number:
            return None
        return self.tracking_url_template.replace('{tracking}', tracking_number)

    class Meta:
        db_table = 'carriers'
        ordering = ['name']


class FreightPricingRule(models.Model):
    carrier = models.ForeignKey(Carrier, on_delete=models.CASCADE, null=True, blank=True, related_name='pricing_rules')
    origin = models.CharField(max_length=255)
    destination = models.CharField(max_length=255)
    min_weight_kg = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    max_weight_kg = models.DecimalField(max_digits=12, decimal_places=2)
    price_per_kg = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal('0'))
    flat_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.origin} -> {self.destination} ({self.min_weight_kg}-{self.max_weight_kg} kg)"

    def price_for(self, weight_kg):
        return self.flat_rate + self.price_per_kg * weight_kg

    class Meta:
        db_table = 'freight_pricing_rules'
        ordering = ['origin', 'destination', 'min_weight_kg']


class Delivery(models.Model):
    STATUS_CHOICES = [
        ('programada', 'Programada'),
        ('en_transito', 'En Tránsito'),
        ('entregada', 'Entregada'),
        ('incidencia', 'Incidencia'),
        ('cancelada', 'Cancelada'),
    ]

    delivery_number = models.CharField(max_length=50)
    sales_order = models.ForeignKey('sales.SalesOrder', on_delete=models.CASCADE, related_name='deliveries')
    company = models.ForeignKey('crm.Company', on_delete=models.SET_NULL, null=True, blank=True, related_name='deliveries')
    carrier = models.ForeignKey(Carrier, on_delete=models.SET_NULL, null=True, blank=True, related_name='deliveries')
    destination = models.CharField(max_length=255, default='Recolección / Entrega Parcial')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='programada')
    scheduled_date = models.DateField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    qty = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))
    items = models.JSONField(default=list, blank=True)
    # [{text, user, created_at}]
    notes = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='deliveries')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.delivery_number} ({self.sales_order_id})"

    @property
    def tracking_url(self):
        if self.carrier is None:
            return None
        return self.carrier.get_tracking_url(self.tracking_number)

    class Meta:
        db_table = 'deliveries'
        verbose_name_plural = 'deliveries'
        ordering = ['scheduled_date', 'id']
        indexes = [
            models.Index(fields=['status'], name='idx_delivery_status'),
        ]
