from django.contrib import admin
from .models import Carrier, FreightPricingRule, Delivery


@admin.register(Carrier)
class CarrierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_name', 'phone', 'rating', 'is_active']
    list_filter = ['rating', 'is_active']
    search_fields = ['name', 'contact_name']


@admin.register(FreightPricingRule)
class FreightPricingRuleAdmin(admin.ModelAdmin):
    list_display = ['origin', 'destination', 'min_weight_kg', 'max_weight_kg', 'price_per_kg', 'flat_rate', 'carrier', 'is_active']
    list_filter = ['is_active', 'carrier']
    search_fields = ['origin', 'destination']


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ['delivery_number', 'sales_order', 'company', 'carrier', 'status', 'scheduled_date', 'delivered_at']
    list_filter = ['status', 'carrier']
    search_fields = ['delivery_number', 'sales_order__folio', 'tracking_number']
