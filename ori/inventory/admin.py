from django.contrib import admin
from .models import Location, LotStock, InventoryMove


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'type', 'is_active']
    list_filter = ['type', 'is_active']
    search_fields = ['name', 'code']


@admin.register(LotStock)
class LotStockAdmin(admin.ModelAdmin):
    list_display = ['lot', 'location', 'quantity', 'updated_at']
    list_filter = ['location']
    search_fields = ['lot__code', 'lot__product__name', 'lot__product__sku']


@admin.register(InventoryMove)
class InventoryMoveAdmin(admin.ModelAdmin):
    list_display = ['type', 'product', 'lot', 'qty', 'unit', 'from_location', 'to_location', 'user', 'created_at']
    list_filter = ['type', 'created_at']
    search_fields = ['product__name', 'lot__code', 'reference']
    readonly_fields = [f.name for f in InventoryMove._meta.fields]
