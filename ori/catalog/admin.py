from django.contrib import admin
from .models import Category, Product, ProductLot


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'parent', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'code']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'category', 'unit_default', 'currency', 'min_price', 'reorder_point', 'is_active']
    list_filter = ['category', 'unit_default', 'currency', 'is_active']
    search_fields = ['name', 'sku']


@admin.register(ProductLot)
class ProductLotAdmin(admin.ModelAdmin):
    list_display = ['code', 'product', 'supplier', 'unit_cost', 'initial_qty', 'status', 'reception_date']
    list_filter = ['status']
    search_fields = ['code', 'product__name', 'product__sku']
