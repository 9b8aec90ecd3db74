from django.contrib import admin
from .models import Supplier, PurchaseOrder, PurchaseOrderItem


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'rfc', 'rating', 'contact_person', 'phone', 'email']
    list_filter = ['rating']
    search_fields = ['name', 'rfc', 'contact_person']


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    fields = ['product', 'custom_name', 'qty', 'unit', 'unit_cost', 'received_qty']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['folio', 'supplier', 'status', 'total', 'responsible', 'expected_delivery_date', 'created_at']
    list_filter = ['status', 'currency']
    search_fields = ['folio', 'supplier__name']
    inlines = [PurchaseOrderItemInline]
    readonly_fields = ['subtotal', 'tax', 'total']
