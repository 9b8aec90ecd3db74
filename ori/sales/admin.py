from django.contrib import admin
from .models import Quote, Sample, SalesOrder


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ['folio', 'company', 'prospect', 'status', 'currency', 'salesperson', 'created_at']
    list_filter = ['status', 'currency']
    search_fields = ['folio', 'company__name', 'prospect__name']
    readonly_fields = ['totals', 'change_log']


@admin.register(Sample)
class SampleAdmin(admin.ModelAdmin):
    list_display = ['product', 'company', 'prospect', 'quantity', 'unit', 'status', 'requested_at']
    list_filter = ['status']


@admin.register(SalesOrder)
class SalesOrderAdmin(admin.ModelAdmin):
    list_display = ['folio', 'company', 'status', 'total', 'currency', 'created_at']
    list_filter = ['status', 'currency']
    search_fields = ['folio', 'company__name']
