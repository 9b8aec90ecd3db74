from django.contrib import admin
from .models import Invoice, Payment, Expense, Commission


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['amount', 'date', 'method', 'reference']


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['number', 'company', 'status', 'issue_date', 'due_date', 'total', 'paid_amount']
    list_filter = ['status', 'currency']
    search_fields = ['number', 'company__name']
    inlines = [PaymentInline]


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'category', 'amount', 'date', 'supplier']
    list_filter = ['category']
    search_fields = ['description']


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ['user', 'sales_order', 'type', 'amount', 'status', 'paid_at']
    list_filter = ['status']
