from django.urls import path
from .views import (
    invoice_list_create, invoice_detail, invoice_from_order, invoice_payments,
    pending_payments, invoices_mark_overdue,
    expense_list_create, expense_detail,
    commission_list, commission_mark_paid, billing_summary
)

urlpatterns = [
    # Invoice endpoints
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/from-order/', invoice_from_order, name='invoice-from-order'),
    path('invoices/pending-payments/', pending_payments, name='invoice-pending-payments'),
    path('invoices/mark-overdue/', invoices_mark_overdue, name='invoice-mark-overdue'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),
    path('invoices/<int:pk>/payments/', invoice_payments, name='invoice-payments'),

    # Expense endpoints
    path('expenses/', expense_list_create, name='expense-list-create'),
    path('expenses/<int:pk>/', expense_detail, name='expense-detail'),

    # Commission endpoints
    path('commissions/', commission_list, name='commission-list'),
    path('commissions/<int:pk>/pay/', commission_mark_paid, name='commission-mark-paid'),

    path('billing/summary/', billing_summary, name='billing-summary'),
]
