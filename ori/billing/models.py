from django.db import models
from django.utils import timezone
from decimal import Decimal

from ori.core.models import User, CURRENCY_CHOICES


class Invoice(models.Model):
    STATUS_CHOICES = [
        ('borrador', 'Borrador'),
        ('enviada', 'Enviada'),
        ('pagada', 'Pagada'),
        ('pagada_parcialmente', 'Pagada Parcialmente'),
        ('vencida', 'Vencida'),
        ('cancelada', 'Cancelada'),
    ]

    number = models.CharField(max_length=50, unique=True)
    sales_order = models.ForeignKey('sales.SalesOrder', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    company = models.ForeignKey('crm.Company', on_delete=models.PROTECT, related_name='invoices')
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='borrador')
    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField()
    items = models.JSONField(default=list, blank=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='MXN')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.number

    @property
    def balance(self):
        return self.total - self.paid_amount

    def is_overdue(self, today=None):
        if self.status == 'vencida':
            return True
        if self.status in ('pagada', 'cancelada'):
            return False
        today = today or timezone.localdate()
        return self.due_date < today

    class Meta:
        db_table = 'invoices'
        ordering = ['-issue_date', '-id']
        indexes = [
            models.Index(fields=['status'], name='idx_invoice_status'),
            models.Index(fields=['due_date'], name='idx_invoice_due_date'),
        ]


class Payment(models.Model):
    METHOD_CHOICES = [
        ('transferencia', 'Transferencia'),
        ('cheque', 'Cheque'),
        ('efectivo', 'Efectivo'),
        ('tarjeta', 'Tarjeta'),
        ('otro', 'Otro'),
    ]

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    date = models.DateField(default=timezone.localdate)
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='transferencia')
    reference = models.CharField(max_length=100, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.invoice.number}: {self.amount}"

    class Meta:
        db_table = 'payments'
        ordering = ['-date', '-id']


class Expense(models.Model):
    CATEGORY_CHOICES = [
        ('logistica', 'Logística'),
        ('materia_prima', 'Materia Prima'),
        ('oficina', 'Oficina'),
        ('nomina', 'Nómina'),
        ('marketing', 'Marketing'),
        ('otros', 'Otros'),
    ]

    description = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='otros')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    date = models.DateField(default=timezone.localdate)
    supplier = models.ForeignKey('purchasing.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    purchase_order = models.ForeignKey('purchasing.PurchaseOrder', on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='expenses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.description} ({self.amount})"

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['category', 'date'], name='idx_expense_category_date'),
        ]


class Commission(models.Model):
    STATUS_CHOICES = [
        ('pendiente', 'Pendiente'),
        ('pagada', 'Pagada'),
    ]

    sales_order = models.ForeignKey('sales.SalesOrder', on_delete=models.CASCADE, related_name='commissions')
    quote = models.ForeignKey('sales.Quote', on_delete=models.SET_NULL, null=True, blank=True, related_name='generated_commissions')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='commissions')
    type = models.CharField(max_length=20, default='fixed')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pendiente')
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} - {self.amount} ({self.get_status_display()})"

    class Meta:
        db_table = 'commissions'
        ordering = ['-created_at']
