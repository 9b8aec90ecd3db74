"""
Invoicing, payments, overdue detection and the billing summary
"""
import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Invoice, Payment, Expense, Commission

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_TERMS_DAYS = 30
PENDING_PAYMENT_STATUSES = ('enviada', 'pagada_parcialmente', 'vencida')


class BillingError(Exception):
    pass


def generate_invoice_number(year=None):
    """F-<YYYY>-<NNN>, sequential within the year"""
    year = year or timezone.localdate().year
    prefix = f"F-{year}-"
    max_number = 0
    for number in Invoice.objects.filter(number__startswith=prefix).values_list('number', flat=True):
        try:
            max_number = max(max_number, int(number[len(prefix):]))
        except ValueError:
            continue
    return f"{prefix}{max_number + 1:03d}"


def create_invoice_from_order(sales_order, user=None, due_days=DEFAULT_PAYMENT_TERMS_DAYS):
    """Copy items and totals from a sales order and mark the order as invoiced"""
    if sales_order.status == 'cancelada':
        raise BillingError("No se puede facturar una orden cancelada.")
    if sales_order.invoices.exclude(status='cancelada').exists():
        raise BillingError(f"La orden {sales_order.folio} ya tiene una factura.")

    total = sales_order.total
    rate = sales_order.tax_rate / Decimal('100')
    subtotal = (total / (1 + rate)).quantize(Decimal('0.01')) if rate else total
    issue_date = timezone.localdate()

    with transaction.atomic():
        invoice = Invoice.objects.create(
            number=generate_invoice_number(issue_date.year),
            sales_order=sales_order,
            company=sales_order.company,
            status='enviada',
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=due_days),
            items=sales_order.items,
            subtotal=subtotal,
            tax=total - subtotal,
            total=total,
            currency=sales_order.currency,
            created_by=user,
        )
        sales_order.status = 'facturada'
        sales_order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Invoice {invoice.number} created from sales order {sales_order.folio}")
    return invoice


def register_payment(invoice, amount, user=None, date=None, method='transferencia', reference=''):
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise BillingError("El monto debe ser numérico.")
    if amount <= 0:
        raise BillingError("El monto del pago debe ser mayor a 0.")

    with transaction.atomic():
        invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
        if invoice.status in ('cancelada', 'borrador'):
            raise BillingError(f"No se pueden registrar pagos en una factura {invoice.get_status_display().lower()}.")
        if amount > invoice.balance:
            raise BillingError(f"El monto excede el saldo pendiente ({invoice.balance}).")

        payment = Payment.objects.create(
            invoice=invoice,
            amount=amount,
            date=date or timezone.localdate(),
            method=method,
            reference=reference or '',
            created_by=user,
        )
        invoice.paid_amount += amount
        invoice.status = 'pagada' if invoice.balance <= 0 else 'pagada_parcialmente'
        invoice.save(update_fields=['paid_amount', 'status', 'updated_at'])

    return invoice, payment


def mark_overdue_invoices(today=None):
    """Flip unpaid invoices past their due date to 'vencida'; returns the count"""
    today = today or timezone.localdate()
    updated = (
        Invoice.objects
        .filter(due_date__lt=today, status__in=['enviada', 'pagada_parcialmente'])
        .update(status='vencida', updated_at=timezone.now())
    )
    if updated:
        logger.info(f"Marked {updated} invoice(s) as overdue")
    return updated


def get_pending_payments():
    invoices = Invoice.objects.filter(status__in=PENDING_PAYMENT_STATUSES).select_related('company').order_by('due_date')
    today = timezone.localdate()
    rows = []
    for invoice in invoices:
        rows.append({
            'id': invoice.id,
            'number': invoice.number,
            'company': invoice.company_id,
            'company_name': invoice.company.name,
            'status': invoice.status,
            'due_date': invoice.due_date,
            'total': invoice.total,
            'paid_amount': invoice.paid_amount,
            'balance': invoice.balance,
            'is_overdue': invoice.is_overdue(today),
            'days_overdue': max((today - invoice.due_date).days, 0),
        })
    return rows


def mark_commission_paid(commission):
    if commission.status == 'pagada':
        raise BillingError("La comisión ya está pagada.")
    commission.status = 'pagada'
    commission.paid_at = timezone.now()
    commission.save(update_fields=['status', 'paid_at'])
    return commission


def get_billing_summary(date_from=None, date_to=None):
    invoices = Invoice.objects.exclude(status__in=['cancelada', 'borrador'])
    payments = Payment.objects.all()
    expenses = Expense.objects.all()
    if date_from:
        invoices = invoices.filter(issue_date__gte=date_from)
        payments = payments.filter(date__gte=date_from)
        expenses = expenses.filter(date__gte=date_from)
    if date_to:
        invoices = invoices.filter(issue_date__lte=date_to)
        payments = payments.filter(date__lte=date_to)
        expenses = expenses.filter(date__lte=date_to)

    revenue = invoices.aggregate(total=Sum('total'))['total'] or Decimal('0')
    collected = payments.aggregate(total=Sum('amount'))['total'] or Decimal('0')
    billed_paid = invoices.aggregate(total=Sum('paid_amount'))['total'] or Decimal('0')
    expense_rows = expenses.values('category').annotate(total=Sum('amount')).order_by('category')
    labels = dict(Expense.CATEGORY_CHOICES)

    return {
        'revenue': revenue,
        'collected': collected,
        'outstanding': revenue - billed_paid,
        'overdue_count': invoices.filter(status='vencida').count(),
        'expenses_total': sum((row['total'] for row in expense_rows), Decimal('0')),
        'expenses_by_category': [
            {'category': row['category'], 'label': labels.get(row['category'], row['category']), 'total': row['total']}
            for row in expense_rows
        ],
        'pending_commissions': Commission.objects.filter(status='pendiente').aggregate(total=Sum('amount'))['total'] or Decimal('0'),
    }


def month_starts(today, months):
    """First day of each of the last `months` months, oldest first, ending with today's month"""
    last = today.year * 12 + today.month - 1
    return [date(index // 12, index % 12 + 1, 1) for index in range(last - months + 1, last + 1)]


def get_cash_flow(months=6, today=None):
    """Invoiced vs collected vs expenses per month, oldest first"""
    today = today or timezone.localdate()
    starts = month_starts(today, months)
    start = starts[0]

    def by_month(queryset, date_field, amount_field):
        rows = (
            queryset.filter(**{f'{date_field}__gte': start})
            .annotate(month=TruncMonth(date_field))
            .values('month')
            .annotate(total=Sum(amount_field))
        )
        return {row['month'].strftime('%Y-%m'): row['total'] for row in rows}

    invoiced = by_month(Invoice.objects.exclude(status__in=['cancelada', 'borrador']), 'issue_date', 'total')
    collected = by_month(Payment.objects.all(), 'date', 'amount')
    spent = by_month(Expense.objects.all(), 'date', 'amount')

    result = []
    for month in starts:
        key = month.strftime('%Y-%m')
        result.append({
            'month': key,
            'invoiced': invoiced.get(key) or Decimal('0'),
            'collected': collected.get(key) or Decimal('0'),
            'expenses': spent.get(key) or Decimal('0'),
        })
    return result
