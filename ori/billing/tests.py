"""
Test suite for the billing module
Tests: invoice numbering, invoices from orders, payments, overdue detection, commissions
"""
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.billing.models import Invoice, Commission, Expense
from ori.billing.services import (
    BillingError, generate_invoice_number, create_invoice_from_order, register_payment, mark_overdue_invoices,
    get_pending_payments, get_billing_summary, get_cash_flow, month_starts
)


class InvoiceServiceTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.order = TestDataFactory.create_sales_order(salesperson=self.user)

    def test_number_sequence(self):
        self.assertEqual(generate_invoice_number(2025), 'F-2025-001')
        TestDataFactory.create_invoice(number='F-2025-009')
        TestDataFactory.create_invoice(number='F-2025-010')
        self.assertEqual(generate_invoice_number(2025), 'F-2025-011')
        self.assertEqual(generate_invoice_number(2026), 'F-2026-001')

    def test_from_order_splits_tax(self):
        invoice = create_invoice_from_order(self.order, user=self.user)
        self.assertEqual(invoice.total, Decimal('1160.00'))
        self.assertEqual(invoice.subtotal, Decimal('1000.00'))
        self.assertEqual(invoice.tax, Decimal('160.00'))
        self.assertEqual(invoice.status, 'enviada')
        self.assertEqual(invoice.due_date, invoice.issue_date + timedelta(days=30))
        self.assertEqual(invoice.items, self.order.items)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'facturada')

    def test_from_order_only_once(self):
        create_invoice_from_order(self.order)
        with self.assertRaises(BillingError):
            create_invoice_from_order(self.order)

    def test_cancelled_order_cannot_be_invoiced(self):
        self.order.status = 'cancelada'
        self.order.save()
        with self.assertRaises(BillingError):
            create_invoice_from_order(self.order)
        self.assertFalse(Invoice.objects.exists())


class PaymentTests(TestCase):
    def setUp(self):
        self.invoice = TestDataFactory.create_invoice(total=Decimal('1160.00'))

    def test_partial_then_full(self):
        invoice, payment = register_payment(self.invoice, '500')
        self.assertEqual(invoice.status, 'pagada_parcialmente')
        self.assertEqual(invoice.balance, Decimal('660.00'))
        self.assertEqual(payment.method, 'transferencia')

        invoice, _ = register_payment(invoice, Decimal('660.00'), method='cheque')
        self.assertEqual(invoice.status, 'pagada')
        self.assertEqual(invoice.balance, Decimal('0'))
        self.assertEqual(invoice.payments.count(), 2)

    def test_payment_over_balance(self):
        with self.assertRaises(BillingError):
            register_payment(self.invoice, '1160.01')
        self.assertEqual(self.invoice.payments.count(), 0)

    def test_payment_must_be_positive(self):
        with self.assertRaises(BillingError):
            register_payment(self.invoice, '0')
        with self.assertRaises(BillingError):
            register_payment(self.invoice, 'mucho')

    def test_no_payments_on_cancelled(self):
        self.invoice.status = 'cancelada'
        self.invoice.save()
        with self.assertRaises(BillingError):
            register_payment(self.invoice, '10')


class OverdueTests(TestCase):
    def setUp(self):
        today = timezone.localdate()
        self.late = TestDataFactory.create_invoice(due_date=today - timedelta(days=5))
        self.late_partial = TestDataFactory.create_invoice(due_date=today - timedelta(days=1),
                                                           status='pagada_parcialmente')
        self.paid = TestDataFactory.create_invoice(due_date=today - timedelta(days=5), status='pagada')
        self.current = TestDataFactory.create_invoice(due_date=today + timedelta(days=5))

    def test_mark_overdue(self):
        self.assertEqual(mark_overdue_invoices(), 2)
        self.late.refresh_from_db()
        self.paid.refresh_from_db()
        self.current.refresh_from_db()
        self.assertEqual(self.late.status, 'vencida')
        self.assertEqual(self.paid.status, 'pagada')
        self.assertEqual(self.current.status, 'enviada')

    def test_mark_overdue_as_of_date(self):
        future = timezone.localdate() + timedelta(days=10)
        self.assertEqual(mark_overdue_invoices(today=future), 3)

    def test_pending_payments(self):
        rows = get_pending_payments()
        numbers = [row['number'] for row in rows]
        self.assertNotIn(self.paid.number, numbers)
        self.assertEqual(len(rows), 3)
        late_row = next(row for row in rows if row['number'] == self.late.number)
        self.assertTrue(late_row['is_overdue'])
        self.assertEqual(late_row['days_overdue'], 5)

    def test_command(self):
        out = StringIO()
        call_command('mark_overdue_invoices', stdout=out)
        self.assertIn('Marked 2 invoice(s) as overdue', out.getvalue())
        self.assertEqual(Invoice.objects.filter(status='vencida').count(), 2)

    def test_command_dry_run(self):
        out = StringIO()
        call_command('mark_overdue_invoices', '--dry-run', stdout=out)
        self.assertIn('2 invoice(s) would be marked as overdue', out.getvalue())
        self.assertFalse(Invoice.objects.filter(status='vencida').exists())


class BillingAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.staff = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_invoice_from_order_endpoint(self):
        order = TestDataFactory.create_sales_order(salesperson=self.user)
        response = self.client.post('/api/v1/invoices/from-order/', {'sales_order': order.id, 'due_days': 15},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'enviada')
        self.assertEqual(response.data['sales_order_folio'], order.folio)

    def test_payment_endpoint_rejects_overpayment(self):
        invoice = TestDataFactory.create_invoice(total=Decimal('100.00'))
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/payments/', {'amount': '150.00'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/invoices/{invoice.id}/payments/', {'amount': '40.00'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['invoice']['status'], 'pagada_parcialmente')

    def test_invoice_due_before_issue(self):
        company = TestDataFactory.create_company()
        today = timezone.localdate()
        response = self.client.post('/api/v1/invoices/', {
            'company': company.id,
            'issue_date': str(today),
            'due_date': str(today - timedelta(days=1)),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_commission_pay_requires_staff(self):
        order = TestDataFactory.create_sales_order(salesperson=self.user)
        commission = Commission.objects.create(sales_order=order, user=self.user, amount=Decimal('250'))
        response = self.client.post(f'/api/v1/commissions/{commission.id}/pay/', format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.staff)
        response = self.client.post(f'/api/v1/commissions/{commission.id}/pay/', format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'pagada')
        response = self.client.post(f'/api/v1/commissions/{commission.id}/pay/', format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_commission_list_only_own(self):
        order = TestDataFactory.create_sales_order(salesperson=self.user)
        Commission.objects.create(sales_order=order, user=self.user, amount=Decimal('100'))
        Commission.objects.create(sales_order=order, user=self.staff, amount=Decimal('200'))
        response = self.client.get('/api/v1/commissions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_summary(self):
        invoice = TestDataFactory.create_invoice(total=Decimal('1160.00'))
        register_payment(invoice, '160')
        Expense.objects.create(description='Diesel', category='logistica', amount=Decimal('300'))
        summary = get_billing_summary()
        self.assertEqual(summary['revenue'], Decimal('1160.00'))
        self.assertEqual(summary['collected'], Decimal('160.00'))
        self.assertEqual(summary['outstanding'], Decimal('1000.00'))
        self.assertEqual(summary['expenses_total'], Decimal('300.00'))
        response = self.client.get('/api/v1/billing/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class CashFlowTests(TestCase):
    def test_month_starts(self):
        starts = month_starts(date(2026, 10, 19), 6)
        self.assertEqual([d.strftime('%Y-%m') for d in starts],
                         ['2026-05', '2026-06', '2026-07', '2026-08', '2026-09', '2026-10'])
        self.assertEqual(month_starts(date(2026, 3, 5), 4),
                         [date(2025, 12, 1), date(2026, 1, 1), date(2026, 2, 1), date(2026, 3, 1)])
        self.assertEqual(month_starts(date(2026, 1, 31), 1), [date(2026, 1, 1)])

    def test_rows_match_requested_months(self):
        today = date(2026, 3, 5)
        for months in (1, 2, 6, 12, 24):
            rows = get_cash_flow(months=months, today=today)
            self.assertEqual(len(rows), months)
            self.assertEqual(rows[-1]['month'], '2026-03')

    def test_amounts_land_in_their_month(self):
        Expense.objects.create(description='Diesel', category='logistica', amount=Decimal('300'),
                               date=date(2026, 2, 27))
        Expense.objects.create(description='Renta', category='logistica', amount=Decimal('900'),
                               date=date(2025, 9, 30))
        rows = get_cash_flow(months=2, today=date(2026, 3, 5))
        self.assertEqual([row['month'] for row in rows], ['2026-02', '2026-03'])
        self.assertEqual(rows[0]['expenses'], Decimal('300'))
        self.assertEqual(rows[1]['expenses'], Decimal('0'))
