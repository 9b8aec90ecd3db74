"""
Test suite for the sales module
Tests: quote totals, weight stats, commissions, folios, quote conversion, kanban moves
"""
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.billing.models import Commission
from ori.crm.models import ActivityLog
from ori.sales.models import Quote, SalesOrder
from ori.sales.services import (
    SalesError, get_weight_stats, compute_commission_amount, compute_quote_totals, convert_quote_to_order,
    move_quote_status, generate_quote_folio
)


class WeightStatsTests(TestCase):
    def test_mixed_units(self):
        stats = get_weight_stats([
            {'qty': '2', 'unit': 'ton'},
            {'qty': '500', 'unit': 'kg'},
            {'qty': '3', 'unit': 'unidad'},
        ])
        self.assertEqual(stats['tons'], Decimal('2.5'))
        self.assertEqual(stats['kg'], Decimal('2500'))
        self.assertEqual(stats['liters'], Decimal('2500'))
        self.assertEqual(stats['units'], Decimal('3'))
        self.assertEqual(stats['generic'], Decimal('505'))

    def test_commission_types(self):
        stats = get_weight_stats([{'qty': '2', 'unit': 'ton'}])
        products = Decimal('2000')
        self.assertEqual(compute_commission_amount({'type': 'percentage', 'value': '5'}, products, stats),
                         Decimal('100'))
        self.assertEqual(compute_commission_amount({'type': 'fixed', 'value': '250'}, products, stats),
                         Decimal('250'))
        self.assertEqual(compute_commission_amount({'type': 'per_ton', 'value': '50'}, products, stats),
                         Decimal('100'))
        self.assertEqual(compute_commission_amount({'type': 'per_kg', 'value': '0.1'}, products, stats),
                         Decimal('200.0'))
        self.assertEqual(compute_commission_amount({'type': 'desconocido', 'value': '9'}, products, stats),
                         Decimal('0'))


class QuoteTotalsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.company = TestDataFactory.create_company(owner=self.user)

    def test_products_and_tax_only(self):
        quote = TestDataFactory.create_quote(company=self.company, salesperson=self.user)
        self.assertEqual(quote.items[0]['subtotal'], '2000.00')
        self.assertEqual(quote.totals['products'], '2000.00')
        self.assertEqual(quote.totals['tax'], '320.00')
        self.assertEqual(quote.totals['grand_total'], '2320.00')

    def test_freight_is_taxed_commissions_are_not(self):
        quote = TestDataFactory.create_quote(
            company=self.company,
            salesperson=self.user,
            commissions=[{'user': self.user.id, 'type': 'per_ton', 'value': '50'}],
            freight_rate=Decimal('150'),
            handling=[{'description': 'Maniobra', 'cost_per_unit': '20'}],
        )
        totals = quote.totals
        self.assertEqual(totals['commissions'], '100.00')
        self.assertEqual(totals['freight'], '300.00')
        self.assertEqual(totals['handling'], '40.00')
        self.assertEqual(totals['logistics'], '340.00')
        self.assertEqual(totals['subtotal'], '2440.00')
        # (2000 + 300) * 16%
        self.assertEqual(totals['tax'], '368.00')
        self.assertEqual(totals['grand_total'], '2808.00')

    def test_freight_rate_applies_per_ton(self):
        quote = TestDataFactory.create_quote(company=self.company, salesperson=self.user, freight_rate=Decimal('150'))
        totals = quote.totals
        self.assertEqual(totals['freight'], '300.00')
        self.assertEqual(totals['subtotal'], '2300.00')
        self.assertEqual(totals['tax'], '368.00')
        self.assertEqual(totals['grand_total'], '2668.00')

    def test_disabled_charges_are_ignored(self):
        quote = Quote(items=[{'qty': '1', 'unit': 'ton', 'subtotal': '1000'}], insurance_cost=Decimal('30'),
                      storage_cost=Decimal('10'), tax_rate=Decimal('0'))
        totals = compute_quote_totals(quote)
        self.assertEqual(totals['logistics'], '0.00')
        self.assertEqual(totals['grand_total'], '1000.00')

    def test_save_appends_change_log(self):
        quote = TestDataFactory.create_quote(company=self.company, salesperson=self.user)
        self.assertEqual(len(quote.change_log), 1)
        self.assertEqual(quote.change_log[0]['action'], 'create')
        self.assertEqual(quote.change_log[0]['grand_total'], '2320.00')

    def test_folio_sequence(self):
        year = timezone.now().year
        first = TestDataFactory.create_quote(company=self.company)
        self.assertEqual(first.folio, f'COT-{year}-0001')
        self.assertEqual(generate_quote_folio(), f'COT-{year}-0002')


class QuoteWorkflowTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.seller = TestDataFactory.create_user()
        self.company = TestDataFactory.create_company(owner=self.user)

    def test_convert_creates_order_and_commissions(self):
        quote = TestDataFactory.create_quote(
            company=self.company,
            salesperson=self.seller,
            commissions=[
                {'user': self.seller.id, 'type': 'per_ton', 'value': '50'},
                {'user': self.user.id, 'type': 'percentage', 'value': '2'},
            ],
        )
        order, commissions = convert_quote_to_order(quote, user=self.user)
        self.assertEqual(order.status, 'pendiente')
        self.assertEqual(order.salesperson, self.seller)
        self.assertTrue(order.folio.startswith('OV-'))
        # 2000 products + 140 commissions + 320 tax
        self.assertEqual(order.total, Decimal('2460.00'))
        self.assertEqual(len(commissions), 2)
        amounts = sorted(c.amount for c in commissions)
        self.assertEqual(amounts, [Decimal('40.00'), Decimal('100.00')])
        quote.refresh_from_db()
        self.assertEqual(quote.status, 'aprobada_por_cliente')

    def test_convert_requires_company(self):
        prospect = TestDataFactory.create_prospect(owner=self.user)
        quote = TestDataFactory.create_quote(prospect=prospect)
        with self.assertRaises(SalesError):
            convert_quote_to_order(quote)
        self.assertFalse(SalesOrder.objects.exists())

    def test_convert_twice_fails(self):
        quote = TestDataFactory.create_quote(company=self.company)
        convert_quote_to_order(quote)
        with self.assertRaises(SalesError):
            convert_quote_to_order(quote)

    def test_move_logs_activity(self):
        quote = TestDataFactory.create_quote(company=self.company)
        self.assertTrue(move_quote_status(quote, 'enviada_al_cliente', user=self.user))
        self.assertFalse(move_quote_status(quote, 'enviada_al_cliente', user=self.user))
        activity = ActivityLog.objects.get(company=self.company, type='cambio_estado')
        self.assertIn(quote.folio, activity.description)
        self.assertEqual(quote.change_log[-1]['action'], 'status_change')

    def test_move_invalid_status(self):
        quote = TestDataFactory.create_quote(company=self.company)
        with self.assertRaises(SalesError):
            move_quote_status(quote, 'inexistente')


class SalesAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.company = TestDataFactory.create_company(owner=self.user)

    def test_create_quote_computes_totals(self):
        response = self.client.post('/api/v1/quotes/', {
            'company': self.company.id,
            'items': [{'product_name': 'Polipropileno', 'qty': 3, 'unit': 'ton', 'unit_price': 900}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['totals']['products'], '2700.00')
        self.assertEqual(response.data['salesperson'], self.user.id)

    def test_quote_needs_company_or_prospect(self):
        response = self.client.post('/api/v1/quotes/', {
            'items': [{'product_name': 'Polipropileno', 'qty': 1, 'unit': 'ton', 'unit_price': 900}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quote_rejects_zero_quantity(self):
        response = self.client.post('/api/v1/quotes/', {
            'company': self.company.id,
            'items': [{'product_name': 'Polipropileno', 'qty': 0, 'unit': 'ton', 'unit_price': 900}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_convert_endpoint(self):
        quote = TestDataFactory.create_quote(
            company=self.company,
            salesperson=self.user,
            commissions=[{'user': self.user.id, 'type': 'fixed', 'value': '250'}],
        )
        response = self.client.post(f'/api/v1/quotes/{quote.id}/convert/', format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['commissions_created'], 1)
        self.assertEqual(Commission.objects.get().amount, Decimal('250.00'))

    def test_quote_with_orders_cannot_be_deleted(self):
        quote = TestDataFactory.create_quote(company=self.company, salesperson=self.user)
        convert_quote_to_order(quote)
        response = self.client.delete(f'/api/v1/quotes/{quote.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_order_move(self):
        order = TestDataFactory.create_sales_order(company=self.company, salesperson=self.user)
        response = self.client.post(f'/api/v1/sales-orders/{order.id}/move/', {'status': 'en_preparacion'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'en_preparacion')

    def test_order_move_invalid(self):
        order = TestDataFactory.create_sales_order(company=self.company, salesperson=self.user)
        response = self.client.post(f'/api/v1/sales-orders/{order.id}/move/', {'status': 'perdida'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quote_pipeline_sums_grand_total(self):
        TestDataFactory.create_quote(company=self.company, salesperson=self.user)
        TestDataFactory.create_quote(company=self.company, salesperson=self.user)
        response = self.client.get('/api/v1/quotes/pipeline/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        draft = next(c for c in response.data['columns'] if c['stage'] == 'borrador')
        self.assertEqual(draft['count'], 2)
        self.assertEqual(Decimal(str(draft['value'])), Decimal('4640.00'))
