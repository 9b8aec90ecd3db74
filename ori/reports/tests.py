"""
Test suite for the reports module
Tests: sales dashboard, pipeline summary, receivables, cash flow, tasks and inventory endpoints
"""
from datetime import timedelta
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.reports.services import build_inventory_summary


class ReportsAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_sales_dashboard(self):
        company = TestDataFactory.create_company(name='Plásticos del Norte')
        TestDataFactory.create_sales_order(company=company, salesperson=self.user)
        TestDataFactory.create_sales_order(company=company, status='cancelada', total=Decimal('999.00'))
        TestDataFactory.create_quote(company=company, status='aprobada_por_cliente')
        TestDataFactory.create_quote(company=company, status='rechazada')

        response = self.client.get('/api/v1/reports/sales-dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['summary']
        self.assertEqual(summary['orders'], 1)
        self.assertEqual(summary['orders_total'], 1160.0)
        self.assertEqual(summary['quotes'], 2)
        self.assertEqual(summary['win_rate'], 50.0)
        self.assertEqual(response.data['top_companies'][0]['company_name'], 'Plásticos del Norte')

    def test_sales_dashboard_bad_dates(self):
        response = self.client.get('/api/v1/reports/sales-dashboard/?date_from=10-03-2025')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/sales-dashboard/?date_from=2025-03-10&date_to=2025-03-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pipeline_summary(self):
        TestDataFactory.create_prospect(est_value=Decimal('1000'))
        TestDataFactory.create_prospect(stage='ganado', est_value=Decimal('500'))
        response = self.client.get('/api/v1/reports/pipeline/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['open_count'], 1)
        self.assertEqual(response.data['open_value'], 1000.0)

    def test_receivables(self):
        today = timezone.localdate()
        TestDataFactory.create_invoice(due_date=today - timedelta(days=5))
        TestDataFactory.create_invoice(due_date=today + timedelta(days=5), total=Decimal('500.00'))
        response = self.client.get('/api/v1/reports/receivables/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pending_count'], 2)
        self.assertEqual(response.data['pending_total'], 1660.0)
        self.assertEqual(response.data['overdue_count'], 1)
        self.assertEqual(response.data['oldest_overdue_days'], 5)

    def test_cash_flow_months(self):
        response = self.client.get('/api/v1/reports/cash-flow/?months=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/cash-flow/?months=99')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['months'], 24)
        self.assertEqual(len(response.data['rows']), 24)
        response = self.client.get('/api/v1/reports/cash-flow/')
        self.assertEqual(response.data['months'], 6)
        self.assertEqual(len(response.data['rows']), 6)
        self.assertEqual(response.data['rows'][-1]['month'], timezone.localdate().strftime('%Y-%m'))

    def test_inventory_and_tasks(self):
        response = self.client.get('/api/v1/reports/inventory-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('stock_value', response.data)
        TestDataFactory.create_task(created_by=self.user, assignees=[self.user])
        response = self.client.get('/api/v1/reports/tasks/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['my_open_tasks'], 1)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/reports/pipeline/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(CACHES={
    'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache', 'LOCATION': 'ori-report-tests'}
})
class ReportCacheInvalidationTests(TestCase):
    def setUp(self):
        cache.clear()
        self.product = TestDataFactory.create_product(reorder_point=Decimal('1'))
        self.lot = TestDataFactory.create_lot(product=self.product, unit_cost=Decimal('10.00'))
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.add_stock(self.lot, TestDataFactory.create_location(), 5)

    def tearDown(self):
        cache.clear()

    def test_lot_cost_change_refreshes_stock_value(self):
        self.assertEqual(build_inventory_summary()['stock_value'], 50.0)
        self.lot.unit_cost = Decimal('20.00')
        with self.captureOnCommitCallbacks(execute=True):
            self.lot.save()
        self.assertEqual(build_inventory_summary()['stock_value'], 100.0)

    def test_reorder_point_change_refreshes_alerts(self):
        self.assertEqual(build_inventory_summary()['low_stock'], [])
        self.product.reorder_point = Decimal('10')
        with self.captureOnCommitCallbacks(execute=True):
            self.product.save()
        low_stock = build_inventory_summary()['low_stock']
        self.assertEqual([row['product_id'] for row in low_stock], [self.product.id])
