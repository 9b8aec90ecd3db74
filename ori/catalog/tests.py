"""
Test suite for the catalog module
Tests: SKU generation, price conversion, lot creation with initial stock
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.catalog.models import Product, ProductLot
from ori.catalog.utils import convert_price, generate_sku
from ori.inventory.models import LotStock, InventoryMove


class CatalogUtilsTests(TestCase):
    def test_convert_price_ton_to_kg(self):
        self.assertEqual(convert_price(Decimal('25000'), 'ton', 'kg'), Decimal('25'))

    def test_convert_price_kg_to_ton(self):
        self.assertEqual(convert_price(Decimal('25'), 'kg', 'ton'), Decimal('25000'))

    def test_convert_price_same_unit(self):
        self.assertEqual(convert_price('12.5', 'L', 'L'), Decimal('12.5'))

    def test_generate_sku_continues_sequence(self):
        category = TestDataFactory.create_category(code='res')
        TestDataFactory.create_product(sku='RES-0007', category=category)
        TestDataFactory.create_product(sku='RES-ABC', category=category)
        self.assertEqual(generate_sku(category), 'RES-0008')


class ProductAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.category = TestDataFactory.create_category(code='QUI')

    def test_create_product_generates_sku(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Ácido cítrico', 'category': self.category.id, 'unit_default': 'kg', 'min_price': '32.50'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sku'], 'QUI-0001')

    def test_duplicate_sku_rejected(self):
        TestDataFactory.create_product(sku='QUI-0001', category=self.category)
        response = self.client.post('/api/v1/products/', {
            'name': 'Otro', 'sku': 'qui-0001', 'category': self.category.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_max_stock_below_reorder_point_rejected(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Sosa', 'category': self.category.id, 'reorder_point': '100', 'max_stock': '50'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_product_with_lots_deactivates(self):
        product = TestDataFactory.create_product(category=self.category)
        TestDataFactory.create_lot(product=product)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertFalse(product.is_active)

    def test_delete_product_without_lots(self):
        product = TestDataFactory.create_product(category=self.category)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_convert_price_endpoint(self):
        response = self.client.get('/api/v1/products/convert-price/?price=1000&from=ton&to=kg')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['converted']), Decimal('1'))

    def test_convert_price_unknown_unit(self):
        response = self.client.get('/api/v1/products/convert-price/?price=10&from=lb&to=kg')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LotAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product()
        self.location = TestDataFactory.create_location()

    def test_create_lot_with_initial_location_books_stock(self):
        response = self.client.post('/api/v1/lots/', {
            'product': self.product.id,
            'code': 'L-2026-01',
            'unit_cost': '18.50',
            'initial_qty': '500',
            'unit': 'kg',
            'initial_location': self.location.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        lot = ProductLot.objects.get(code='L-2026-01')
        self.assertEqual(LotStock.objects.get(lot=lot, location=self.location).quantity, Decimal('500'))
        self.assertEqual(InventoryMove.objects.filter(lot=lot, type='in').count(), 1)

    def test_lot_with_moves_cannot_be_deleted(self):
        lot = TestDataFactory.create_lot(product=self.product)
        TestDataFactory.add_stock(lot, self.location, 10)
        response = self.client.delete(f'/api/v1/lots/{lot.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
