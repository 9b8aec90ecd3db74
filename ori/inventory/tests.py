"""
Test suite for the inventory module
Tests: move rules, stock balances, lot status, alerts, stock value
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.inventory.models import LotStock, InventoryMove
from ori.inventory.services import (
    InventoryError, record_move, get_inventory_alerts, get_stock_value
)


class RecordMoveTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.lot = TestDataFactory.create_lot(unit_cost=Decimal('20'))
        self.main = TestDataFactory.create_location(name='Principal')
        self.branch = TestDataFactory.create_location(name='Sucursal')
        TestDataFactory.add_stock(self.lot, self.main, 100)

    def stock(self, location):
        return LotStock.objects.get(lot=self.lot, location=location).quantity

    def test_out_move_is_stored_negative(self):
        move = record_move('out', self.lot, Decimal('30'), user=self.user, from_location=self.main)
        self.assertEqual(move.qty, Decimal('-30'))
        self.assertEqual(self.stock(self.main), Decimal('70'))

    def test_out_more_than_available_fails(self):
        with self.assertRaises(InventoryError):
            record_move('out', self.lot, Decimal('150'), from_location=self.main)
        self.assertEqual(self.stock(self.main), Decimal('100'))

    def test_transfer_moves_between_locations(self):
        record_move('transfer', self.lot, Decimal('40'), from_location=self.main, to_location=self.branch)
        self.assertEqual(self.stock(self.main), Decimal('60'))
        self.assertEqual(self.stock(self.branch), Decimal('40'))

    def test_transfer_to_same_location_fails(self):
        with self.assertRaises(InventoryError):
            record_move('transfer', self.lot, Decimal('1'), from_location=self.main, to_location=self.main)

    def test_adjust_cannot_go_negative(self):
        with self.assertRaises(InventoryError):
            record_move('adjust', self.lot, Decimal('-101'), to_location=self.main)
        record_move('adjust', self.lot, Decimal('-100'), to_location=self.main)
        self.assertEqual(self.stock(self.main), Decimal('0'))

    def test_empty_lot_becomes_agotado_and_recovers(self):
        record_move('out', self.lot, Decimal('100'), from_location=self.main)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.status, 'agotado')
        record_move('in', self.lot, Decimal('5'), to_location=self.main)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.status, 'disponible')

    def test_empty_lot_becomes_agotado_from_any_status(self):
        self.lot.status = 'en_cuarentena'
        self.lot.save()
        record_move('adjust', self.lot, Decimal('-100'), to_location=self.main)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.status, 'agotado')

    def test_zero_quantity_rejected(self):
        with self.assertRaises(InventoryError):
            record_move('in', self.lot, Decimal('0'), to_location=self.main)


class InventoryReportTests(TestCase):
    def test_alerts_and_stock_value(self):
        location = TestDataFactory.create_location()
        low = TestDataFactory.create_product(reorder_point=Decimal('50'))
        high = TestDataFactory.create_product(reorder_point=Decimal('1'), max_stock=Decimal('10'))
        low_lot = TestDataFactory.create_lot(product=low, unit_cost=Decimal('2'))
        high_lot = TestDataFactory.create_lot(product=high, unit_cost=Decimal('3'))
        TestDataFactory.add_stock(low_lot, location, 10)
        TestDataFactory.add_stock(high_lot, location, 20)
        quarantined = TestDataFactory.create_lot(product=high, status='en_cuarentena')

        alerts = get_inventory_alerts()
        self.assertEqual([row['product_id'] for row in alerts['low_stock']], [low.id])
        self.assertEqual([row['product_id'] for row in alerts['over_stock']], [high.id])
        self.assertEqual([row['lot_id'] for row in alerts['quarantine']], [quarantined.id])
        self.assertEqual(get_stock_value(), Decimal('80'))


class InventoryMoveAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.lot = TestDataFactory.create_lot()
        self.location = TestDataFactory.create_location()

    def test_register_in_move(self):
        response = self.client.post('/api/v1/inventory-moves/', {
            'type': 'in', 'product': self.lot.product_id, 'lot': self.lot.id, 'qty': '25',
            'to_location': self.location.id, 'reference': 'OC-1'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(InventoryMove.objects.get().user, self.user)

    def test_lot_of_other_product_rejected(self):
        other = TestDataFactory.create_product()
        response = self.client.post('/api/v1/inventory-moves/', {
            'type': 'in', 'product': other.id, 'lot': self.lot.id, 'qty': '5', 'to_location': self.location.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_out_without_stock_returns_error(self):
        response = self.client.post('/api/v1/inventory-moves/', {
            'type': 'out', 'product': self.lot.product_id, 'lot': self.lot.id, 'qty': '5',
            'from_location': self.location.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_alerts_endpoint(self):
        response = self.client.get('/api/v1/stock/alerts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('counts', response.data)
