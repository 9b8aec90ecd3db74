"""
Test suite for the purchasing module
Tests: folios, totals, item validation, status moves, board KPIs, receiving into stock
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.catalog.models import ProductLot
from ori.inventory.models import InventoryMove
from ori.purchasing.models import PurchaseOrder
from ori.purchasing.services import (
    PurchasingError, generate_po_folio, validate_items_data, move_po_status, get_purchasing_board, receive_items
)


class PurchaseOrderServiceTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(unit='kg')
        self.location = TestDataFactory.create_location()

    def test_folio_format(self):
        folio = generate_po_folio()
        self.assertTrue(folio.startswith('OC-'))
        self.assertEqual(len(folio.split('-')[-1]), 8)

    def test_totals(self):
        po = TestDataFactory.create_purchase_order(user=self.user, items=[
            (self.product, '100', '12.50'),
            (None, '1', '500'),
        ])
        self.assertEqual(po.subtotal, Decimal('1750.00'))
        self.assertEqual(po.tax, Decimal('280.00'))
        self.assertEqual(po.total, Decimal('2030.00'))

    def test_item_validation(self):
        errors = validate_items_data([
            {'product': self.product.id, 'qty': '0', 'unit_cost': '10'},
            {'qty': '1', 'unit_cost': '10'},
            {'custom_name': 'Flete', 'qty': 'x', 'unit_cost': '10'},
        ])
        self.assertEqual(len(errors), 3)
        self.assertIn('Item 1', errors[0])
        self.assertEqual(validate_items_data({'qty': 1}), ['items must be a list'])

    def test_cancelled_order_is_frozen(self):
        po = TestDataFactory.create_purchase_order(user=self.user, status='cancelada')
        with self.assertRaises(PurchasingError):
            move_po_status(po, 'enviada')

    def test_board_kpis(self):
        TestDataFactory.create_purchase_order(user=self.user, status='por_aprobar',
                                              items=[(self.product, '10', '10')])
        TestDataFactory.create_purchase_order(user=self.user, status='pago_pendiente',
                                              items=[(self.product, '10', '100')])
        TestDataFactory.create_purchase_order(user=self.user, status='cancelada',
                                              items=[(self.product, '10', '1000')])
        columns, kpis = get_purchasing_board()
        self.assertEqual(kpis['pending_approval'], 1)
        self.assertEqual(kpis['pending_payment'], Decimal('1160.00'))
        self.assertEqual(kpis['active_commitment'], Decimal('1276.00'))
        self.assertEqual(len(columns), len(PurchaseOrder.STATUS_CHOICES))

    def test_receive_partial_then_complete(self):
        po = TestDataFactory.create_purchase_order(user=self.user, status='confirmada',
                                                   items=[(self.product, '100', '12.50')])
        item = po.items.get()

        lots = receive_items(po, [{'item': item.id, 'qty': '40'}], self.location, user=self.user)
        self.assertEqual(po.status, 'recibida_parcial')
        self.assertEqual(len(lots), 1)
        lot = lots[0]
        self.assertEqual(lot.purchase_order, po)
        self.assertEqual(lot.unit_cost, Decimal('12.50'))
        self.assertEqual(lot.get_total_stock(), Decimal('40'))
        self.assertTrue(InventoryMove.objects.filter(lot=lot, type='in', reference=po.folio).exists())

        receive_items(po, [{'item': item.id, 'qty': '60', 'lot_code': 'L-FINAL'}], self.location, user=self.user)
        self.assertEqual(po.status, 'recibida_completa')
        self.assertTrue(ProductLot.objects.filter(code='L-FINAL', product=self.product).exists())
        item.refresh_from_db()
        self.assertEqual(item.received_qty, Decimal('100'))

    def test_receive_custom_line_creates_no_lot(self):
        po = TestDataFactory.create_purchase_order(user=self.user, status='enviada', items=[(None, '1', '500')])
        lots = receive_items(po, [{'item': po.items.get().id, 'qty': '1'}], self.location)
        self.assertEqual(lots, [])
        self.assertEqual(po.status, 'recibida_completa')

    def test_receive_requires_receivable_status(self):
        po = TestDataFactory.create_purchase_order(user=self.user, status='borrador',
                                                   items=[(self.product, '10', '10')])
        with self.assertRaises(PurchasingError):
            receive_items(po, [{'item': po.items.get().id, 'qty': '1'}], self.location)

    def test_receive_foreign_item_rolls_back(self):
        po = TestDataFactory.create_purchase_order(user=self.user, status='enviada',
                                                   items=[(self.product, '10', '10')])
        item = po.items.get()
        with self.assertRaises(PurchasingError):
            receive_items(po, [{'item': item.id, 'qty': '5'}, {'item': 999999, 'qty': '1'}], self.location)
        item.refresh_from_db()
        self.assertEqual(item.received_qty, Decimal('0'))
        self.assertFalse(ProductLot.objects.filter(purchase_order=po).exists())


class PurchasingAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product()
        self.location = TestDataFactory.create_location()

    def test_create_purchase_order_with_items(self):
        response = self.client.post('/api/v1/purchase-orders/', {
            'supplier': self.supplier.id,
            'items': [{'product': self.product.id, 'qty': '50', 'unit': 'kg', 'unit_cost': '20'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['folio'].startswith('OC-'))
        self.assertEqual(Decimal(str(response.data['total'])), Decimal('1160.00'))
        self.assertEqual(response.data['responsible'], self.user.id)

    def test_create_rejects_bad_items(self):
        response = self.client.post('/api/v1/purchase-orders/', {
            'supplier': self.supplier.id,
            'items': [{'product': self.product.id, 'qty': '-5', 'unit_cost': '20'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_receive_endpoint(self):
        po = TestDataFactory.create_purchase_order(supplier=self.supplier, user=self.user, status='en_transito',
                                                   items=[(self.product, '25', '8')])
        response = self.client.post(f'/api/v1/purchase-orders/{po.id}/receive/', {
            'location': self.location.id,
            'items': [{'item': po.items.get().id, 'qty': '25'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['purchase_order']['status'], 'recibida_completa')
        self.assertEqual(len(response.data['lots']), 1)

    def test_cannot_edit_received_items(self):
        po = TestDataFactory.create_purchase_order(supplier=self.supplier, user=self.user, status='enviada',
                                                   items=[(self.product, '25', '8')])
        receive_items(po, [{'item': po.items.get().id, 'qty': '5'}], self.location)
        response = self.client.patch(f'/api/v1/purchase-orders/{po.id}/', {
            'items': [{'product': self.product.id, 'qty': '30', 'unit_cost': '8'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_only_draft_or_cancelled(self):
        po = TestDataFactory.create_purchase_order(supplier=self.supplier, user=self.user, status='enviada')
        response = self.client.delete(f'/api/v1/purchase-orders/{po.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        po.status = 'borrador'
        po.save()
        response = self.client.delete(f'/api/v1/purchase-orders/{po.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_supplier_with_orders_cannot_be_deleted(self):
        TestDataFactory.create_purchase_order(supplier=self.supplier, user=self.user)
        response = self.client.delete(f'/api/v1/suppliers/{self.supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_move(self):
        po = TestDataFactory.create_purchase_order(supplier=self.supplier, user=self.user)
        response = self.client.post(f'/api/v1/purchase-orders/{po.id}/move/', {'status': 'por_aprobar'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'por_aprobar')
