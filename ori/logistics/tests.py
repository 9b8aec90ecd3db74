"""
Test suite for the logistics module
Tests: delivery numbering, delivery progress, status moves, freight pricing, tracking URLs
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.logistics.models import Delivery, FreightPricingRule
from ori.logistics.services import (
    LogisticsError, next_delivery_number, get_delivery_progress, move_delivery_status, quote_freight
)


def make_delivery(order, qty, status='programada', **kwargs):
    return Delivery.objects.create(
        delivery_number=next_delivery_number(order),
        sales_order=order,
        company=order.company,
        qty=Decimal(str(qty)),
        status=status,
        **kwargs
    )


class DeliveryProgressTests(TestCase):
    def setUp(self):
        self.order = TestDataFactory.create_sales_order()

    def test_no_deliveries(self):
        progress = get_delivery_progress(self.order)
        self.assertEqual(progress['ordered_qty'], Decimal('10'))
        self.assertEqual(progress['progress'], Decimal('0.00'))
        self.assertEqual(progress['status_text'], 'Faltan 10 ton')

    def test_partial(self):
        make_delivery(self.order, '4')
        make_delivery(self.order, '3', status='cancelada')
        progress = get_delivery_progress(self.order)
        self.assertEqual(progress['scheduled_qty'], Decimal('4'))
        self.assertEqual(progress['progress'], Decimal('40.00'))
        self.assertEqual(progress['status_text'], 'Faltan 6 ton')

    def test_complete(self):
        make_delivery(self.order, '10')
        self.assertEqual(get_delivery_progress(self.order)['status_text'], 'Completo')

    def test_exceeded_caps_progress(self):
        make_delivery(self.order, '12.5')
        progress = get_delivery_progress(self.order)
        self.assertEqual(progress['status_text'], 'Excedido por 2.5 ton')
        self.assertEqual(progress['progress'], Decimal('100.00'))

    def test_numbering_per_order(self):
        make_delivery(self.order, '1')
        make_delivery(self.order, '1')
        other = TestDataFactory.create_sales_order(company=self.order.company)
        self.assertEqual(next_delivery_number(self.order), 'DEL-3')
        self.assertEqual(next_delivery_number(other), 'DEL-1')


class DeliveryStatusTests(TestCase):
    def setUp(self):
        self.order = TestDataFactory.create_sales_order()

    def test_in_transit_moves_order(self):
        delivery = make_delivery(self.order, '10')
        move_delivery_status(delivery, 'en_transito')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'en_transito')

    def test_last_delivery_completes_order(self):
        first = make_delivery(self.order, '6')
        second = make_delivery(self.order, '4')
        move_delivery_status(first, 'entregada')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'pendiente')
        self.assertIsNotNone(first.delivered_at)

        move_delivery_status(second, 'entregada')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'entregada')

    def test_short_delivery_keeps_order_open(self):
        delivery = make_delivery(self.order, '5')
        move_delivery_status(delivery, 'entregada')
        self.order.refresh_from_db()
        self.assertNotEqual(self.order.status, 'entregada')

    def test_leaving_delivered_clears_timestamp(self):
        delivery = make_delivery(self.order, '10')
        move_delivery_status(delivery, 'entregada')
        move_delivery_status(delivery, 'incidencia')
        self.assertIsNone(delivery.delivered_at)

    def test_invalid_status(self):
        delivery = make_delivery(self.order, '10')
        with self.assertRaises(LogisticsError):
            move_delivery_status(delivery, 'perdida')
        self.assertFalse(move_delivery_status(delivery, 'programada'))


class FreightPricingTests(TestCase):
    def setUp(self):
        self.carrier = TestDataFactory.create_carrier(name='Fletes Bajío')
        FreightPricingRule.objects.create(carrier=self.carrier, origin='Querétaro', destination='Monterrey',
                                          min_weight_kg=0, max_weight_kg=1000, price_per_kg=Decimal('1.5'),
                                          flat_rate=Decimal('500'))
        FreightPricingRule.objects.create(carrier=self.carrier, origin='Querétaro', destination='Monterrey',
                                          min_weight_kg=1000, max_weight_kg=30000, price_per_kg=Decimal('1.1'),
                                          flat_rate=Decimal('800'))
        FreightPricingRule.objects.create(origin='Querétaro', destination='Monterrey', min_weight_kg=0,
                                          max_weight_kg=30000, flat_rate=Decimal('1'), is_active=False)

    def test_matching_rule(self):
        result = quote_freight('querétaro', 'MONTERREY', '2000')
        self.assertEqual(result['price'], Decimal('3000.00'))
        self.assertEqual(result['carrier_name'], 'Fletes Bajío')

    def test_lightest_bracket(self):
        self.assertEqual(quote_freight('Querétaro', 'Monterrey', '200')['price'], Decimal('800.00'))

    def test_no_rule(self):
        self.assertIsNone(quote_freight('Querétaro', 'Mérida', '200'))

    def test_tracking_url(self):
        carrier = TestDataFactory.create_carrier(tracking_url_template='https://rastreo.test/?guia={tracking}')
        self.assertEqual(carrier.get_tracking_url('ABC123'), 'https://rastreo.test/?guia=ABC123')
        self.assertIsNone(carrier.get_tracking_url(''))


class LogisticsAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.order = TestDataFactory.create_sales_order(salesperson=self.user)

    def test_create_delivery_numbers_and_company(self):
        response = self.client.post('/api/v1/deliveries/', {'sales_order': self.order.id, 'qty': '5'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['delivery_number'], 'DEL-1')
        self.assertEqual(response.data['company'], self.order.company_id)
        self.assertEqual(response.data['status'], 'programada')

    def test_cancelled_order_rejects_deliveries(self):
        self.order.status = 'cancelada'
        self.order.save()
        response = self.client.post('/api/v1/deliveries/', {'sales_order': self.order.id, 'qty': '5'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_move_to_delivered_completes_order(self):
        delivery = make_delivery(self.order, '10')
        response = self.client.post(f'/api/v1/deliveries/{delivery.id}/move/', {'status': 'entregada'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'entregada')

    def test_delivered_cannot_be_deleted(self):
        delivery = make_delivery(self.order, '10', status='entregada')
        response = self.client.delete(f'/api/v1/deliveries/{delivery.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_note(self):
        delivery = make_delivery(self.order, '10')
        response = self.client.post(f'/api/v1/deliveries/{delivery.id}/notes/', {'text': 'Cliente ausente'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['notes'][0]['text'], 'Cliente ausente')

    def test_order_delivery_progress_endpoint(self):
        make_delivery(self.order, '4')
        response = self.client.get(f'/api/v1/sales-orders/{self.order.id}/delivery-progress/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status_text'], 'Faltan 6 ton')

    def test_freight_quote_not_found(self):
        response = self.client.post('/api/v1/freight-quote/', {
            'origin': 'Puebla', 'destination': 'Tijuana', 'weight_kg': '100'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
