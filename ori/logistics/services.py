"""
Delivery scheduling, freight pricing and delivery progress against sales orders
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from .models import Delivery, FreightPricingRule

logger = logging.getLogger(__name__)


class LogisticsError(Exception):
    pass


def next_delivery_number(sales_order):
    """DEL-<n>, numbered per sales order"""
    n = Delivery.objects.filter(sales_order=sales_order).count() + 1
    while Delivery.objects.filter(sales_order=sales_order, delivery_number=f"DEL-{n}").exists():
        n += 1
    return f"DEL-{n}"


def find_freight_rule(origin, destination, weight_kg):
    return (
        FreightPricingRule.objects
        .filter(
            is_active=True,
            origin__iexact=origin,
            destination__iexact=destination,
            min_weight_kg__lte=weight_kg,
            max_weight_kg__gte=weight_kg,
        )
        .order_by('flat_rate', 'price_per_kg')
        .first()
    )


def quote_freight(origin, destination, weight_kg):
    """Price = flat_rate + price_per_kg * weight for the first matching active rule"""
    weight_kg = Decimal(str(weight_kg))
    rule = find_freight_rule(origin, destination, weight_kg)
    if rule is None:
        return None
    return {
        'rule': rule.id,
        'carrier': rule.carrier_id,
        'carrier_name': rule.carrier.name if rule.carrier else None,
        'weight_kg': weight_kg,
        'flat_rate': rule.flat_rate,
        'price_per_kg': rule.price_per_kg,
        'price': (rule.price_for(weight_kg)).quantize(Decimal('0.01')),
    }


def get_delivery_progress(sales_order):
    ordered = sales_order.get_ordered_qty()
    scheduled = (
        sales_order.deliveries.exclude(status='cancelada').aggregate(total=Sum('qty'))['total'] or Decimal('0')
    )
    remaining = ordered - scheduled
    unit = sales_order.items[0].get('unit', 'unidades') if sales_order.items else 'unidades'

    if remaining == 0:
        status_text = 'Completo'
    elif remaining < 0:
        status_text = f"Excedido por {abs(remaining).normalize():f} {unit}"
    else:
        status_text = f"Faltan {remaining.normalize():f} {unit}"

    progress = min(scheduled / ordered * 100, Decimal('100')) if ordered > 0 else Decimal('0')
    return {
        'ordered_qty': ordered,
        'scheduled_qty': scheduled,
        'remaining_qty': remaining,
        'progress': progress.quantize(Decimal('0.01')),
        'unit': unit,
        'status_text': status_text,
    }


def move_delivery_status(delivery, new_status, user=None):
    """
    Change a delivery's status. Delivering stamps delivered_at; when every
    non-cancelled delivery of the order is delivered and the scheduled
    quantity covers the order, the order becomes 'entregada'.
    """
    valid = dict(Delivery.STATUS_CHOICES)
    if new_status not in valid:
        raise LogisticsError(f"Estado inválido: {new_status}")
    if delivery.status == new_status:
        return False

    with transaction.atomic():
        delivery.status = new_status
        if new_status == 'entregada':
            delivery.delivered_at = timezone.now()
        elif delivery.delivered_at is not None:
            delivery.delivered_at = None
        delivery.save(update_fields=['status', 'delivered_at', 'updated_at'])

        order = delivery.sales_order
        if new_status == 'entregada' and order.status not in ('entregada', 'facturada', 'cancelada'):
            active = order.deliveries.exclude(status='cancelada')
            all_delivered = not active.exclude(status='entregada').exists()
            if all_delivered and get_delivery_progress(order)['remaining_qty'] <= 0:
                order.status = 'entregada'
                order.save(update_fields=['status', 'updated_at'])
                logger.info(f"Sales order {order.folio} fully delivered")
        elif new_status == 'en_transito' and order.status in ('pendiente', 'en_preparacion'):
            order.status = 'en_transito'
            order.save(update_fields=['status', 'updated_at'])

    return True


def get_logistics_dashboard():
    counts = {row['status']: row['count'] for row in Delivery.objects.values('status').annotate(count=Count('id'))}
    today = timezone.localdate()
    return {
        'by_status': [
            {'status': code, 'label': label, 'count': counts.get(code, 0)}
            for code, label in Delivery.STATUS_CHOICES
        ],
        'total': sum(counts.values()),
        'scheduled_today': Delivery.objects.filter(scheduled_date=today, status='programada').count(),
        'late': Delivery.objects.filter(scheduled_date__lt=today, status__in=['programada', 'en_transito']).count(),
        'incidents': counts.get('incidencia', 0),
    }
