"""
Quote pricing and the quote -> sales order workflow.

All arithmetic is done with Decimal; totals are stored on the quote as
strings quantized to cents so they survive the JSON column unchanged.
"""
import logging
import time
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from .models import Quote, SalesOrder

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
KG_PER_TON = Decimal('1000')

COMMISSION_TYPES = ['percentage', 'fixed', 'per_ton', 'per_kg', 'per_liter', 'per_unit']


class SalesError(Exception):
    """Raised when a sales workflow cannot proceed"""


def to_decimal(value):
    if value in (None, ''):
        return Decimal('0')
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal('0')


def normalize_items(items):
    """Recompute each line subtotal as qty x unit_price"""
    normalized = []
    for item in items or []:
        line = dict(item)
        qty = to_decimal(line.get('qty'))
        unit_price = to_decimal(line.get('unit_price'))
        line['subtotal'] = str((qty * unit_price).quantize(CENTS))
        normalized.append(line)
    return normalized


def get_weight_stats(items):
    """
    Aggregate quantities across units.

    ton lines count as q tons, q*1000 kg and q*1000 L; kg and L lines count
    as q/1000 tons and q of both kg and L; anything else is a plain unit.
    """
    stats = {
        'tons': Decimal('0'),
        'kg': Decimal('0'),
        'liters': Decimal('0'),
        'units': Decimal('0'),
        'generic': Decimal('0'),
    }
    for item in items or []:
        qty = to_decimal(item.get('qty'))
        unit = item.get('unit')
        stats['generic'] += qty
        if unit == 'ton':
            stats['tons'] += qty
            stats['kg'] += qty * KG_PER_TON
            stats['liters'] += qty * KG_PER_TON
        elif unit in ('kg', 'L'):
            stats['tons'] += qty / KG_PER_TON
            stats['kg'] += qty
            stats['liters'] += qty
        else:
            stats['units'] += qty
    return stats


def get_weight_multiplier(stats):
    return stats['tons'] if stats['tons'] > 0 else stats['generic']


def compute_commission_amount(commission, products_total, stats):
    value = to_decimal(commission.get('value'))
    commission_type = commission.get('type')
    if commission_type == 'percentage':
        return products_total * value / Decimal('100')
    if commission_type == 'fixed':
        return value
    if commission_type == 'per_ton':
        return stats['tons'] * value
    if commission_type == 'per_kg':
        return stats['kg'] * value
    if commission_type == 'per_liter':
        return stats['liters'] * value
    if commission_type == 'per_unit':
        return stats['units'] * value
    return Decimal('0')


def compute_quote_totals(quote):
    items = quote.items or []
    products = sum((to_decimal(item.get('subtotal')) for item in items), Decimal('0'))
    stats = get_weight_stats(items)
    wm = get_weight_multiplier(stats)

    commissions = sum(
        (compute_commission_amount(c, products, stats) for c in quote.commissions or []),
        Decimal('0'),
    )

    freight = quote.freight_rate * wm
    handling = sum((to_decimal(h.get('cost_per_unit')) * wm for h in quote.handling or []), Decimal('0'))
    insurance = quote.insurance_cost * wm if quote.insurance_enabled else Decimal('0')
    storage = quote.storage_cost * wm if quote.storage_enabled else Decimal('0')
    logistics = freight + handling + insurance + storage

    subtotal = products + commissions + logistics
    # commissions and logistics other than freight are tax exempt
    tax = (products + freight) * to_decimal(quote.tax_rate) / Decimal('100')
    grand_total = subtotal + tax

    values = {
        'products': products,
        'commissions': commissions,
        'freight': freight,
        'handling': handling,
        'insurance': insurance,
        'storage': storage,
        'logistics': logistics,
        'subtotal': subtotal,
        'tax': tax,
        'grand_total': grand_total,
    }
    return {key: str(value.quantize(CENTS)) for key, value in values.items()}


def generate_quote_folio():
    year = timezone.now().year
    prefix = f"COT-{year}-"
    count = Quote.objects.filter(folio__startswith=prefix).count()
    folio = f"{prefix}{count + 1:04d}"
    while Quote.objects.filter(folio=folio).exists():
        count += 1
        folio = f"{prefix}{count + 1:04d}"
    return folio


def save_quote(quote, user=None, action='update'):
    """Recompute totals and append a change-log entry before saving"""
    quote.items = normalize_items(quote.items)
    quote.totals = compute_quote_totals(quote)
    if not quote.folio:
        quote.folio = generate_quote_folio()

    change_log = list(quote.change_log or [])
    change_log.append({
        'timestamp': timezone.now().isoformat(),
        'user': user.username if user else None,
        'action': action,
        'status': quote.status,
        'grand_total': quote.totals['grand_total'],
    })
    quote.change_log = change_log
    quote.save()
    return quote


def move_status(instance, new_status, user=None):
    """Generic kanban move for models with STATUS_CHOICES; returns False on no-op"""
    valid = dict(instance.STATUS_CHOICES)
    if new_status not in valid:
        raise SalesError(f"Estado inválido: {new_status}")
    if instance.status == new_status:
        return False
    instance.status = new_status
    instance.save(update_fields=['status', 'updated_at'])
    return True


def move_quote_status(quote, new_status, user=None):
    from ori.crm.services import log_activity

    old_label = quote.get_status_display()
    if not move_status(quote, new_status, user=user):
        return False

    change_log = list(quote.change_log or [])
    change_log.append({
        'timestamp': timezone.now().isoformat(),
        'user': user.username if user else None,
        'action': 'status_change',
        'status': new_status,
        'grand_total': quote.totals.get('grand_total'),
    })
    quote.change_log = change_log
    quote.save(update_fields=['change_log'])

    if quote.company_id or quote.prospect_id:
        log_activity(
            'cambio_estado',
            f"Cotización {quote.folio}: estado cambiado de {old_label} a {quote.get_status_display()}",
            user=user,
            company=quote.company,
            prospect=quote.prospect,
        )
    return True


def convert_quote_to_order(quote, user=None):
    """Create a pending sales order and its commissions from an approved quote"""
    from ori.billing.models import Commission

    if not quote.company_id:
        raise SalesError("La cotización no tiene una empresa asignada. Convierte el prospecto en empresa primero.")
    if quote.sales_orders.exclude(status='cancelada').exists():
        raise SalesError("La cotización ya fue convertida en orden de venta.")

    totals = compute_quote_totals(quote)
    products_total = to_decimal(totals['products'])
    stats = get_weight_stats(quote.items)

    with transaction.atomic():
        order = SalesOrder.objects.create(
            folio=f"OV-{int(time.time() * 1000)}",
            quote=quote,
            company=quote.company,
            salesperson=quote.salesperson or user,
            status='pendiente',
            items=quote.items,
            total=to_decimal(totals['grand_total']),
            currency=quote.currency,
            tax_rate=quote.tax_rate,
        )

        quote.status = 'aprobada_por_cliente'
        quote.totals = totals
        quote.save(update_fields=['status', 'totals', 'updated_at'])

        commissions = []
        for commission in quote.commissions or []:
            amount = compute_commission_amount(commission, products_total, stats).quantize(CENTS)
            commissions.append(Commission.objects.create(
                sales_order=order,
                quote=quote,
                user_id=commission.get('user'),
                type=commission.get('type') or 'fixed',
                amount=amount,
                status='pendiente',
            ))

    logger.info(f"Quote {quote.folio} converted to sales order {order.folio} ({len(commissions)} commissions)")
    return order, commissions
