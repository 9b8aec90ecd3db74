"""
Purchase order workflow: folio generation, kanban moves, board KPIs, receiving
"""
import logging
import uuid
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from .models import PurchaseOrder, PurchaseOrderItem
from ori.catalog.models import ProductLot
from ori.core.cache_signals import suspend_cache_signals
from ori.core.cache_utils import invalidate_products_cache, invalidate_dashboard_cache
from ori.inventory.services import record_move

logger = logging.getLogger(__name__)

CLOSED_STATUSES = ('cancelada', 'facturada')
PENDING_PAYMENT_STATUSES = ('pago_pendiente', 'pago_parcial')
RECEIVABLE_STATUSES = ('enviada', 'confirmada', 'en_transito', 'recibida_parcial')


class PurchasingError(Exception):
    pass


def generate_po_folio():
    folio = f"OC-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while PurchaseOrder.objects.filter(folio=folio).exists():
        folio = f"OC-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return folio


def replace_items(purchase_order, items_data):
    """Replace the order's lines and recompute totals"""
    purchase_order.items.all().delete()
    for item in items_data:
        PurchaseOrderItem.objects.create(
            purchase_order=purchase_order,
            product_id=item.get('product') or None,
            custom_name=item.get('custom_name') or '',
            qty=Decimal(str(item['qty'])),
            unit=item.get('unit') or 'kg',
            unit_cost=Decimal(str(item['unit_cost'])),
        )
    purchase_order.recalculate_totals()


def validate_items_data(items_data):
    """Return a list of error strings for the raw item payload"""
    errors = []
    if not isinstance(items_data, list):
        return ['items must be a list']
    for index, item in enumerate(items_data, start=1):
        if not item.get('product') and not item.get('custom_name'):
            errors.append(f"Item {index}: product or custom_name is required")
        try:
            qty = Decimal(str(item.get('qty')))
            unit_cost = Decimal(str(item.get('unit_cost')))
        except (InvalidOperation, ValueError, TypeError):
            errors.append(f"Item {index}: qty and unit_cost must be numbers")
            continue
        if qty <= 0:
            errors.append(f"Item {index}: qty must be greater than 0")
        if unit_cost < 0:
            errors.append(f"Item {index}: unit_cost cannot be negative")
    return errors


def move_po_status(purchase_order, new_status):
    valid = dict(PurchaseOrder.STATUS_CHOICES)
    if new_status not in valid:
        raise PurchasingError(f"Estado inválido: {new_status}")
    if purchase_order.status == new_status:
        return False
    if purchase_order.status == 'cancelada':
        raise PurchasingError("Una orden cancelada no puede cambiar de estado.")
    purchase_order.status = new_status
    purchase_order.save(update_fields=['status', 'updated_at'])
    return True


def get_purchasing_board(queryset=None):
    queryset = queryset if queryset is not None else PurchaseOrder.objects.all()
    rows = {
        row['status']: row
        for row in queryset.order_by().values('status').annotate(count=Count('id'), value=Sum('total'))
    }

    def total_for(statuses):
        return sum((rows.get(s, {}).get('value') or Decimal('0') for s in statuses), Decimal('0'))

    def count_for(statuses):
        return sum(rows.get(s, {}).get('count', 0) for s in statuses)

    active_statuses = [code for code, _ in PurchaseOrder.STATUS_CHOICES if code not in CLOSED_STATUSES]
    kpis = {
        'active_commitment': total_for(active_statuses),
        'pending_approval': count_for(['por_aprobar']),
        'pending_payment': total_for(PENDING_PAYMENT_STATUSES),
        'in_transit': count_for(['en_transito']),
    }
    columns = [
        {
            'stage': code,
            'label': label,
            'count': rows.get(code, {}).get('count', 0),
            'value': rows.get(code, {}).get('value') or Decimal('0'),
        }
        for code, label in PurchaseOrder.STATUS_CHOICES
    ]
    return columns, kpis


def receive_items(purchase_order, receipts, location, user=None):
    """
    Receive quantities against order lines.

    receipts: [{'item': <item id>, 'qty': <qty>, 'lot_code': optional}]
    Each received catalog line creates a ProductLot and an 'in' move at
    location. Returns the created lots.
    """
    if purchase_order.status not in RECEIVABLE_STATUSES:
        raise PurchasingError(
            f"La orden {purchase_order.folio} no se puede recibir en estado {purchase_order.get_status_display()}."
        )
    if not receipts:
        raise PurchasingError("No hay partidas por recibir.")

    lots = []
    with transaction.atomic(), suspend_cache_signals():
        items = {item.id: item for item in purchase_order.items.select_for_update().select_related('product')}
        for receipt in receipts:
            item = items.get(int(receipt.get('item') or 0))
            if item is None:
                raise PurchasingError(f"La partida {receipt.get('item')} no pertenece a la orden.")
            try:
                qty = Decimal(str(receipt.get('qty')))
            except (InvalidOperation, ValueError, TypeError):
                raise PurchasingError("La cantidad recibida debe ser numérica.")
            if qty <= 0:
                raise PurchasingError("La cantidad recibida debe ser mayor a 0.")

            item.received_qty += qty
            item.save(update_fields=['received_qty'])

            if item.product is None:
                continue

            lot_code = receipt.get('lot_code') or f"{purchase_order.folio}-{item.id}-{item.product.lots.count() + 1}"
            lot = ProductLot.objects.create(
                code=lot_code,
                product=item.product,
                supplier=purchase_order.supplier,
                purchase_order=purchase_order,
                unit_cost=item.unit_cost,
                reception_date=timezone.localdate(),
                initial_qty=qty,
                unit=item.unit,
                status='disponible',
            )
            record_move('in', lot, qty, user=user, to_location=location, unit=item.unit,
                        reference=purchase_order.folio, note='Recepción de orden de compra')
            lots.append(lot)

        purchase_order.status = 'recibida_completa' if purchase_order.is_fully_received() else 'recibida_parcial'
        purchase_order.save(update_fields=['status', 'updated_at'])

    invalidate_products_cache()
    invalidate_dashboard_cache()
    logger.info(f"Received {len(receipts)} line(s) on purchase order {purchase_order.folio}; status {purchase_order.status}")
    return lots
