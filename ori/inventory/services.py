"""
Stock movement rules.

Every change to LotStock goes through record_move so the move ledger and the
per-location balances stay in step.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from ori.catalog.models import Product, ProductLot
from .models import InventoryMove, LotStock

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """A move that would break a stock rule"""


def _lock_stock(lot, location):
    stock, _ = LotStock.objects.select_for_update().get_or_create(
        lot=lot, location=location, defaults={'quantity': Decimal('0')}
    )
    return stock


def _refresh_lot_status(lot):
    total = LotStock.objects.filter(lot=lot).aggregate(total=Sum('quantity'))['total'] or Decimal('0')
    if total <= 0 and lot.status != 'agotado':
        lot.status = 'agotado'
        lot.save(update_fields=['status', 'updated_at'])
    elif total > 0 and lot.status == 'agotado':
        lot.status = 'disponible'
        lot.save(update_fields=['status', 'updated_at'])


def validate_move(move_type, lot, qty, from_location=None, to_location=None, product=None):
    """Check a move request; raises InventoryError with a user-facing message"""
    if move_type not in dict(InventoryMove.MOVE_TYPE_CHOICES):
        raise InventoryError(f"Tipo de movimiento inválido: {move_type}")
    if lot is None:
        raise InventoryError("El lote es obligatorio.")
    if product is not None and lot.product_id != product.id:
        raise InventoryError("El lote no pertenece al producto.")
    if qty is None:
        raise InventoryError("La cantidad es obligatoria.")

    qty = Decimal(str(qty))
    if move_type == 'adjust':
        if qty == 0:
            raise InventoryError("La cantidad del ajuste no puede ser cero.")
        if (from_location is None) == (to_location is None):
            raise InventoryError("Un ajuste requiere exactamente una ubicación.")
    elif qty <= 0:
        raise InventoryError("La cantidad debe ser mayor a cero.")

    if move_type in ('out', 'transfer') and from_location is None:
        raise InventoryError("Se requiere la ubicación de origen.")
    if move_type in ('in', 'transfer') and to_location is None:
        raise InventoryError("Se requiere la ubicación de destino.")
    if move_type == 'transfer' and from_location == to_location:
        raise InventoryError("El origen y el destino deben ser distintos.")
    return qty


def record_move(move_type, lot, qty, user=None, from_location=None, to_location=None,
                unit=None, reference='', note=''):
    """
    Validate and apply an inventory move atomically.

    in       -> +qty at to_location
    out      -> -qty at from_location (stored negative)
    transfer -> -qty at from_location, +qty at to_location
    adjust   -> signed qty at the single location given
    """
    qty = validate_move(move_type, lot, qty, from_location, to_location)

    with transaction.atomic():
        lot = ProductLot.objects.select_for_update().get(pk=lot.pk)

        if move_type in ('out', 'transfer'):
            source = _lock_stock(lot, from_location)
            if qty > source.quantity:
                raise InventoryError(
                    f"Stock insuficiente en {from_location.name}: disponible {source.quantity}, solicitado {qty}."
                )
            source.quantity -= qty
            source.save()

        if move_type in ('in', 'transfer'):
            target = _lock_stock(lot, to_location)
            target.quantity += qty
            target.save()

        if move_type == 'adjust':
            location = to_location or from_location
            stock = _lock_stock(lot, location)
            if stock.quantity + qty < 0:
                raise InventoryError(
                    f"El ajuste dejaría stock negativo en {location.name}: disponible {stock.quantity}."
                )
            stock.quantity += qty
            stock.save()

        move = InventoryMove.objects.create(
            type=move_type,
            product=lot.product,
            lot=lot,
            qty=-qty if move_type == 'out' else qty,
            unit=unit or lot.unit,
            from_location=from_location,
            to_location=to_location,
            reference=reference or '',
            note=note or '',
            user=user,
        )
        _refresh_lot_status(lot)

    logger.info(f"Inventory move {move.id}: {move_type} {qty} of lot {lot.code} ({lot.product.sku})")
    return move


def get_stock_summary(product_id=None, location_id=None):
    """Stock totals grouped by product and location"""
    queryset = LotStock.objects.filter(quantity__gt=0)
    if product_id:
        queryset = queryset.filter(lot__product_id=product_id)
    if location_id:
        queryset = queryset.filter(location_id=location_id)

    rows = (
        queryset.values('lot__product_id', 'lot__product__sku', 'lot__product__name',
                        'lot__product__unit_default', 'location_id', 'location__name')
        .annotate(quantity=Sum('quantity'))
        .order_by('lot__product__name', 'location__name')
    )
    return [
        {
            'product_id': row['lot__product_id'],
            'sku': row['lot__product__sku'],
            'product_name': row['lot__product__name'],
            'unit': row['lot__product__unit_default'],
            'location_id': row['location_id'],
            'location_name': row['location__name'],
            'quantity': row['quantity'],
        }
        for row in rows
    ]


def get_inventory_alerts():
    """
    Low stock: total below the reorder point.
    Over stock: total above max_stock (when set).
    Quarantine: lots held in quarantine.
    """
    totals = {
        row['lot__product_id']: row['total'] or Decimal('0')
        for row in LotStock.objects.values('lot__product_id').annotate(total=Sum('quantity'))
    }

    low_stock = []
    over_stock = []
    for product in Product.objects.filter(is_active=True).order_by('name'):
        total = totals.get(product.id, Decimal('0'))
        entry = {
            'product_id': product.id,
            'sku': product.sku,
            'name': product.name,
            'total_stock': total,
            'reorder_point': product.reorder_point,
            'max_stock': product.max_stock,
        }
        if total < product.reorder_point:
            low_stock.append(entry)
        elif product.max_stock is not None and total > product.max_stock:
            over_stock.append(entry)

    quarantine = [
        {
            'lot_id': lot.id,
            'code': lot.code,
            'product_id': lot.product_id,
            'product_name': lot.product.name,
            'total_stock': lot.get_total_stock(),
        }
        for lot in ProductLot.objects.filter(status='en_cuarentena').select_related('product')
    ]

    return {
        'low_stock': low_stock,
        'over_stock': over_stock,
        'quarantine': quarantine,
        'counts': {
            'low_stock': len(low_stock),
            'over_stock': len(over_stock),
            'quarantine': len(quarantine),
        },
    }


def get_stock_value():
    """Inventory value at cost: sum of quantity x lot unit cost"""
    value = Decimal('0')
    for stock in LotStock.objects.filter(quantity__gt=0).select_related('lot'):
        value += stock.quantity * stock.lot.unit_cost
    return value
