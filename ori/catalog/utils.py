"""
Utility functions for catalog operations
"""
from decimal import Decimal
import re

# Base unit conversion factors (kg, L and unidad are base units)
UNIT_FACTORS = {
    'ton': Decimal('1000'),
    'kg': Decimal('1'),
    'L': Decimal('1'),
    'unidad': Decimal('1'),
}

SKU_NUMBER_WIDTH = 4


def convert_price(price, from_unit, to_unit):
    """
    Convert a unit price between units.

    A price per ton divided by 1000 gives the price per kg; multiplying by the
    target factor gives the price in the target unit. Unknown units count as 1.
    """
    price = Decimal(str(price or 0))
    if from_unit == to_unit:
        return price
    from_factor = UNIT_FACTORS.get(from_unit, Decimal('1'))
    to_factor = UNIT_FACTORS.get(to_unit, Decimal('1'))
    base_price = price / from_factor
    return base_price * to_factor


def get_max_number_for_prefix(prefix):
    """Get the highest sequence number already used by SKUs with this prefix"""
    from ori.catalog.models import Product

    pattern = re.compile(rf'^{re.escape(prefix)}-(\d+)$')
    max_number = 0
    for sku in Product.objects.filter(sku__startswith=f'{prefix}-').values_list('sku', flat=True):
        match = pattern.match(sku)
        if match:
            max_number = max(max_number, int(match.group(1)))
    return max_number


def generate_sku(category):
    """Generate the next SKU for a category: <CODE>-<NNNN>"""
    prefix = (category.code or 'PRD').upper()
    next_number = get_max_number_for_prefix(prefix) + 1
    return f"{prefix}-{str(next_number).zfill(SKU_NUMBER_WIDTH)}"


def get_stock_by_location(product):
    """Per-location stock totals for a product's lots"""
    from django.db.models import Sum
    from ori.inventory.models import LotStock

    rows = (
        LotStock.objects.filter(lot__product=product)
        .values('location_id', 'location__name')
        .annotate(quantity=Sum('quantity'))
        .order_by('location__name')
    )
    return [
        {
            'location_id': row['location_id'],
            'location_name': row['location__name'],
            'quantity': row['quantity'] or Decimal('0'),
        }
        for row in rows
    ]
