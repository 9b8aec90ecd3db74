"""
Aggregates behind the dashboard endpoints. Results are cached for
REPORTS_CACHE_TTL and dropped by the cache signals on writes.
"""
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from ori.billing.services import get_cash_flow, get_pending_payments
from ori.core.cache_utils import cached_query, REPORTS_CACHE_TTL, REPORTS_PREFIX, PIPELINE_CACHE_TTL, PIPELINE_PREFIX
from ori.crm.models import Prospect
from ori.crm.services import build_pipeline_board
from ori.inventory.services import get_inventory_alerts, get_stock_value
from ori.sales.models import Quote, SalesOrder

OPEN_QUOTE_STATUSES = ['borrador', 'en_aprobacion_interna', 'ajustes_requeridos', 'lista_para_enviar',
                       'enviada_al_cliente', 'en_negociacion']


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix=REPORTS_PREFIX)
def build_sales_dashboard(date_from, date_to, top=5):
    quotes = Quote.objects.filter(created_at__date__gte=date_from, created_at__date__lte=date_to)
    orders = SalesOrder.objects.filter(created_at__date__gte=date_from, created_at__date__lte=date_to)
    active_orders = orders.exclude(status='cancelada')

    quote_values = {}
    for quote in quotes.only('status', 'totals'):
        quote_values[quote.status] = quote_values.get(quote.status, Decimal('0')) + quote.grand_total
    quote_counts = {row['status']: row['count'] for row in quotes.order_by().values('status').annotate(count=Count('id'))}

    order_rows = {
        row['status']: row
        for row in orders.order_by().values('status').annotate(count=Count('id'), total=Sum('total'))
    }

    month_start = timezone.localdate().replace(day=1)
    revenue_this_month = SalesOrder.objects.exclude(status='cancelada').filter(
        created_at__date__gte=month_start
    ).aggregate(total=Sum('total'))['total'] or Decimal('0')

    top_companies = (
        active_orders.order_by()
        .values('company_id', 'company__name')
        .annotate(total=Sum('total'), orders=Count('id'))
        .order_by('-total')[:top]
    )

    won = quote_counts.get('aprobada_por_cliente', 0)
    decided = won + quote_counts.get('rechazada', 0)

    return {
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'quotes_by_status': [
            {
                'status': code,
                'label': label,
                'count': quote_counts.get(code, 0),
                'value': float(quote_values.get(code, Decimal('0'))),
            }
            for code, label in Quote.STATUS_CHOICES
        ],
        'orders_by_status': [
            {
                'status': code,
                'label': label,
                'count': order_rows.get(code, {}).get('count', 0),
                'total': float(order_rows.get(code, {}).get('total') or 0),
            }
            for code, label in SalesOrder.STATUS_CHOICES
        ],
        'summary': {
            'quotes': sum(quote_counts.values()),
            'open_quotes': sum(quote_counts.get(code, 0) for code in OPEN_QUOTE_STATUSES),
            'orders': active_orders.count(),
            'orders_total': float(active_orders.aggregate(total=Sum('total'))['total'] or 0),
            'revenue_this_month': float(revenue_this_month),
            'win_rate': round(won * 100 / decided, 1) if decided else 0,
        },
        'top_companies': [
            {
                'company_id': row['company_id'],
                'company_name': row['company__name'],
                'orders': row['orders'],
                'total': float(row['total'] or 0),
            }
            for row in top_companies
        ],
    }


@cached_query(cache_ttl=PIPELINE_CACHE_TTL, key_prefix=PIPELINE_PREFIX)
def build_pipeline_summary():
    columns = build_pipeline_board(Prospect.objects.all(), Prospect.STAGE_CHOICES, value_field='est_value')
    open_columns = [column for column in columns if column['stage'] not in ('ganado', 'perdido')]
    return {
        'stages': [dict(column, value=float(column.get('value') or 0)) for column in columns],
        'open_count': sum(column['count'] for column in open_columns),
        'open_value': float(sum((column.get('value') or Decimal('0') for column in open_columns), Decimal('0'))),
    }


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix=REPORTS_PREFIX)
def build_inventory_summary():
    alerts = get_inventory_alerts()
    return {
        'stock_value': float(get_stock_value()),
        'alert_counts': alerts['counts'],
        'low_stock': alerts['low_stock'][:20],
        'quarantine': alerts['quarantine'][:20],
    }


@cached_query(cache_ttl=REPORTS_CACHE_TTL, key_prefix=REPORTS_PREFIX)
def build_cash_flow(months):
    rows = get_cash_flow(months=months)
    return [
        {
            'month': row['month'],
            'invoiced': float(row['invoiced']),
            'collected': float(row['collected']),
            'expenses': float(row['expenses']),
            'net': float(row['collected'] - row['expenses']),
        }
        for row in rows
    ]


def build_receivables_summary():
    rows = get_pending_payments()
    overdue = [row for row in rows if row['is_overdue']]
    return {
        'pending_count': len(rows),
        'pending_total': float(sum((row['balance'] for row in rows), Decimal('0'))),
        'overdue_count': len(overdue),
        'overdue_total': float(sum((row['balance'] for row in overdue), Decimal('0'))),
        'oldest_overdue_days': max((row['days_overdue'] for row in overdue), default=0),
    }


def default_period(date_from=None, date_to=None, days=30):
    date_to = date_to or timezone.localdate()
    date_from = date_from or date_to - timedelta(days=days)
    return date_from, date_to
