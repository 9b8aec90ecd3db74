import logging
from datetime import datetime

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from .services import (
    build_sales_dashboard, build_pipeline_summary, build_inventory_summary, build_cash_flow,
    build_receivables_summary, default_period
)
from ori.tasks.services import get_tasks_dashboard, visible_tasks

logger = logging.getLogger(__name__)


def _parse_date(value):
    return datetime.strptime(value, '%Y-%m-%d').date() if value else None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_dashboard(request):
    """Quotes and orders by status, revenue this month and top companies (last 30 days by default)"""
    try:
        date_from = _parse_date(request.query_params.get('date_from'))
        date_to = _parse_date(request.query_params.get('date_to'))
    except ValueError:
        return Response({'error': 'Dates must use YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    date_from, date_to = default_period(date_from, date_to)
    if date_from > date_to:
        return Response({'error': 'date_from must be before date_to'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(build_sales_dashboard(date_from, date_to))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pipeline_summary(request):
    return Response(build_pipeline_summary())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_summary(request):
    return Response(build_inventory_summary())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cash_flow(request):
    try:
        months = int(request.query_params.get('months', 6))
    except ValueError:
        return Response({'error': 'months must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    months = max(1, min(months, 24))
    return Response({'months': months, 'rows': build_cash_flow(months)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def receivables_summary(request):
    return Response(build_receivables_summary())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tasks_summary(request):
    return Response(get_tasks_dashboard(request.user, visible_tasks(request.user)))
