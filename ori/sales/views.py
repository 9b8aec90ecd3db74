import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import Quote, Sample, SalesOrder
from .serializers import QuoteSerializer, SampleSerializer, SalesOrderSerializer, StatusMoveSerializer
from .services import (
    SalesError, save_quote, move_status, move_quote_status, convert_quote_to_order, generate_quote_folio
)
from ori.core.utils import create_audit_log, paginated_response, scope_queryset
from ori.crm.services import build_pipeline_board
from ori.logistics.services import get_delivery_progress

logger = logging.getLogger(__name__)


def _board(queryset, model, serializer_class, value_of=None):
    """Status columns for a kanban page; value_of computes the per-card value to sum"""
    columns = build_pipeline_board(queryset, model.STATUS_CHOICES, field='status')
    for column in columns:
        in_column = queryset.filter(status=column['stage'])
        column['items'] = serializer_class(in_column[:100], many=True).data
        if value_of:
            column['value'] = sum((value_of(obj) for obj in in_column), Decimal('0'))
    return columns


def _apply_status_move(request, instance, model_name, mover=move_status):
    serializer = StatusMoveSerializer(data=request.data)
    if not serializer.is_valid():
        return None, Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    old_status = instance.status
    try:
        moved = mover(instance, serializer.validated_data['status'], user=request.user)
    except SalesError as e:
        return None, Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if moved:
        create_audit_log(request=request, action='status_change', model_name=model_name, object_id=instance.id,
                         object_name=str(instance), changes={'status': {'old': old_status, 'new': instance.status}})
    return moved, None


# Quote views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def quote_list_create(request):
    """List quotes visible to the user or create a new quote"""
    if request.method == 'GET':
        queryset = scope_queryset(request.user, Quote.objects.select_related('company', 'prospect', 'salesperson'),
                                  owner_fields=('salesperson', 'created_by'))
        status_filter = request.query_params.get('status')
        company_id = request.query_params.get('company')
        prospect_id = request.query_params.get('prospect')
        search = request.query_params.get('search')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if company_id:
            queryset = queryset.filter(company_id=company_id)
        if prospect_id:
            queryset = queryset.filter(prospect_id=prospect_id)
        if search:
            queryset = queryset.filter(
                Q(folio__icontains=search) | Q(company__name__icontains=search) | Q(prospect__name__icontains=search)
            )
        return paginated_response(request, queryset.order_by('-created_at'), QuoteSerializer, default_limit=25)

    serializer = QuoteSerializer(data=request.data)
    if serializer.is_valid():
        data = dict(serializer.validated_data)
        data['folio'] = data.get('folio') or generate_quote_folio()
        data.setdefault('salesperson', request.user)
        quote = Quote(created_by=request.user, **data)
        save_quote(quote, user=request.user, action='create')
        create_audit_log(request=request, action='create', model_name='Quote', object_id=quote.id,
                         object_name=quote.folio, object_reference=quote.folio)
        return Response(QuoteSerializer(quote).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def quote_detail(request, pk):
    """Retrieve, update (recomputing totals) or delete a quote"""
    quote = get_object_or_404(
        scope_queryset(request.user, Quote.objects.all(), owner_fields=('salesperson', 'created_by')), pk=pk
    )

    if request.method == 'GET':
        return Response(QuoteSerializer(quote).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = QuoteSerializer(quote, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            data = dict(serializer.validated_data)
            data.pop('status', None)
            if not data.get('folio', quote.folio):
                data.pop('folio', None)
            for attr, value in data.items():
                setattr(quote, attr, value)
            save_quote(quote, user=request.user, action='update')
            return Response(QuoteSerializer(quote).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if quote.sales_orders.exists():
            return Response({'error': 'La cotización tiene órdenes de venta asociadas.'},
                            status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='Quote', object_id=quote.id,
                         object_name=quote.folio)
        quote.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quote_move(request, pk):
    quote = get_object_or_404(Quote, pk=pk)
    _, error = _apply_status_move(request, quote, 'Quote', mover=move_quote_status)
    if error:
        return error
    return Response(QuoteSerializer(quote).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quote_pipeline(request):
    queryset = scope_queryset(request.user, Quote.objects.select_related('company', 'prospect'),
                              owner_fields=('salesperson', 'created_by'))
    return Response({'columns': _board(queryset, Quote, QuoteSerializer, value_of=lambda q: q.grand_total)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quote_convert(request, pk):
    """Convert an approved quote into a sales order with its commissions"""
    quote = get_object_or_404(Quote, pk=pk)
    try:
        order, commissions = convert_quote_to_order(quote, user=request.user)
    except SalesError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Error converting quote {quote.id} to order: {str(e)}", exc_info=True)
        return Response({'error': 'Error al crear la orden de venta.'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(request=request, action='quote_convert', model_name='Quote', object_id=quote.id,
                     object_name=quote.folio, changes={'sales_order': order.folio})
    data = SalesOrderSerializer(order).data
    data['commissions_created'] = len(commissions)
    return Response(data, status=status.HTTP_201_CREATED)


# Sample views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sample_list_create(request):
    if request.method == 'GET':
        queryset = Sample.objects.select_related('product', 'company', 'prospect')
        for field in ('status', 'company', 'prospect', 'product'):
            value = request.query_params.get(field)
            if value:
                queryset = queryset.filter(**{field: value})
        return paginated_response(request, queryset.order_by('-created_at'), SampleSerializer)
    serializer = SampleSerializer(data=request.data)
    if serializer.is_valid():
        sample = serializer.save(owner=request.user)
        return Response(SampleSerializer(sample).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sample_detail(request, pk):
    sample = get_object_or_404(Sample, pk=pk)
    if request.method == 'GET':
        return Response(SampleSerializer(sample).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SampleSerializer(sample, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    sample.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sample_move(request, pk):
    sample = get_object_or_404(Sample, pk=pk)
    moved, error = _apply_status_move(request, sample, 'Sample')
    if error:
        return error
    if moved and sample.status == 'enviada' and not sample.sent_at:
        sample.sent_at = sample.updated_at.date()
        sample.save(update_fields=['sent_at'])
    return Response(SampleSerializer(sample).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sample_pipeline(request):
    queryset = Sample.objects.select_related('product', 'company', 'prospect')
    return Response({'columns': _board(queryset, Sample, SampleSerializer)})


# Sales order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    if request.method == 'GET':
        queryset = SalesOrder.objects.select_related('company', 'quote')
        status_filter = request.query_params.get('status')
        company_id = request.query_params.get('company')
        search = request.query_params.get('search')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if company_id:
            queryset = queryset.filter(company_id=company_id)
        if search:
            queryset = queryset.filter(Q(folio__icontains=search) | Q(company__name__icontains=search))
        return paginated_response(request, queryset.order_by('-created_at'), SalesOrderSerializer, default_limit=25)
    serializer = SalesOrderSerializer(data=request.data)
    if serializer.is_valid():
        order = serializer.save()
        create_audit_log(request=request, action='create', model_name='SalesOrder', object_id=order.id,
                         object_name=order.folio)
        return Response(SalesOrderSerializer(order).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve a sales order with its delivery progress, update or delete it"""
    order = get_object_or_404(SalesOrder, pk=pk)
    if request.method == 'GET':
        data = SalesOrderSerializer(order).data
        data['delivery_progress'] = get_delivery_progress(order)
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SalesOrderSerializer(order, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if order.status not in ('pendiente', 'cancelada'):
        return Response({'error': 'Solo se pueden eliminar órdenes pendientes o canceladas.'},
                        status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='SalesOrder', object_id=order.id,
                     object_name=order.folio)
    order.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_move(request, pk):
    order = get_object_or_404(SalesOrder, pk=pk)
    _, error = _apply_status_move(request, order, 'SalesOrder')
    if error:
        return error
    return Response(SalesOrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_pipeline(request):
    queryset = SalesOrder.objects.select_related('company', 'quote')
    return Response({'columns': _board(queryset, SalesOrder, SalesOrderSerializer, value_of=lambda o: o.total)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_delivery_progress(request, pk):
    order = get_object_or_404(SalesOrder, pk=pk)
    return Response(get_delivery_progress(order))
