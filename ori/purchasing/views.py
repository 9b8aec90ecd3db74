import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import Supplier, PurchaseOrder
from .serializers import SupplierSerializer, PurchaseOrderSerializer, ReceiveItemsSerializer
from .services import (
    PurchasingError, replace_items, validate_items_data, move_po_status, get_purchasing_board, receive_items
)
from ori.catalog.serializers import ProductLotSerializer
from ori.core.utils import create_audit_log, paginated_response
from ori.inventory.models import Location
from ori.inventory.services import InventoryError

logger = logging.getLogger(__name__)


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        suppliers = Supplier.objects.all()
        search = request.query_params.get('search')
        rating = request.query_params.get('rating')
        if search:
            suppliers = suppliers.filter(
                Q(name__icontains=search) | Q(rfc__icontains=search) | Q(contact_person__icontains=search)
            )
        if rating:
            suppliers = suppliers.filter(rating=rating)
        return paginated_response(request, suppliers.order_by('name'), SupplierSerializer, default_limit=25)
    serializer = SupplierSerializer(data=request.data)
    if serializer.is_valid():
        supplier = serializer.save()
        create_audit_log(request=request, action='create', model_name='Supplier', object_id=supplier.id,
                         object_name=supplier.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    supplier = get_object_or_404(Supplier, pk=pk)
    if request.method == 'GET':
        return Response(SupplierSerializer(supplier).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if supplier.purchase_orders.exists():
        return Response({'error': 'El proveedor tiene órdenes de compra registradas.'},
                        status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='Supplier', object_id=supplier.id,
                     object_name=supplier.name)
    supplier.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Purchase order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def purchase_order_list_create(request):
    """List purchase orders or create one with nested items"""
    if request.method == 'GET':
        orders = PurchaseOrder.objects.select_related('supplier', 'responsible').prefetch_related('items__product')
        supplier_id = request.query_params.get('supplier')
        status_filter = request.query_params.get('status')
        search = request.query_params.get('search')
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if supplier_id:
            orders = orders.filter(supplier_id=supplier_id)
        if status_filter:
            orders = orders.filter(status=status_filter)
        if search:
            orders = orders.filter(Q(folio__icontains=search) | Q(supplier__name__icontains=search))
        if date_from:
            orders = orders.filter(created_at__date__gte=date_from)
        if date_to:
            orders = orders.filter(created_at__date__lte=date_to)
        return paginated_response(request, orders.order_by('-created_at'), PurchaseOrderSerializer)

    items_data = request.data.get('items', [])
    item_errors = validate_items_data(items_data)
    if item_errors:
        return Response({'items': item_errors}, status=status.HTTP_400_BAD_REQUEST)

    serializer = PurchaseOrderSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            order = serializer.save(created_by=request.user,
                                    responsible=serializer.validated_data.get('responsible') or request.user)
            replace_items(order, items_data)
        create_audit_log(request=request, action='create', model_name='PurchaseOrder', object_id=order.id,
                         object_name=order.folio, object_reference=order.folio,
                         changes={'total': str(order.total), 'items': len(items_data)})
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def purchase_order_detail(request, pk):
    """Retrieve, update (items included) or delete a purchase order"""
    order = get_object_or_404(PurchaseOrder.objects.select_related('supplier'), pk=pk)

    if request.method == 'GET':
        return Response(PurchaseOrderSerializer(order).data)
    elif request.method in ('PUT', 'PATCH'):
        items_data = request.data.get('items')
        if items_data is not None:
            if order.items.filter(received_qty__gt=0).exists():
                return Response({'error': 'No se pueden modificar partidas ya recibidas.'},
                                status=status.HTTP_400_BAD_REQUEST)
            item_errors = validate_items_data(items_data)
            if item_errors:
                return Response({'items': item_errors}, status=status.HTTP_400_BAD_REQUEST)

        data = request.data.copy()
        data.pop('status', None)
        serializer = PurchaseOrderSerializer(order, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            with transaction.atomic():
                order = serializer.save()
                if items_data is not None:
                    replace_items(order, items_data)
                else:
                    order.recalculate_totals()
            create_audit_log(request=request, action='update', model_name='PurchaseOrder', object_id=order.id,
                             object_name=order.folio)
            return Response(PurchaseOrderSerializer(order).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if order.status not in ('borrador', 'cancelada'):
            return Response({'error': 'Solo se pueden eliminar órdenes en borrador o canceladas.'},
                            status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='PurchaseOrder', object_id=order.id,
                         object_name=order.folio)
        order.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def purchase_order_move(request, pk):
    """Kanban move: set the status and record it in the audit log"""
    order = get_object_or_404(PurchaseOrder, pk=pk)
    old_status = order.status
    try:
        moved = move_po_status(order, request.data.get('status'))
    except PurchasingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if moved:
        create_audit_log(request=request, action='status_change', model_name='PurchaseOrder', object_id=order.id,
                         object_name=order.folio, changes={'status': {'old': old_status, 'new': order.status}})
    return Response(PurchaseOrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_order_pipeline(request):
    orders = PurchaseOrder.objects.select_related('supplier')
    columns, kpis = get_purchasing_board(orders)
    for column in columns:
        items = orders.filter(status=column['stage']).order_by('-updated_at')[:100]
        column['items'] = PurchaseOrderSerializer(items, many=True).data
    return Response({'columns': columns, 'kpis': kpis})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def purchase_order_receive(request, pk):
    """Receive order lines into a location, creating lots and stock-in moves"""
    order = get_object_or_404(PurchaseOrder, pk=pk)
    serializer = ReceiveItemsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    location = get_object_or_404(Location, pk=serializer.validated_data['location'])

    try:
        lots = receive_items(order, serializer.validated_data['items'], location, user=request.user)
    except (PurchasingError, InventoryError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='stock_receive', model_name='PurchaseOrder', object_id=order.id,
                     object_name=order.folio, changes={'lots': [lot.code for lot in lots], 'status': order.status})
    return Response({
        'purchase_order': PurchaseOrderSerializer(order).data,
        'lots': ProductLotSerializer(lots, many=True).data,
    })
