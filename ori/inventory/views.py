from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from .models import Location, LotStock, InventoryMove
from .serializers import (
    LocationSerializer, LotStockSerializer, InventoryMoveSerializer, InventoryMoveCreateSerializer
)
from .services import InventoryError, record_move, get_stock_summary, get_inventory_alerts
from ori.core.utils import create_audit_log, paginated_response


# Location views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def location_list_create(request):
    """List all locations or create a new location"""
    if request.method == 'GET':
        locations = Location.objects.all()
        active = request.query_params.get('active')
        if active is not None:
            locations = locations.filter(is_active=active.lower() == 'true')
        type_filter = request.query_params.get('type')
        if type_filter:
            locations = locations.filter(type=type_filter)
        return Response(LocationSerializer(locations, many=True).data)
    else:  # POST
        serializer = LocationSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def location_detail(request, pk):
    """Retrieve, update or delete a location"""
    location = get_object_or_404(Location, pk=pk)

    if request.method == 'GET':
        data = LocationSerializer(location).data
        stock = location.stock_entries.filter(quantity__gt=0).select_related('lot', 'lot__product')
        data['stock'] = LotStockSerializer(stock, many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = LocationSerializer(location, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if location.stock_entries.filter(quantity__gt=0).exists():
            return Response({'error': 'La ubicación tiene stock; transfiérelo antes de eliminarla.'},
                            status=status.HTTP_400_BAD_REQUEST)
        if location.moves_in.exists() or location.moves_out.exists():
            location.is_active = False
            location.save(update_fields=['is_active', 'updated_at'])
            return Response(LocationSerializer(location).data)
        location.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Stock views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_list(request):
    """Lot stock entries with optional filtering"""
    queryset = LotStock.objects.select_related('lot', 'lot__product', 'location')
    product_id = request.query_params.get('product_id', None)
    lot_id = request.query_params.get('lot_id', None)
    location_id = request.query_params.get('location_id', None)

    if product_id:
        queryset = queryset.filter(lot__product_id=product_id)
    if lot_id:
        queryset = queryset.filter(lot_id=lot_id)
    if location_id:
        queryset = queryset.filter(location_id=location_id)
    if request.query_params.get('include_empty') != 'true':
        queryset = queryset.filter(quantity__gt=0)

    return Response(LotStockSerializer(queryset.order_by('lot__product__name', 'location__name'), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_summary(request):
    """Stock totals grouped by product and location"""
    return Response(get_stock_summary(
        product_id=request.query_params.get('product_id'),
        location_id=request.query_params.get('location_id'),
    ))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_alerts(request):
    """Low stock, over stock and quarantined lots"""
    return Response(get_inventory_alerts())


# InventoryMove views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def move_list_create(request):
    """List inventory moves or register a new one"""
    if request.method == 'GET':
        queryset = InventoryMove.objects.select_related('product', 'lot', 'from_location', 'to_location', 'user')

        product_id = request.query_params.get('product_id')
        lot_id = request.query_params.get('lot_id')
        location_id = request.query_params.get('location_id')
        move_type = request.query_params.get('type')
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')

        if product_id:
            queryset = queryset.filter(product_id=product_id)
        if lot_id:
            queryset = queryset.filter(lot_id=lot_id)
        if location_id:
            queryset = queryset.filter(from_location_id=location_id) | queryset.filter(to_location_id=location_id)
        if move_type:
            queryset = queryset.filter(type=move_type)
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)

        return paginated_response(request, queryset.order_by('-created_at', '-id'), InventoryMoveSerializer, default_limit=25)

    serializer = InventoryMoveCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        move = record_move(
            data['type'],
            data['lot'],
            data['qty'],
            user=request.user,
            from_location=data.get('from_location'),
            to_location=data.get('to_location'),
            unit=data.get('unit'),
            reference=data.get('reference', ''),
            note=data.get('note', ''),
        )
    except InventoryError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='stock_move',
        model_name='InventoryMove',
        object_id=move.id,
        object_name=move.product.name,
        object_reference=move.product.sku,
        changes={
            'type': move.type,
            'lot': move.lot.code,
            'qty': str(move.qty),
            'from_location': move.from_location.code if move.from_location else None,
            'to_location': move.to_location.code if move.to_location else None,
        }
    )
    return Response(InventoryMoveSerializer(move).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def move_detail(request, pk):
    """Moves are an append-only ledger; corrections are new adjust moves"""
    move = get_object_or_404(InventoryMove, pk=pk)
    return Response(InventoryMoveSerializer(move).data)
