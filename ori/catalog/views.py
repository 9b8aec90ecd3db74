import logging
from decimal import Decimal, InvalidOperation

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.cache import cache
from django.db import transaction
from django.shortcuts import get_object_or_404
from .models import Category, Product, ProductLot
from .serializers import CategorySerializer, ProductSerializer, ProductDetailSerializer, ProductLotSerializer
from .filters import ProductFilter, ProductLotFilter
from .utils import convert_price, UNIT_FACTORS
from ori.core.cache_utils import make_cache_key, PRODUCTS_LIST_PREFIX, PRODUCTS_LIST_CACHE_TTL
from ori.core.utils import create_audit_log, paginated_response

logger = logging.getLogger(__name__)


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.select_related('parent')
        parent = request.query_params.get('parent')
        if parent == 'root':
            categories = categories.filter(parent__isnull=True)
        elif parent:
            categories = categories.filter(parent_id=parent)
        return Response(CategorySerializer(categories, many=True).data)
    else:  # POST
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        return Response(CategorySerializer(category).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if category.products.exists():
            return Response({'error': 'La categoría tiene productos asignados.'}, status=status.HTTP_400_BAD_REQUEST)
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all products or create a new product"""
    if request.method == 'GET':
        cache_key = make_cache_key(PRODUCTS_LIST_PREFIX, **request.query_params.dict())
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            return Response(cached_data)

        queryset = Product.objects.select_related('category')
        filterset = ProductFilter(request.query_params, queryset=queryset)
        queryset = filterset.qs.order_by('name')

        response = paginated_response(request, queryset, ProductSerializer, default_limit=25)
        cache.set(cache_key, response.data, PRODUCTS_LIST_CACHE_TTL)
        return response
    else:  # POST
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(request=request, action='create', model_name='Product', object_id=product.id,
                             object_name=product.name, object_reference=product.sku)
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.select_related('category'), pk=pk)

    if request.method == 'GET':
        return Response(ProductDetailSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        old_price = product.min_price
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            product = serializer.save()
            changes = {}
            if product.min_price != old_price:
                changes['min_price'] = {'old': str(old_price), 'new': str(product.min_price)}
            create_audit_log(request=request, action='update', model_name='Product', object_id=product.id,
                             object_name=product.name, object_reference=product.sku, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if product.lots.exists():
            # Keep history; hide from catalog
            product.is_active = False
            product.save(update_fields=['is_active', 'updated_at'])
            return Response(ProductSerializer(product).data)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_convert_price(request):
    """Convert a unit price: ?price=&from=&to="""
    from_unit = request.query_params.get('from')
    to_unit = request.query_params.get('to')
    if from_unit not in UNIT_FACTORS or to_unit not in UNIT_FACTORS:
        return Response({'error': f"Units must be one of: {', '.join(UNIT_FACTORS)}"}, status=status.HTTP_400_BAD_REQUEST)
    try:
        price = Decimal(request.query_params.get('price', '0'))
    except InvalidOperation:
        return Response({'error': 'Invalid price'}, status=status.HTTP_400_BAD_REQUEST)
    return Response({
        'price': str(price),
        'from': from_unit,
        'to': to_unit,
        'converted': str(convert_price(price, from_unit, to_unit)),
    })


# ProductLot views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def lot_list_create(request):
    """
    List lots or create a lot.

    POST accepts an optional initial_location; the lot's initial quantity is
    then booked there as an inbound move.
    """
    if request.method == 'GET':
        queryset = ProductLot.objects.select_related('product', 'supplier')
        filterset = ProductLotFilter(request.query_params, queryset=queryset)
        return paginated_response(request, filterset.qs.order_by('-created_at'), ProductLotSerializer, default_limit=25)

    from ori.inventory.models import Location
    from ori.inventory.services import InventoryError, record_move

    serializer = ProductLotSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    initial_location = None
    location_id = request.data.get('initial_location')
    if location_id:
        initial_location = get_object_or_404(Location, pk=location_id)

    try:
        with transaction.atomic():
            lot = serializer.save()
            if initial_location and lot.initial_qty > 0:
                record_move('in', lot, lot.initial_qty, user=request.user, to_location=initial_location,
                            reference=f"Lote {lot.code}", note='Stock inicial del lote')
    except InventoryError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='create', model_name='ProductLot', object_id=lot.id,
                     object_name=lot.product.name, object_reference=lot.code)
    lot.refresh_from_db()
    return Response(ProductLotSerializer(lot).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def lot_detail(request, pk):
    """Retrieve, update or delete a lot"""
    lot = get_object_or_404(ProductLot.objects.select_related('product', 'supplier'), pk=pk)

    if request.method == 'GET':
        return Response(ProductLotSerializer(lot).data)
    elif request.method in ('PUT', 'PATCH'):
        old_status = lot.status
        serializer = ProductLotSerializer(lot, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            lot = serializer.save()
            if lot.status != old_status:
                create_audit_log(request=request, action='status_change', model_name='ProductLot', object_id=lot.id,
                                 object_name=lot.product.name, object_reference=lot.code,
                                 changes={'status': {'old': old_status, 'new': lot.status}})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if lot.moves.exists():
            return Response({'error': 'El lote tiene movimientos registrados.'}, status=status.HTTP_400_BAD_REQUEST)
        lot.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
